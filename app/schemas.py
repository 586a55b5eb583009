from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---- OCR.space envelope ----
class OcrParsedResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ParsedText: str


class OcrSpaceResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    IsErroredOnProcessing: bool
    ErrorMessage: Optional[Union[str, List[str]]] = None
    ParsedResults: Optional[List[OcrParsedResult]] = None


# ---- Anthropic Messages envelope ----
class ContentBlock(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    text: Optional[str] = None


class MessagesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: List[ContentBlock]


# ---- API models ----
class AnalyzeTextRequest(BaseModel):
    # usually a string; other JSON values are analysed as their JSON text
    text: Optional[Any] = Field(default=None, examples=["EASTERN POWER DISTRIBUTION COMPANY ..."])


class AnalyzeTextResponse(BaseModel):
    success: bool = True
    analysis: str


class ExtractAndAnalyzeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    extracted_text: str = Field(alias="extractedText")
    analysis: str


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Union[str, List[str]]] = None
