from typing import List, Optional, Union


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing."""


class PipelineError(Exception):
    """Base exception for all failures inside the extraction/analysis pipeline."""


class ValidationError(PipelineError):
    """Raised when the request lacks the required input."""


class OcrProcessingError(PipelineError):
    """Raised when the OCR provider reports that it failed to process the document."""

    def __init__(self, details: Optional[Union[str, List[str]]] = None) -> None:
        super().__init__(f"OCR processing failed: {details}")
        self.details = details


class TransportError(PipelineError):
    """Raised when a provider cannot be reached (connection, DNS, timeout)."""


class ProviderError(PipelineError):
    """Raised when a provider answers with an error status or a malformed payload."""


class AnalysisError(PipelineError):
    """Raised when the analysis stage fails for any reason."""
