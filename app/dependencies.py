from fastapi import Request

from app.services.pipeline import AnalysisPipeline


def get_pipeline(request: Request) -> AnalysisPipeline:
    """The pipeline wired at startup; tests replace this via dependency_overrides."""
    return request.app.state.pipeline
