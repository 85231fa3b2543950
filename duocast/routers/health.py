"""
Health check endpoint.
"""
from pydantic import BaseModel
from fastapi import APIRouter, Depends

from duocast.config import APP_VERSION
from duocast.services.pipeline import PodcastPipeline, get_pipeline


router = APIRouter(tags=['health'])


class HealthResponse(BaseModel):
    """Health check response schema."""
    status: str
    version: str
    script_provider_configured: bool
    speech_provider_configured: bool
    active_jobs: int


@router.get('/health', response_model=HealthResponse)
async def health_check(pipeline: PodcastPipeline = Depends(get_pipeline)) -> HealthResponse:
    """
    Check server health status.

    Reports whether provider credentials are present and how many jobs are
    in flight. Fast response - no database queries.
    """
    return HealthResponse(
        status='ok',
        version=APP_VERSION,
        script_provider_configured=pipeline.scripts.is_configured,
        speech_provider_configured=pipeline.audio.provider.is_configured,
        active_jobs=pipeline.active_jobs,
    )
