"""
Podcast job endpoints.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from duocast.config import RECENT_JOBS_LIMIT
from duocast.errors import JobNotFoundError
from duocast.schemas.job import (
    PodcastCreate,
    PodcastCreatedResponse,
    PodcastResponse,
    PodcastStatusResponse,
)
from duocast.services.job_store import JobStore, get_job_store
from duocast.services.pipeline import PodcastPipeline, get_pipeline


router = APIRouter(prefix='/podcasts', tags=['podcasts'])


@router.post('', response_model=PodcastCreatedResponse, status_code=202)
async def create_podcast(
    request: PodcastCreate,
    pipeline: PodcastPipeline = Depends(get_pipeline),
) -> PodcastCreatedResponse:
    """
    Submit content for podcast generation.

    Returns immediately with the job ID and queued status.
    Script and audio are generated in the background.
    """
    job = await pipeline.submit(request)
    return PodcastCreatedResponse(job_id=job.id, status=job.status)


@router.get('/recent', response_model=List[PodcastResponse])
async def list_recent_podcasts(
    limit: int = Query(default=RECENT_JOBS_LIMIT, ge=1, le=RECENT_JOBS_LIMIT),
    store: JobStore = Depends(get_job_store),
) -> List[PodcastResponse]:
    """List the most recent podcasts, newest first."""
    jobs = await store.list_recent(limit)
    return [PodcastResponse.model_validate(job) for job in jobs]


@router.get('/{job_id}/status', response_model=PodcastStatusResponse)
async def get_podcast_status(
    job_id: str,
    store: JobStore = Depends(get_job_store),
) -> PodcastStatusResponse:
    """Poll the status, script and audio reference of a job."""
    try:
        job = await store.get(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return PodcastStatusResponse.model_validate(job)


@router.get('/{job_id}', response_model=PodcastResponse)
async def get_podcast(
    job_id: str,
    store: JobStore = Depends(get_job_store),
) -> PodcastResponse:
    """Get the full record for a job, including settings and any error."""
    try:
        job = await store.get(job_id)
    except JobNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return PodcastResponse.model_validate(job)
