#!/usr/bin/env python3
"""
DuoCast FastAPI Server

Turns articles and documents into two-host audio podcasts.
Provides async API endpoints for job submission, status polling and audio retrieval.
"""
import math
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from duocast.config import APP_NAME, APP_VERSION, SERVER_HOST, SERVER_PORT
from duocast.database import init_db, close_db
from duocast.services.job_store import get_job_store
from duocast.services.pipeline import get_pipeline
from duocast.routers import (
    health_router,
    voices_router,
    podcasts_router,
    audio_router,
    content_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup:
        - Initialize database and create tables
        - Fail jobs a previous run left unfinished
        - Start the podcast pipeline

    Shutdown:
        - Stop the pipeline
        - Close provider and database connections
    """
    print(f'Starting {APP_NAME} v{APP_VERSION}...')

    print('Initializing database...')
    await init_db()

    interrupted = await get_job_store().fail_interrupted()
    if interrupted:
        print(f'Marked {interrupted} interrupted job(s) as failed')

    pipeline = get_pipeline()
    if not pipeline.scripts.is_configured:
        print('OPENAI_API_KEY is not set - script generation will fail')
    if not pipeline.audio.provider.is_configured:
        print('ELEVENLABS_API_KEY is not set - audio synthesis will fail')

    print('Starting podcast pipeline...')
    await pipeline.start()

    print(f'Server ready at http://{SERVER_HOST}:{SERVER_PORT}')
    print('API documentation available at /docs')

    yield

    print('Shutting down...')

    await pipeline.stop()
    await pipeline.audio.aclose()

    await close_db()

    print('Shutdown complete.')


# Create FastAPI application
app = FastAPI(
    title=APP_NAME,
    description='Turns text content into two-host audio podcasts.',
    version=APP_VERSION,
    lifespan=lifespan,
)


def _json_safe(value):
    """Replace NaN and infinities, which JSON cannot carry, with their string form."""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_json_safe(item) for item in value]
    return value


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report invalid requests as 422, echoing the rejected input in a JSON-safe form."""
    detail = _json_safe(jsonable_encoder(exc.errors()))
    return JSONResponse(status_code=422, content={'detail': detail})


# Register routers
app.include_router(health_router)
app.include_router(voices_router)
app.include_router(podcasts_router)
app.include_router(audio_router)
app.include_router(content_router)


if __name__ == '__main__':
    uvicorn.run(
        app,
        host=SERVER_HOST,
        port=SERVER_PORT,
        reload=False,
        log_level='info',
    )
