"""
FastAPI routers.
"""
from duocast.routers.health import router as health_router
from duocast.routers.voices import router as voices_router
from duocast.routers.podcasts import router as podcasts_router
from duocast.routers.audio import router as audio_router
from duocast.routers.content import router as content_router

__all__ = ['health_router', 'voices_router', 'podcasts_router', 'audio_router', 'content_router']
