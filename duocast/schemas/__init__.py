"""
Pydantic schemas for API request/response validation.
"""
from duocast.schemas.job import (
    PodcastCreate,
    PodcastCreatedResponse,
    PodcastResponse,
    PodcastSettings,
    PodcastStatusResponse,
    Script,
    ScriptSegment,
    Speaker,
    TargetLength,
    Tone,
    VoiceSettings,
)
from duocast.schemas.voice import VoiceResponse, VoiceListResponse
from duocast.schemas.content import ContentAnalysis, ContentAnalysisRequest, ContentResponse

__all__ = [
    'PodcastCreate',
    'PodcastCreatedResponse',
    'PodcastResponse',
    'PodcastSettings',
    'PodcastStatusResponse',
    'Script',
    'ScriptSegment',
    'Speaker',
    'TargetLength',
    'Tone',
    'VoiceSettings',
    'VoiceResponse',
    'VoiceListResponse',
    'ContentAnalysis',
    'ContentAnalysisRequest',
    'ContentResponse',
]
