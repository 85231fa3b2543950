"""
Pydantic schemas for Voice API operations.
"""
from typing import List
from pydantic import BaseModel


class VoiceResponse(BaseModel):
    """Schema for voice response."""
    display_name: str
    voice_id: str
    speaker: str
    is_default: bool = False


class VoiceListResponse(BaseModel):
    """Schema for voice list response."""
    voices: List[VoiceResponse]
