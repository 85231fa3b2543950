"""
Voice endpoints.
"""
from fastapi import APIRouter

from duocast.schemas.voice import VoiceResponse, VoiceListResponse
from duocast.services.tts_service import DEFAULT_VOICES, VOICE_IDS


router = APIRouter(prefix='/voices', tags=['voices'])


@router.get('', response_model=VoiceListResponse)
async def list_voices() -> VoiceListResponse:
    """
    List the voices available to each host.

    Unknown voice names in a submission fall back to the host's default.
    """
    return VoiceListResponse(
        voices=[
            VoiceResponse(
                display_name=name,
                voice_id=voice_id,
                speaker=speaker.value,
                is_default=name == DEFAULT_VOICES[speaker],
            )
            for speaker, voices in VOICE_IDS.items()
            for name, voice_id in voices.items()
        ]
    )
