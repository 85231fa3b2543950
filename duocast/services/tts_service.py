"""
Podcast audio synthesis through the ElevenLabs text-to-speech API.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import httpx

from duocast.config import (
    AUDIO_DIR,
    ELEVENLABS_API_KEY,
    ELEVENLABS_BASE_URL,
    ELEVENLABS_MODEL_ID,
    TTS_TIMEOUT_SECONDS,
)
from duocast.errors import AudioNotFoundError, AudioStageFatalError, SegmentSynthesisError
from duocast.schemas.job import Script, Speaker, VoiceSettings

logger = logging.getLogger(__name__)

# Display name -> ElevenLabs voice id, per host
VOICE_IDS: Dict[Speaker, Dict[str, str]] = {
    Speaker.male: {
        'David': '21m00Tcm4TlvDq8ikWAM',
        'James': '2EiwWnXFnvU5JabPnv8n',
        'Michael': 'flq6f7yk4E4fJM5XTYuZ',
        'Ryan': 'wViXBPUzp2ZZixB1xQuM',
    },
    Speaker.female: {
        'Sarah': 'EXAVITQu4vr4xnSDxMaL',
        'Emma': 'ThT5KcBeYPX3keUQqHPh',
        'Lisa': 'XB0fDUnXU5powFXDhCwa',
        'Rachel': 'pNInz6obpgDQGcFmaJgB',
    },
}

DEFAULT_VOICES: Dict[Speaker, str] = {
    Speaker.male: 'David',
    Speaker.female: 'Sarah',
}

WORDS_PER_MINUTE = 150

# Stand-in for a segment the provider could not render
SILENT_PLACEHOLDER = bytes(1024)
PLACEHOLDER_DURATION_SECONDS = 1.0

# Responses that mean no further segment can succeed
FATAL_STATUS_CODES = frozenset({401, 402, 403})

AUDIO_REF_PREFIX = '/audio/'


def resolve_voice_id(speaker: Speaker, voice_name: Optional[str]) -> str:
    """Map a voice display name to a provider voice id, falling back to the host default."""
    voices = VOICE_IDS[speaker]
    return voices.get(voice_name or '', voices[DEFAULT_VOICES[speaker]])


def estimate_duration(text: str, speed: float = 1.0) -> float:
    """Estimated seconds to speak ``text`` at ``speed``: words / 150 * 60 / speed."""
    words = len(text.split())
    return words / WORDS_PER_MINUTE * 60 / speed


@dataclass
class SynthesizedAudio:
    """Audio bytes for one segment; duration is None when the provider doesn't report it."""
    data: bytes
    duration: Optional[float] = None


@dataclass
class AudioResult:
    audio_ref: str
    duration: float
    segment_count: int
    degraded_segments: int


class ElevenLabsClient:
    """
    Minimal async client for the ElevenLabs text-to-speech endpoint.

    Sorts provider failures into stage-fatal (credentials, quota) and
    segment-level (everything else).
    """

    def __init__(
        self,
        api_key: Optional[str] = ELEVENLABS_API_KEY,
        base_url: str = ELEVENLABS_BASE_URL,
        model_id: str = ELEVENLABS_MODEL_ID,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.model_id = model_id
        self._http = http_client or httpx.AsyncClient(timeout=TTS_TIMEOUT_SECONDS)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def synthesize(self, text: str, voice_id: str, speed: float) -> SynthesizedAudio:
        if not self.api_key:
            raise AudioStageFatalError('ElevenLabs API key is not configured')

        try:
            response = await self._http.post(
                f'{self.base_url}/text-to-speech/{voice_id}',
                headers={
                    'Accept': 'audio/mpeg',
                    'Content-Type': 'application/json',
                    'xi-api-key': self.api_key,
                },
                json={
                    'text': text,
                    'model_id': self.model_id,
                    'voice_settings': {
                        'stability': 0.5,
                        'similarity_boost': 0.5,
                        'style': 0.0,
                        'use_speaker_boost': True,
                        'speed': speed,
                    },
                },
            )
        except httpx.HTTPError as e:
            raise SegmentSynthesisError(f'ElevenLabs request failed: {e!r}') from e

        if response.status_code >= 400:
            detail = _error_detail(response)
            message = f'ElevenLabs API error {response.status_code}: {detail or response.reason_phrase}'
            if response.status_code in FATAL_STATUS_CODES or detail == 'quota_exceeded':
                raise AudioStageFatalError(message)
            raise SegmentSynthesisError(message)

        if not response.content:
            raise SegmentSynthesisError('ElevenLabs returned an empty audio body')

        return SynthesizedAudio(data=response.content)

    async def aclose(self):
        await self._http.aclose()


def _error_detail(response: httpx.Response) -> Optional[str]:
    """Pull the status string out of an ElevenLabs error body, if present."""
    try:
        body = response.json()
    except ValueError:
        return None
    detail = body.get('detail') if isinstance(body, dict) else None
    if isinstance(detail, dict):
        return detail.get('status') or detail.get('message')
    if isinstance(detail, str):
        return detail
    return None


class AudioSynthesizer:
    """
    Turns a dialogue script into a single audio file.

    Segments are rendered one at a time, in order. A segment that fails with
    SegmentSynthesisError is replaced by a second of silence; an
    AudioStageFatalError aborts the whole stage.
    """

    def __init__(self, provider: Optional[ElevenLabsClient] = None, audio_dir: Optional[Path] = None):
        self.provider = provider or ElevenLabsClient()
        self.audio_dir = Path(audio_dir or AUDIO_DIR)

    async def synthesize_segment(self, text: str, speaker: Speaker, voices: VoiceSettings) -> SynthesizedAudio:
        voice_id = resolve_voice_id(speaker, voices.voice_for(speaker))
        speed = voices.speed_for(speaker)
        audio = await self.provider.synthesize(text, voice_id, speed)
        if audio.duration is None:
            audio.duration = estimate_duration(text, speed)
        return audio

    async def synthesize_podcast(
        self,
        script: Script,
        voices: VoiceSettings,
        job_id: Optional[str] = None,
    ) -> AudioResult:
        """
        Render every segment of ``script`` and write the concatenated audio.

        Returns:
            AudioResult with the artifact reference and total duration.

        Raises:
            AudioStageFatalError: the provider rejected credentials or quota.
        """
        chunks: List[bytes] = []
        total_duration = 0.0
        degraded = 0

        for index, segment in enumerate(script.segments):
            try:
                audio = await self.synthesize_segment(segment.text, segment.speaker, voices)
            except SegmentSynthesisError as e:
                logger.warning(
                    'Job %s segment %d degraded to silence: %s', job_id, index, e
                )
                audio = SynthesizedAudio(
                    data=SILENT_PLACEHOLDER,
                    duration=PLACEHOLDER_DURATION_SECONDS,
                )
                degraded += 1

            chunks.append(audio.data)
            total_duration += audio.duration

        self.audio_dir.mkdir(parents=True, exist_ok=True)
        file_name = f'podcast_{uuid.uuid4()}.mp3'
        output_path = self.audio_dir / file_name
        await asyncio.to_thread(output_path.write_bytes, b''.join(chunks))

        return AudioResult(
            audio_ref=f'{AUDIO_REF_PREFIX}{file_name}',
            duration=total_duration,
            segment_count=len(chunks),
            degraded_segments=degraded,
        )

    def get_audio_path(self, file_name: str) -> Path:
        """
        Locate a generated file by name.

        Raises:
            AudioNotFoundError: name is path-like or no such file exists.
        """
        if not file_name or Path(file_name).name != file_name:
            raise AudioNotFoundError(f'Audio file not found: {file_name}')
        path = self.audio_dir / file_name
        if not path.is_file():
            raise AudioNotFoundError(f'Audio file not found: {file_name}')
        return path

    async def aclose(self):
        await self.provider.aclose()


# Singleton instance
_audio_synthesizer: Optional[AudioSynthesizer] = None


def get_audio_synthesizer() -> AudioSynthesizer:
    """Get the audio synthesizer singleton instance."""
    global _audio_synthesizer
    if _audio_synthesizer is None:
        _audio_synthesizer = AudioSynthesizer()
    return _audio_synthesizer


def reset_audio_synthesizer():
    """Reset the audio synthesizer singleton (for testing)."""
    global _audio_synthesizer
    _audio_synthesizer = None
