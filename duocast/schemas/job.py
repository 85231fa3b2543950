"""
Pydantic schemas for podcast job API operations.
"""
import enum
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from duocast.config import MIN_CONTENT_LENGTH

MIN_SPEED = 0.7
MAX_SPEED = 1.3


class TargetLength(str, enum.Enum):
    brief = 'brief'
    standard = 'standard'
    detailed = 'detailed'
    indepth = 'indepth'


class Tone(str, enum.Enum):
    professional = 'professional'
    conversational = 'conversational'
    casual = 'casual'
    academic = 'academic'


class Speaker(str, enum.Enum):
    """The two hosts. The male host leads, the female host follows up."""
    male = 'male'
    female = 'female'


class VoiceSettings(BaseModel):
    """Voice choices and speaking speeds for both hosts."""
    male_voice: str = Field('David', description='Display name of the male host voice')
    female_voice: str = Field('Sarah', description='Display name of the female host voice')
    male_speed: float = Field(1.0, ge=MIN_SPEED, le=MAX_SPEED, allow_inf_nan=False)
    female_speed: float = Field(1.0, ge=MIN_SPEED, le=MAX_SPEED, allow_inf_nan=False)

    def voice_for(self, speaker: Speaker) -> str:
        return self.male_voice if speaker == Speaker.male else self.female_voice

    def speed_for(self, speaker: Speaker) -> float:
        return self.male_speed if speaker == Speaker.male else self.female_speed


class PodcastSettings(VoiceSettings):
    """Generation parameters captured with each job."""
    target_length: TargetLength = TargetLength.standard
    tone: Tone = Tone.conversational
    include_intro: bool = True
    add_music: bool = False


class PodcastCreate(PodcastSettings):
    """Schema for submitting a new podcast job."""
    content: str = Field(
        ...,
        min_length=MIN_CONTENT_LENGTH,
        description='Source text to turn into a podcast',
    )

    def to_settings(self) -> PodcastSettings:
        return PodcastSettings(**self.model_dump(exclude={'content'}))


class ScriptSegment(BaseModel):
    """One line of dialogue."""
    speaker: Speaker
    display_name: str
    text: str = Field(..., min_length=1)


class Script(BaseModel):
    """Ordered dialogue plus the provider's duration estimate."""
    title: Optional[str] = None
    segments: List[ScriptSegment] = Field(default_factory=list)
    estimated_duration_seconds: float = 0


class PodcastCreatedResponse(BaseModel):
    """Returned immediately on submission."""
    job_id: str
    status: str


class PodcastStatusResponse(BaseModel):
    """Schema polled by clients while a job runs."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    status: str
    title: str
    generated_script: Script
    audio_ref: Optional[str]
    duration_seconds: Optional[int]


class PodcastResponse(PodcastStatusResponse):
    """Full job record."""
    original_content: str
    settings: PodcastSettings
    created_at: datetime
    completed_at: Optional[datetime]
    error_message: Optional[str]
