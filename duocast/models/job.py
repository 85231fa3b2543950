"""
Job model for podcast generation tasks.
"""
import uuid
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, DateTime, Integer, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()

DEFAULT_TITLE = 'Generated Podcast'


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored by SQLite."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def empty_script() -> dict:
    return {'segments': [], 'estimated_duration_seconds': 0}


class JobStatus(str, enum.Enum):
    """Status states for podcast jobs."""
    queued = 'queued'
    generating_script = 'generating_script'
    generating_audio = 'generating_audio'
    completed = 'completed'
    failed = 'failed'

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.completed, JobStatus.failed)


class Job(Base):
    """
    Represents a podcast generation job.

    Attributes:
        id: Unique job identifier (UUID)
        title: Episode title, replaced by the generated one when available
        original_content: The submitted source text
        settings: Generation parameters captured at submission
        generated_script: Dialogue segments and estimated duration
        audio_ref: Reference to the generated audio file
        duration_seconds: Total audio duration
        status: Current job status
        created_at: Job creation timestamp
        completed_at: When the job reached a terminal status
        error_message: Stage and cause if failed
    """
    __tablename__ = 'podcasts'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False, default=DEFAULT_TITLE)
    original_content = Column(Text, nullable=False)
    settings = Column(JSON, nullable=False)
    generated_script = Column(JSON, nullable=False, default=empty_script)
    audio_ref = Column(Text, nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=JobStatus.queued.value, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)
    error_message = Column(Text, nullable=True)

    def __repr__(self):
        return f'<Job {self.id} status={self.status}>'
