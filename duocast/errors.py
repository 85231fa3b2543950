"""
Error types raised by the podcast pipeline and its collaborators.
"""


class DuoCastError(Exception):
    """Base class for all application errors."""


class ContentValidationError(DuoCastError):
    """Submitted or uploaded content is malformed or too short."""


class ScriptGenerationError(DuoCastError):
    """The text-generation provider failed to produce a script."""


class ScriptFormatError(ScriptGenerationError):
    """The provider answered, but not with a usable dialogue script."""


class AudioStageFatalError(DuoCastError):
    """
    The speech provider is unusable for the whole job.

    Raised for missing credentials, rejected credentials and exhausted quota.
    """


class SegmentSynthesisError(DuoCastError):
    """A single dialogue segment could not be synthesized."""


class JobNotFoundError(DuoCastError):
    """No job exists with the requested id."""

    def __init__(self, job_id: str):
        super().__init__(f'Job not found: {job_id}')
        self.job_id = job_id


class AudioNotFoundError(DuoCastError):
    """No audio artifact exists under the requested name."""
