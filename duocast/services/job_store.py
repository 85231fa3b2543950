"""
Persistent store for podcast jobs.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update as sql_update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from duocast.config import RECENT_JOBS_LIMIT
from duocast.errors import JobNotFoundError
from duocast.models.job import Job, JobStatus, empty_script, utcnow

logger = logging.getLogger(__name__)

# Fields the pipeline may change after creation
MUTABLE_FIELDS = frozenset({
    'title',
    'generated_script',
    'audio_ref',
    'duration_seconds',
    'status',
    'completed_at',
    'error_message',
})


class JobStore:
    """
    CRUD and listing over podcast jobs.

    Every call opens its own session and commits before returning, so a
    status change is on disk by the time the caller continues. Updates touch
    a single row and never hold a transaction open across provider calls.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def create(
        self,
        original_content: str,
        settings: Dict[str, Any],
        title: Optional[str] = None,
        status: JobStatus = JobStatus.queued,
    ) -> Job:
        """Insert a new job and return it with its assigned id."""
        job = Job(
            original_content=original_content,
            settings=settings,
            generated_script=empty_script(),
            audio_ref=None,
            duration_seconds=None,
            status=JobStatus(status).value,
        )
        if title:
            job.title = title

        async with self._session_factory() as session:
            session.add(job)
            await session.commit()
            await session.refresh(job)

        logger.info('Created job %s', job.id)
        return job

    async def get(self, job_id: str) -> Job:
        async with self._session_factory() as session:
            return await self._fetch(session, job_id)

    async def list_recent(self, limit: int = RECENT_JOBS_LIMIT) -> List[Job]:
        """Return at most ``limit`` jobs, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(Job)
                .order_by(Job.created_at.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    async def update(self, job_id: str, **fields: Any) -> Job:
        """
        Shallow-merge ``fields`` into the job.

        Terminal jobs are left untouched. Moving into a terminal status
        stamps ``completed_at``.
        """
        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f'Cannot update job fields: {", ".join(sorted(unknown))}')

        if 'status' in fields:
            status = JobStatus(fields['status'])
            fields['status'] = status.value
            if status.is_terminal:
                fields.setdefault('completed_at', utcnow())

        async with self._session_factory() as session:
            job = await self._fetch(session, job_id)

            if JobStatus(job.status).is_terminal:
                logger.warning(
                    'Ignoring update to job %s in terminal status %s', job_id, job.status
                )
                return job

            for name, value in fields.items():
                setattr(job, name, value)
            await session.commit()

        return job

    async def set_status(self, job_id: str, status: JobStatus) -> None:
        await self.update(job_id, status=status)

    async def fail_interrupted(self) -> int:
        """Fail jobs that a previous process left in a non-terminal status."""
        running = [
            JobStatus.queued.value,
            JobStatus.generating_script.value,
            JobStatus.generating_audio.value,
        ]
        async with self._session_factory() as session:
            result = await session.execute(
                sql_update(Job)
                .where(Job.status.in_(running))
                .values(
                    status=JobStatus.failed.value,
                    completed_at=utcnow(),
                    error_message='Interrupted by server restart',
                )
            )
            await session.commit()

        if result.rowcount:
            logger.warning('Marked %d interrupted job(s) as failed', result.rowcount)
        return result.rowcount

    async def _fetch(self, session: AsyncSession, job_id: str) -> Job:
        result = await session.execute(select(Job).where(Job.id == job_id))
        job = result.scalar_one_or_none()
        if job is None:
            raise JobNotFoundError(job_id)
        return job


# Singleton instance
_job_store: Optional[JobStore] = None


def get_job_store() -> JobStore:
    """Get the job store singleton bound to the application database."""
    global _job_store
    if _job_store is None:
        from duocast.database import async_session_factory
        _job_store = JobStore(async_session_factory)
    return _job_store


def reset_job_store():
    """Reset the job store singleton (for testing)."""
    global _job_store
    _job_store = None
