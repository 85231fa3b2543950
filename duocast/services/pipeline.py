"""
Background pipeline that turns submitted content into a finished podcast.
"""
import asyncio
import logging
from typing import Optional, Set

from duocast.config import (
    AUDIO_STAGE_TIMEOUT_SECONDS,
    MAX_CONCURRENT_JOBS,
    SCRIPT_STAGE_TIMEOUT_SECONDS,
)
from duocast.models.job import Job, JobStatus
from duocast.schemas.job import PodcastCreate, PodcastSettings
from duocast.services.job_store import JobStore, get_job_store
from duocast.services.script_service import ScriptSynthesizer, get_script_synthesizer
from duocast.services.tts_service import AudioSynthesizer, get_audio_synthesizer

logger = logging.getLogger(__name__)


class PodcastPipeline:
    """
    Drives jobs through queued -> generating_script -> generating_audio -> completed.

    Each job runs in its own asyncio task. Stages of one job run strictly in
    order; different jobs run concurrently up to ``max_concurrent``. Any error
    ends the job as failed, it never escapes the task.
    """

    def __init__(
        self,
        store: JobStore,
        scripts: ScriptSynthesizer,
        audio: AudioSynthesizer,
        max_concurrent: int = MAX_CONCURRENT_JOBS,
        script_timeout: float = SCRIPT_STAGE_TIMEOUT_SECONDS,
        audio_timeout: float = AUDIO_STAGE_TIMEOUT_SECONDS,
    ):
        self.store = store
        self.scripts = scripts
        self.audio = audio
        self.script_timeout = script_timeout
        self.audio_timeout = audio_timeout
        self._slots = asyncio.Semaphore(max_concurrent)
        self._tasks: Set[asyncio.Task] = set()
        self._running = False

    @property
    def active_jobs(self) -> int:
        return len(self._tasks)

    async def start(self):
        """Start accepting jobs."""
        self._running = True

    async def stop(self, timeout: float = 5.0):
        """
        Stop accepting jobs and wait briefly for in-flight ones.

        Jobs still running after ``timeout`` are cancelled and marked failed.
        Jobs submitted after this stay queued until the next startup fails them.
        """
        self._running = False
        if not self._tasks:
            return

        tasks = list(self._tasks)
        done, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning('Cancelled %d unfinished job(s) on shutdown', len(pending))

    async def submit(self, request: PodcastCreate) -> Job:
        """Create a queued job for ``request`` and schedule it. Does not wait for it."""
        settings = request.to_settings()
        job = await self.store.create(
            original_content=request.content,
            settings=settings.model_dump(mode='json'),
        )
        self.enqueue(job.id)
        return job

    def enqueue(self, job_id: str) -> Optional[asyncio.Task]:
        """Schedule ``job_id`` on its own task. Returns None once the pipeline is stopped."""
        if not self._running:
            logger.warning('Pipeline stopped, job %s left queued', job_id)
            return None

        task = asyncio.create_task(self._run_with_slot(job_id), name=f'podcast-{job_id}')
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_with_slot(self, job_id: str):
        async with self._slots:
            await self.run(job_id)

    async def run(self, job_id: str):
        """Process a single job to a terminal status."""
        stage = 'load'
        try:
            job = await self.store.get(job_id)
            if job.status != JobStatus.queued.value:
                logger.warning('Job %s is not queued (status: %s)', job_id, job.status)
                return

            settings = PodcastSettings.model_validate(job.settings)

            stage = 'script'
            await self.store.set_status(job_id, JobStatus.generating_script)
            script = await asyncio.wait_for(
                self.scripts.generate_script(job.original_content, settings),
                timeout=self.script_timeout,
            )

            fields = {
                'generated_script': script.model_dump(mode='json', exclude={'title'}),
                'status': JobStatus.generating_audio,
            }
            if script.title:
                fields['title'] = script.title
            await self.store.update(job_id, **fields)

            stage = 'audio'
            result = await asyncio.wait_for(
                self.audio.synthesize_podcast(script, settings, job_id=job_id),
                timeout=self.audio_timeout,
            )

            await self.store.update(
                job_id,
                audio_ref=result.audio_ref,
                duration_seconds=round(result.duration),
                status=JobStatus.completed,
            )
            logger.info(
                'Job %s completed: %d segments (%d degraded), %ds',
                job_id,
                result.segment_count,
                result.degraded_segments,
                round(result.duration),
            )

        except asyncio.CancelledError:
            await self._fail(job_id, stage, 'Cancelled during shutdown')
            raise
        except asyncio.TimeoutError:
            logger.error('Job %s timed out during %s stage', job_id, stage)
            await self._fail(job_id, stage, f'{stage} stage timed out')
        except Exception as e:
            logger.exception('Job %s failed during %s stage', job_id, stage)
            await self._fail(job_id, stage, f'{stage} stage failed: {e}')

    async def _fail(self, job_id: str, stage: str, message: str):
        try:
            await self.store.update(job_id, status=JobStatus.failed, error_message=message)
        except Exception:
            logger.exception('Could not mark job %s failed after %s stage', job_id, stage)


# Singleton instance
_pipeline: Optional[PodcastPipeline] = None


def get_pipeline() -> PodcastPipeline:
    """Get the podcast pipeline singleton instance."""
    global _pipeline
    if _pipeline is None:
        _pipeline = PodcastPipeline(
            store=get_job_store(),
            scripts=get_script_synthesizer(),
            audio=get_audio_synthesizer(),
        )
    return _pipeline


def reset_pipeline():
    """Reset the podcast pipeline singleton (for testing)."""
    global _pipeline
    _pipeline = None
