"""
Pytest fixtures for testing.
"""
import asyncio
import json
from types import SimpleNamespace
from typing import AsyncGenerator
from unittest.mock import MagicMock, AsyncMock

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from duocast.models import Base
from duocast.schemas.job import PodcastSettings
from duocast.services.job_store import JobStore, get_job_store, reset_job_store
from duocast.services.pipeline import PodcastPipeline, get_pipeline, reset_pipeline
from duocast.services.script_service import ScriptSynthesizer, get_script_synthesizer, reset_script_synthesizer
from duocast.services.tts_service import (
    AudioSynthesizer,
    ElevenLabsClient,
    get_audio_synthesizer,
    reset_audio_synthesizer,
)


ARTICLE = (
    'Researchers have found that urban green spaces lower summer temperatures '
    'by several degrees. The study tracked forty cities over ten years and '
    'compared neighbourhoods with and without parks. Trees provided most of the '
    'cooling effect, while lawns contributed little. City planners are now '
    'using the results to decide where new parks should go, prioritising '
    'dense districts with few existing trees. Critics note that maintenance '
    'costs are rarely included in these plans, and that water use during '
    'droughts can be significant for large parks in dry climates.'
)

SCRIPT_PAYLOAD = {
    'title': 'Cooling Cities with Parks',
    'segments': [
        {'speaker': 'male', 'name': 'David', 'text': 'Welcome back. Today we are talking about parks and heat.'},
        {'speaker': 'female', 'name': 'Sarah', 'text': 'Why do trees matter so much more than lawns?'},
        {'speaker': 'male', 'name': 'David', 'text': 'Shade and evaporation do most of the work.'},
    ],
    'estimatedDuration': 20,
}


def make_completion(content):
    """Build an object shaped like an OpenAI chat completion."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


class FakeElevenLabs:
    """
    httpx MockTransport handler standing in for the ElevenLabs API.

    Returns distinct audio bytes per call unless told to fail.
    """

    def __init__(self):
        self.requests = []
        self.failures = {}
        self.fail_all = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        index = len(self.requests)
        self.requests.append(request)

        failure = self.fail_all or self.failures.get(index)
        if failure:
            status_code, body = failure
            return httpx.Response(status_code, json=body)

        return httpx.Response(
            200,
            content=f'AUDIO-{index};'.encode(),
            headers={'content-type': 'audio/mpeg'},
        )

    def payload(self, index):
        return json.loads(self.requests[index].content)


@pytest.fixture
def settings():
    return PodcastSettings()


@pytest.fixture
def article():
    return ARTICLE


@pytest_asyncio.fixture(scope='function')
async def test_engine(tmp_path):
    """Create a test database engine backed by a fresh SQLite file."""
    engine = create_async_engine(f'sqlite+aiosqlite:///{tmp_path / "test.db"}', echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def job_store(session_factory):
    return JobStore(session_factory)


@pytest.fixture
def openai_client():
    """Mock AsyncOpenAI client returning a valid script."""
    client = MagicMock()
    client.chat.completions.create = AsyncMock(
        return_value=make_completion(json.dumps(SCRIPT_PAYLOAD))
    )
    return client


@pytest.fixture
def script_synthesizer(openai_client):
    return ScriptSynthesizer(client=openai_client, model='test-model')


@pytest.fixture
def elevenlabs():
    return FakeElevenLabs()


@pytest_asyncio.fixture
async def audio_synthesizer(elevenlabs, tmp_path) -> AsyncGenerator[AudioSynthesizer, None]:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(elevenlabs))
    provider = ElevenLabsClient(
        api_key='test-key',
        base_url='https://elevenlabs.test/v1',
        http_client=http_client,
    )
    synthesizer = AudioSynthesizer(provider=provider, audio_dir=tmp_path / 'audio')
    yield synthesizer
    await synthesizer.aclose()


@pytest_asyncio.fixture
async def pipeline(job_store, script_synthesizer, audio_synthesizer):
    pipeline = PodcastPipeline(
        store=job_store,
        scripts=script_synthesizer,
        audio=audio_synthesizer,
        max_concurrent=4,
        script_timeout=5,
        audio_timeout=5,
    )
    await pipeline.start()
    yield pipeline
    await pipeline.stop()


@pytest_asyncio.fixture
async def client(pipeline, job_store, script_synthesizer, audio_synthesizer):
    """Create a test client with mocked dependencies."""
    reset_job_store()
    reset_pipeline()
    reset_script_synthesizer()
    reset_audio_synthesizer()

    # Import app after resetting singletons
    from server import app

    app.dependency_overrides[get_job_store] = lambda: job_store
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_script_synthesizer] = lambda: script_synthesizer
    app.dependency_overrides[get_audio_synthesizer] = lambda: audio_synthesizer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as client:
        yield client

    app.dependency_overrides.clear()
    reset_job_store()
    reset_pipeline()
    reset_script_synthesizer()
    reset_audio_synthesizer()


async def wait_for_terminal(client, job_id, polls=100, interval=0.02):
    """Poll the status endpoint until the job completes or fails."""
    for _ in range(polls):
        response = await client.get(f'/podcasts/{job_id}/status')
        data = response.json()
        if data['status'] in ('completed', 'failed'):
            return data
        await asyncio.sleep(interval)
    raise AssertionError(f'Job {job_id} did not finish after {polls} polls')


@pytest.fixture
def poll_until_done():
    return wait_for_terminal


@pytest.fixture
def completion():
    return make_completion


@pytest.fixture
def script_payload():
    return json.loads(json.dumps(SCRIPT_PAYLOAD))
