"""
API Layer Tests

Tests for podcast, audio and voice endpoints.
"""
import json

import pytest

from duocast.models.job import JobStatus
from duocast.services.tts_service import VOICE_IDS


class TestVoiceEndpoints:
    """Tests for /voices endpoints."""

    @pytest.mark.asyncio
    async def test_list_voices(self, client):
        response = await client.get('/voices')

        assert response.status_code == 200
        voices = response.json()['voices']
        assert len(voices) == sum(len(v) for v in VOICE_IDS.values())

    @pytest.mark.asyncio
    async def test_one_default_voice_per_host(self, client):
        response = await client.get('/voices')
        defaults = {v['speaker']: v['display_name'] for v in response.json()['voices'] if v['is_default']}

        assert defaults == {'male': 'David', 'female': 'Sarah'}


class TestSubmission:
    """Tests for POST /podcasts."""

    @pytest.mark.asyncio
    async def test_submit_returns_job_id_and_queued(self, client, pipeline, article):
        pipeline.enqueue = lambda job_id: None

        response = await client.post('/podcasts', json={'content': article})

        assert response.status_code == 202
        data = response.json()
        assert data['status'] == 'queued'
        assert data['job_id']

    @pytest.mark.asyncio
    async def test_new_job_has_no_audio(self, client, pipeline, article):
        pipeline.enqueue = lambda job_id: None
        job_id = (await client.post('/podcasts', json={'content': article})).json()['job_id']

        response = await client.get(f'/podcasts/{job_id}/status')

        data = response.json()
        assert data['status'] == JobStatus.queued.value
        assert data['audio_ref'] is None
        assert data['duration_seconds'] is None
        assert data['generated_script']['segments'] == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize('length', [0, 50, 99])
    async def test_short_content_rejected(self, client, job_store, length):
        response = await client.post('/podcasts', json={'content': 'x' * length})

        assert response.status_code == 422
        assert await job_store.list_recent() == []

    @pytest.mark.asyncio
    async def test_content_required(self, client):
        response = await client.post('/podcasts', json={})

        assert response.status_code == 422

    @pytest.mark.asyncio
    @pytest.mark.parametrize('field,value', [
        ('male_speed', 0.69),
        ('male_speed', 1.31),
        ('female_speed', 0.5),
        ('female_speed', 2.0),
    ])
    async def test_speed_out_of_range_rejected(self, client, job_store, article, field, value):
        response = await client.post('/podcasts', json={'content': article, field: value})

        assert response.status_code == 422
        assert await job_store.list_recent() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize('value', ['NaN', 'Infinity', '-Infinity'])
    async def test_non_finite_speed_rejected(self, client, job_store, article, value):
        body = json.dumps({'content': article})[:-1] + f', "male_speed": {value}}}'

        response = await client.post(
            '/podcasts',
            content=body,
            headers={'Content-Type': 'application/json'},
        )

        assert response.status_code == 422
        assert response.json()['detail'][0]['loc'] == ['body', 'male_speed']
        assert await job_store.list_recent() == []

    @pytest.mark.asyncio
    async def test_speed_bounds_accepted(self, client, pipeline, article):
        pipeline.enqueue = lambda job_id: None

        response = await client.post('/podcasts', json={
            'content': article,
            'male_speed': 0.7,
            'female_speed': 1.3,
        })

        assert response.status_code == 202

    @pytest.mark.asyncio
    @pytest.mark.parametrize('field,value', [
        ('target_length', 'epic'),
        ('tone', 'angry'),
    ])
    async def test_unknown_buckets_rejected(self, client, article, field, value):
        response = await client.post('/podcasts', json={'content': article, field: value})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_settings_captured(self, client, pipeline, article):
        pipeline.enqueue = lambda job_id: None

        job_id = (await client.post('/podcasts', json={
            'content': article,
            'male_voice': 'James',
            'female_voice': 'Emma',
            'target_length': 'detailed',
            'tone': 'academic',
            'include_intro': False,
            'add_music': True,
        })).json()['job_id']

        data = (await client.get(f'/podcasts/{job_id}')).json()
        assert data['original_content'] == article
        assert data['settings'] == {
            'male_voice': 'James',
            'female_voice': 'Emma',
            'male_speed': 1.0,
            'female_speed': 1.0,
            'target_length': 'detailed',
            'tone': 'academic',
            'include_intro': False,
            'add_music': True,
        }


class TestStatusEndpoints:
    """Tests for GET /podcasts/{id} and /podcasts/{id}/status."""

    @pytest.mark.asyncio
    async def test_status_fields(self, client, job_store, article):
        job = await job_store.create(original_content=article, settings={})

        response = await client.get(f'/podcasts/{job.id}/status')

        assert response.status_code == 200
        assert set(response.json()) == {
            'id', 'status', 'title', 'generated_script', 'audio_ref', 'duration_seconds',
        }

    @pytest.mark.asyncio
    async def test_status_not_found(self, client):
        response = await client.get('/podcasts/nonexistent-id/status')

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_detail_not_found(self, client):
        response = await client.get('/podcasts/nonexistent-id')

        assert response.status_code == 404


class TestRecentEndpoint:
    """Tests for GET /podcasts/recent."""

    @pytest.mark.asyncio
    async def test_recent_newest_first_and_capped(self, client, pipeline, article):
        pipeline.enqueue = lambda job_id: None
        ids = []
        for i in range(12):
            response = await client.post('/podcasts', json={'content': f'{article} #{i}'})
            ids.append(response.json()['job_id'])

        response = await client.get('/podcasts/recent')

        assert response.status_code == 200
        jobs = response.json()
        assert len(jobs) == 10
        created = [job['created_at'] for job in jobs]
        assert created == sorted(created, reverse=True)
        assert jobs[0]['id'] == ids[-1]

    @pytest.mark.asyncio
    async def test_recent_limit_above_cap_rejected(self, client):
        response = await client.get('/podcasts/recent?limit=11')

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_recent_empty(self, client):
        response = await client.get('/podcasts/recent')

        assert response.json() == []


class TestAudioEndpoint:
    """Tests for GET /audio/{file_name}."""

    @pytest.mark.asyncio
    async def test_serves_audio_file(self, client, audio_synthesizer):
        audio_synthesizer.audio_dir.mkdir(parents=True, exist_ok=True)
        (audio_synthesizer.audio_dir / 'podcast_test.mp3').write_bytes(b'ID3 fake audio')

        response = await client.get('/audio/podcast_test.mp3')

        assert response.status_code == 200
        assert response.headers['content-type'] == 'audio/mpeg'
        assert response.content == b'ID3 fake audio'

    @pytest.mark.asyncio
    async def test_missing_audio_not_found(self, client):
        response = await client.get('/audio/podcast_missing.mp3')

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_path_traversal_not_found(self, client):
        response = await client.get('/audio/..%2Fsecret.mp3')

        assert response.status_code == 404


class TestHealthEndpoint:
    """Tests for GET /health."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get('/health')

        assert response.status_code == 200
        data = response.json()
        assert data['status'] == 'ok'
        assert data['script_provider_configured'] is True
        assert data['speech_provider_configured'] is True
        assert data['active_jobs'] == 0
        assert isinstance(data['version'], str)
