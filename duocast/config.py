"""
Application configuration and paths.
"""
import os
from pathlib import Path

# Application identity
APP_NAME = 'DuoCast'
APP_VERSION = '0.1.0'

# Server configuration
SERVER_HOST = os.environ.get('DUOCAST_HOST', '127.0.0.1')
SERVER_PORT = int(os.environ.get('DUOCAST_PORT', '5111'))

# Paths
DATA_DIR = Path(os.environ.get('DUOCAST_DATA_DIR', Path.home() / '.duocast'))

# Database configuration
DATABASE_PATH = DATA_DIR / 'duocast.db'
DATABASE_URL = f'sqlite+aiosqlite:///{DATABASE_PATH}'

# Generated podcast audio
AUDIO_DIR = DATA_DIR / 'audio'

# Content limits
MIN_CONTENT_LENGTH = 100
RECENT_JOBS_LIMIT = 10

# Script generation (OpenAI)
OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
OPENAI_MODEL = os.environ.get('OPENAI_MODEL', 'gpt-5')
SCRIPT_MAX_COMPLETION_TOKENS = 4000
SCRIPT_TIMEOUT_SECONDS = float(os.environ.get('SCRIPT_TIMEOUT_SECONDS', '180'))
SCRIPT_MAX_RETRIES = int(os.environ.get('SCRIPT_MAX_RETRIES', '0'))

# Speech synthesis (ElevenLabs)
ELEVENLABS_API_KEY = os.environ.get('ELEVENLABS_API_KEY')
ELEVENLABS_BASE_URL = os.environ.get('ELEVENLABS_BASE_URL', 'https://api.elevenlabs.io/v1')
ELEVENLABS_MODEL_ID = os.environ.get('ELEVENLABS_MODEL_ID', 'eleven_monolingual_v1')
TTS_TIMEOUT_SECONDS = float(os.environ.get('TTS_TIMEOUT_SECONDS', '60'))

# Pipeline stage bounds; a stage that overruns fails the job
SCRIPT_STAGE_TIMEOUT_SECONDS = float(os.environ.get('SCRIPT_STAGE_TIMEOUT_SECONDS', '300'))
AUDIO_STAGE_TIMEOUT_SECONDS = float(os.environ.get('AUDIO_STAGE_TIMEOUT_SECONDS', '1800'))

# Number of podcast jobs allowed to run at the same time
MAX_CONCURRENT_JOBS = int(os.environ.get('MAX_CONCURRENT_JOBS', '4'))


def ensure_directories():
    """Create required directories if they don't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    AUDIO_DIR.mkdir(parents=True, exist_ok=True)
