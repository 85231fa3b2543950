"""
Dialogue script generation through the OpenAI Chat Completions API.
"""
import json
import logging
from typing import Any, Optional

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from duocast.config import (
    MIN_CONTENT_LENGTH,
    OPENAI_API_KEY,
    OPENAI_MODEL,
    SCRIPT_MAX_COMPLETION_TOKENS,
    SCRIPT_MAX_RETRIES,
    SCRIPT_TIMEOUT_SECONDS,
)
from duocast.errors import ContentValidationError, ScriptFormatError, ScriptGenerationError
from duocast.schemas.content import ContentAnalysis
from duocast.schemas.job import PodcastSettings, Script, ScriptSegment, Speaker, TargetLength, Tone

logger = logging.getLogger(__name__)

LENGTH_INSTRUCTIONS = {
    TargetLength.brief: '3-5 minutes (about 450-750 words)',
    TargetLength.standard: '5-8 minutes (about 750-1200 words)',
    TargetLength.detailed: '8-12 minutes (about 1200-1800 words)',
    TargetLength.indepth: '12-15 minutes (about 1800-2250 words)',
}

TONE_INSTRUCTIONS = {
    Tone.professional: 'professional and informative tone with authoritative delivery',
    Tone.conversational: 'conversational and engaging tone with natural flow',
    Tone.casual: 'casual and friendly tone with relaxed interaction',
    Tone.academic: 'academic and analytical tone with detailed explanations',
}

# Providers sometimes answer with role names instead of host tags
SPEAKER_ALIASES = {
    'male': Speaker.male,
    'primary': Speaker.male,
    'female': Speaker.female,
    'secondary': Speaker.female,
}

SCRIPT_SYSTEM_PROMPT = (
    'You are an expert podcast script writer who creates engaging, natural '
    'conversations between two hosts. Always respond with valid JSON in the '
    'specified format.'
)

ANALYSIS_SYSTEM_PROMPT = (
    'You are an expert content analyst. Always respond with valid JSON in the '
    'specified format.'
)

WORDS_PER_MINUTE = 150


def validate_content(content: str) -> str:
    """Reject content too short to discuss."""
    if not isinstance(content, str) or len(content) < MIN_CONTENT_LENGTH:
        raise ContentValidationError(
            f'Content must be at least {MIN_CONTENT_LENGTH} characters long'
        )
    return content


def build_script_prompt(content: str, settings: PodcastSettings) -> str:
    """Build the user prompt for a two-host dialogue."""
    intro_lines = ''
    if settings.include_intro:
        intro_lines = (
            'Start with a brief intro where hosts introduce themselves and the topic.\n'
            'End with a brief outro and closing remarks.\n'
        )

    example = {
        'title': 'Brief, engaging episode title',
        'segments': [
            {'speaker': 'male', 'name': settings.male_voice, 'text': 'Welcome to our podcast...'},
            {'speaker': 'female', 'name': settings.female_voice, 'text': "Thanks, and today we're discussing..."},
        ],
        'estimatedDuration': 360,
    }

    return f"""You are an expert podcast script writer. Create an engaging dialogue between two podcast hosts discussing the following article content.

ARTICLE CONTENT:
{content}

REQUIREMENTS:
- Target length: {LENGTH_INSTRUCTIONS[settings.target_length]}
- Discussion tone: {TONE_INSTRUCTIONS[settings.tone]}
- Male host name: {settings.male_voice}
- Female host name: {settings.female_voice}
- Include intro and outro: {'yes' if settings.include_intro else 'no'}

SCRIPT FORMAT:
- Create natural, engaging dialogue between the two hosts
- The male host should be knowledgeable and provide context
- The female host should ask insightful questions and provide analysis
- Include natural transitions and conversational elements
- Make sure the discussion covers the key points from the article
- Keep the conversation flowing naturally without being repetitive
{intro_lines}
Return the response as JSON in this exact format, with "speaker" always "male" or "female" and "estimatedDuration" in seconds:
{json.dumps(example, indent=2)}"""


def build_analysis_prompt(content: str) -> str:
    example = {
        'title': 'Brief, engaging title for the podcast episode',
        'summary': '2-3 sentence summary of the main topic',
        'keyPoints': ['Key point 1', 'Key point 2', 'Key point 3'],
    }
    return f"""Analyze the following content and provide a title, summary, and key points for a podcast discussion.

CONTENT:
{content}

Return the response as JSON in this exact format:
{json.dumps(example, indent=2)}"""


def estimate_script_duration(segments, settings: PodcastSettings) -> float:
    """Spoken length of a script at each host's speed, in seconds."""
    total = 0.0
    for segment in segments:
        words = len(segment.text.split())
        total += words / WORDS_PER_MINUTE * 60 / settings.speed_for(segment.speaker)
    return total


def parse_script(raw: Optional[str], settings: PodcastSettings) -> Script:
    """
    Validate a provider response and turn it into a Script.

    Raises:
        ScriptFormatError: response is not JSON, has no segments, or a segment
            has an unknown speaker or empty text.
    """
    try:
        data = json.loads(raw or '')
    except json.JSONDecodeError as e:
        raise ScriptFormatError(f'Script response is not valid JSON: {e}') from e

    if not isinstance(data, dict):
        raise ScriptFormatError('Script response must be a JSON object')

    raw_segments = data.get('segments')
    if not isinstance(raw_segments, list) or not raw_segments:
        raise ScriptFormatError('Script response has no segments')

    segments = []
    for index, item in enumerate(raw_segments):
        if not isinstance(item, dict):
            raise ScriptFormatError(f'Segment {index} is not an object')

        speaker = SPEAKER_ALIASES.get(str(item.get('speaker', '')).strip().lower())
        if speaker is None:
            raise ScriptFormatError(f'Segment {index} has unknown speaker {item.get("speaker")!r}')

        text = item.get('text', item.get('content'))
        if not isinstance(text, str) or not text.strip():
            raise ScriptFormatError(f'Segment {index} has no text')

        name = item.get('name') or item.get('display_name') or settings.voice_for(speaker)
        segments.append(ScriptSegment(speaker=speaker, display_name=str(name), text=text.strip()))

    estimated = data.get('estimatedDuration', data.get('estimated_duration_seconds'))
    if isinstance(estimated, bool) or not isinstance(estimated, (int, float)) or estimated <= 0:
        estimated = round(estimate_script_duration(segments, settings))

    title = data.get('title')
    if not isinstance(title, str) or not title.strip():
        title = None

    return Script(
        title=title.strip()[:200] if title else None,
        segments=segments,
        estimated_duration_seconds=estimated,
    )


class ScriptSynthesizer:
    """
    Wraps the text-generation provider.

    Does not retry on its own; a failed call surfaces as ScriptGenerationError
    and the pipeline decides what happens to the job.
    """

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: str = OPENAI_MODEL,
        api_key: Optional[str] = OPENAI_API_KEY,
    ):
        self._client = client
        self._api_key = api_key
        self.model = model

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise ScriptGenerationError('OpenAI API key is not configured')
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                timeout=SCRIPT_TIMEOUT_SECONDS,
                max_retries=SCRIPT_MAX_RETRIES,
            )
        return self._client

    async def _complete(self, system: str, prompt: str, max_tokens: int) -> Optional[str]:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[
                    {'role': 'system', 'content': system},
                    {'role': 'user', 'content': prompt},
                ],
                response_format={'type': 'json_object'},
                temperature=1.0,
                max_completion_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            raise ScriptGenerationError(f'Text generation request failed: {e}') from e

        if not response.choices:
            raise ScriptFormatError('Text generation returned no choices')
        return response.choices[0].message.content

    async def generate_script(self, content: str, settings: PodcastSettings) -> Script:
        """
        Generate a two-host dialogue for ``content``.

        Raises:
            ContentValidationError: content is shorter than the minimum.
            ScriptGenerationError: the provider call failed.
            ScriptFormatError: the provider returned an unusable script.
        """
        validate_content(content)
        prompt = build_script_prompt(content, settings)
        raw = await self._complete(SCRIPT_SYSTEM_PROMPT, prompt, SCRIPT_MAX_COMPLETION_TOKENS)
        script = parse_script(raw, settings)
        logger.info(
            'Generated script with %d segments (~%ss)',
            len(script.segments),
            script.estimated_duration_seconds,
        )
        return script

    async def analyze_content(self, content: str) -> ContentAnalysis:
        """Suggest a title, summary and key points for ``content``."""
        validate_content(content)
        raw = await self._complete(ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt(content), 500)
        try:
            data: Any = json.loads(raw or '')
            return ContentAnalysis(
                title=data.get('title', ''),
                summary=data.get('summary', ''),
                key_points=data.get('keyPoints', data.get('key_points', [])),
            )
        except (json.JSONDecodeError, AttributeError, ValidationError) as e:
            raise ScriptFormatError(f'Content analysis response is malformed: {e}') from e


# Singleton instance
_script_synthesizer: Optional[ScriptSynthesizer] = None


def get_script_synthesizer() -> ScriptSynthesizer:
    """Get the script synthesizer singleton instance."""
    global _script_synthesizer
    if _script_synthesizer is None:
        _script_synthesizer = ScriptSynthesizer()
    return _script_synthesizer


def reset_script_synthesizer():
    """Reset the script synthesizer singleton (for testing)."""
    global _script_synthesizer
    _script_synthesizer = None
