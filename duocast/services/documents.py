"""
Plain-text extraction for uploaded documents.
"""
import io
import logging
from pathlib import Path
from typing import Optional

import docx2txt

from duocast.config import MIN_CONTENT_LENGTH
from duocast.errors import ContentValidationError
from duocast.services.script_service import validate_content

logger = logging.getLogger(__name__)

DOCX_MEDIA_TYPE = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
TEXT_MEDIA_TYPE = 'text/plain'


def extract_text(data: bytes, filename: Optional[str], content_type: Optional[str]) -> str:
    """
    Extract the text of a .docx or .txt upload.

    Raises:
        ContentValidationError: unsupported type, unreadable file, or text
            shorter than the minimum content length.
    """
    suffix = Path(filename or '').suffix.lower()

    if content_type == DOCX_MEDIA_TYPE or suffix == '.docx':
        try:
            content = docx2txt.process(io.BytesIO(data)) or ''
        except Exception as e:
            logger.warning('Could not read .docx upload %s: %s', filename, e)
            raise ContentValidationError('Could not read the uploaded .docx file') from e
    elif content_type == TEXT_MEDIA_TYPE or suffix == '.txt':
        try:
            content = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ContentValidationError('Text files must be UTF-8 encoded') from e
    else:
        raise ContentValidationError('Unsupported file type. Please upload .docx or .txt files.')

    content = content.strip()
    try:
        return validate_content(content)
    except ContentValidationError:
        raise ContentValidationError(
            f'Document content is too short. Please provide at least {MIN_CONTENT_LENGTH} characters.'
        ) from None
