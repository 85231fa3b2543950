"""
Content upload and analysis endpoints.
"""
import logging

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from duocast.errors import ContentValidationError, ScriptGenerationError
from duocast.schemas.content import ContentAnalysis, ContentAnalysisRequest, ContentResponse
from duocast.services.documents import extract_text
from duocast.services.script_service import ScriptSynthesizer, get_script_synthesizer

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/content', tags=['content'])


@router.post('/upload', response_model=ContentResponse)
async def upload_document(document: UploadFile = File(...)) -> ContentResponse:
    """
    Extract plain text from an uploaded .docx or .txt document.

    Raises:
        400: Unsupported file type or too little text
    """
    data = await document.read()
    try:
        content = extract_text(data, document.filename, document.content_type)
    except ContentValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return ContentResponse(content=content)


@router.post('/analyze', response_model=ContentAnalysis)
async def analyze_content(
    request: ContentAnalysisRequest,
    scripts: ScriptSynthesizer = Depends(get_script_synthesizer),
) -> ContentAnalysis:
    """
    Suggest a title, summary and key points for the content.

    Raises:
        400: Content too short
        502: Text-generation provider failed
    """
    try:
        return await scripts.analyze_content(request.content)
    except ContentValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScriptGenerationError as e:
        logger.error('Content analysis failed: %s', e)
        raise HTTPException(status_code=502, detail='Failed to analyze content')
