"""
Audio retrieval endpoint.
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from duocast.errors import AudioNotFoundError
from duocast.services.tts_service import AudioSynthesizer, get_audio_synthesizer


router = APIRouter(prefix='/audio', tags=['audio'])


@router.get('/{file_name}')
async def get_audio(
    file_name: str,
    audio: AudioSynthesizer = Depends(get_audio_synthesizer),
):
    """
    Stream a generated podcast file.

    Raises:
        404: No audio file with that name
    """
    try:
        path = audio.get_audio_path(file_name)
    except AudioNotFoundError:
        raise HTTPException(status_code=404, detail='Audio file not found')

    return FileResponse(
        path=str(path),
        media_type='audio/mpeg',
        filename=file_name,
        headers={'Cache-Control': 'public, max-age=3600'},
    )
