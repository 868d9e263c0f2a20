from fastapi import APIRouter
from config.settings import settings

router = APIRouter(prefix="/client-config", tags=["client-config"])


@router.get("")
async def get_client_config():
    """Settings the browser client applies itself (watermarking, language)"""
    return {
        "watermark_enabled": settings.WATERMARK_ENABLED,
        "watermark_text": settings.WATERMARK_TEXT,
        "language": settings.MESSAGE_LANGUAGE,
    }
