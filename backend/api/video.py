from fastapi import APIRouter
from typing import List
from models.video_generation import VideoGenerationRequest, VideoGenerationResponse
from services.laozhang_service import LaoZhangService, LaoZhangError

router = APIRouter(prefix="/video", tags=["video"])


def get_laozhang_service():
    """Dependency to get LaoZhangService instance."""
    return LaoZhangService()


@router.post("/", response_model=VideoGenerationResponse)
async def generate_video(payload: VideoGenerationRequest):
    """
    Generate a video from a prompt and optional starting image.

    The LaoZhang API has no video model: the response carries a key frame
    image, a note explaining this, and an empty placeholder video URL.
    """
    service = get_laozhang_service()
    progress: List[int] = []

    def on_progress(value: int):
        progress.append(value)
        print(f"[LaoZhang] Video progress: {value}%")

    try:
        result = await service.generate_video(
            payload.prompt,
            payload.image,
            payload.aspect_ratio,
            on_progress
        )
    except LaoZhangError as e:
        return VideoGenerationResponse(success=False, progress=progress, error=str(e))

    return VideoGenerationResponse(
        success=True,
        image_url=result.image_url,
        text=result.text,
        video_url=result.video_url,
        progress=progress
    )
