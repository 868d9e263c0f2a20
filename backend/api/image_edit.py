from fastapi import APIRouter
from urllib.parse import urlparse
from models.image_edit import ImageEditRequest, ImageEditResponse
from services.laozhang_service import LaoZhangService, LaoZhangError

router = APIRouter(prefix="/image-edit", tags=["image-edit"])

def get_laozhang_service():
    return LaoZhangService()

@router.post("/", response_model=ImageEditResponse)
async def edit_image(edit_request: ImageEditRequest):
    """Edit an image with the LaoZhang API, optionally restricted to a mask"""
    laozhang_service = get_laozhang_service()

    try:
        result = await laozhang_service.edit_image(
            edit_request.image_data,
            edit_request.mime_type,
            edit_request.prompt,
            edit_request.mask_data,
            edit_request.secondary_image
        )
    except LaoZhangError as e:
        # The client shows the message and offers a retry
        return ImageEditResponse(
            success=False,
            error=str(e)
        )

    return ImageEditResponse(
        success=True,
        image_url=result.image_url,
        text=result.text,
        error=None
    )

@router.get("/health")
async def check_laozhang_config():
    """Report which LaoZhang endpoint and model are in use.

    Missing credentials stop the process at start-up, so reaching this
    endpoint already means the key and base URL are set.
    """
    laozhang_service = get_laozhang_service()

    return {
        "model": laozhang_service.model,
        "host": urlparse(laozhang_service.base_url).netloc
    }
