from pydantic import BaseModel, Field
from typing import Optional, List

from models.image_edit import InlineImage


class VideoGenerationRequest(BaseModel):
    """Payload for a (simulated) video generation"""
    prompt: str = Field(..., min_length=1, description="Description of the video")
    image: Optional[InlineImage] = Field(None, description="Optional starting image")
    aspect_ratio: Optional[str] = Field(None, description="Aspect ratio hint, e.g. 16:9")


class VideoGenerationResponse(BaseModel):
    success: bool
    image_url: Optional[str] = None
    text: Optional[str] = None
    video_url: Optional[str] = None
    progress: List[int] = Field(default_factory=list, description="Progress checkpoints reported")
    error: Optional[str] = None
