from pydantic import BaseModel, Field, model_validator
from typing import Optional


def split_data_url(data_url: str) -> tuple:
    """Split "data:image/png;base64,iVBOR..." into (mime_type, base64_data)."""
    header, base64_data = data_url.split(',', 1)
    mime_type = header.split(':')[1].split(';')[0]
    return mime_type, base64_data


class InlineImage(BaseModel):
    """An image attachment carried as base64 text"""
    data: str = Field(..., description="Base64 encoded image data (or a data URL)")
    mime_type: str = Field("image/jpeg", description="MIME type of the image")

    @model_validator(mode="after")
    def unwrap_data_url(self):
        if self.data.startswith('data:image/') and ',' in self.data:
            self.mime_type, self.data = split_data_url(self.data)
        return self


class GeneratedContent(BaseModel):
    """Result of an image edit or simulated video generation"""
    image_url: Optional[str] = Field(None, description="Image URL or data URL returned by the model")
    text: Optional[str] = Field(None, description="Model text left after removing image references")
    video_url: Optional[str] = Field(None, description="Video reference (placeholder for simulated video)")


class ImageEditRequest(BaseModel):
    image_data: str = Field(..., min_length=1)  # Base64 encoded image or data URL
    mime_type: str = "image/png"
    prompt: str = Field(..., min_length=1)
    mask_data: Optional[str] = None  # Base64 encoded PNG mask
    secondary_image: Optional[InlineImage] = None

    @model_validator(mode="after")
    def unwrap_data_urls(self):
        if self.image_data.startswith('data:image/') and ',' in self.image_data:
            self.mime_type, self.image_data = split_data_url(self.image_data)
        if self.mask_data and self.mask_data.startswith('data:') and ',' in self.mask_data:
            # Masks are always sent as PNG, only the payload is kept
            _, self.mask_data = split_data_url(self.mask_data)
        return self


class ImageEditResponse(BaseModel):
    success: bool
    image_url: Optional[str] = None
    text: Optional[str] = None
    error: Optional[str] = None
