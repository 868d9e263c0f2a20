"""User-facing messages for the image and video endpoints."""
from typing import Optional

from config.settings import settings

DEFAULT_LANGUAGE = "en"

MESSAGES = {
    "en": {
        "request_failed": "LaoZhang API request failed",
        "no_valid_data": "LaoZhang API returned no valid data.",
        "unexpected_format": "LaoZhang API returned data in an unexpected format.",
        "no_image": "The model did not return an image. Please try a different image or prompt.",
        "rate_limited": "You may have exceeded the request limit. Please wait a moment and try again.",
        "server_error": "An unexpected server error occurred. This may be a temporary issue. Please try again later.",
        "unknown_error": "An unknown error occurred while communicating with the API.",
        "timeout": "Request timeout - LaoZhang API may be slow",
        "video_failed": "Video generation failed",
        "video_disclaimer": "Note: LaoZhang API does not support video generation directly; a key frame image is returned instead.",
        "unknown_reason": "Unknown error",
    },
    "zh": {
        "request_failed": "LaoZhang API 请求失败",
        "no_valid_data": "LaoZhang API 没有返回有效数据。",
        "unexpected_format": "LaoZhang API 返回的数据格式不符合预期。",
        "no_image": "模型没有返回图片。请尝试不同的图片或提示词。",
        "rate_limited": "您可能已超过请求限制。请稍等片刻后再试。",
        "server_error": "发生了意外的服务器错误。这可能是临时问题。请稍后再试。",
        "unknown_error": "与 API 通信时发生未知错误。",
        "timeout": "请求超时 - LaoZhang API 响应较慢",
        "video_failed": "视频生成失败",
        "video_disclaimer": "注意：LaoZhang API 不直接支持视频生成，这里返回的是关键帧图像。",
        "unknown_reason": "未知错误",
    },
}


def get_message(key: str, language: Optional[str] = None) -> str:
    """Look up a message, falling back to English for unknown languages."""
    catalog = MESSAGES.get(language or settings.MESSAGE_LANGUAGE, MESSAGES[DEFAULT_LANGUAGE])
    return catalog[key]
