import re
import json
import asyncio
import httpx
from typing import Optional, List, Callable

from config.settings import settings
from core.i18n import get_message
from models.image_edit import GeneratedContent, InlineImage

# Markdown image (group 1 holds the reference) or a bare image URL / data URI
IMAGE_REFERENCE_PATTERN = re.compile(
    r"!\[.*?\]\(((?:https?://[^\s)]+|data:image/[^;]+;base64,[A-Za-z0-9+/=]+))\)"
    r"|(?:https?://[^\s\[\]()]+\.(?:png|jpg|jpeg|gif|webp)|data:image/[^;]+;base64,[A-Za-z0-9+/=]+)",
    re.IGNORECASE,
)

MASKED_EDIT_TEMPLATE = (
    'Apply the following instruction only to the masked area of the image: "{prompt}". '
    'Preserve the unmasked area.'
)

VIDEO_PLACEHOLDER_URL = "data:video/mp4;base64,"


class LaoZhangError(Exception):
    """Base error for LaoZhang API calls. The message is meant for end users."""

    def __init__(self, message: str = "", payload: Optional[dict] = None):
        super().__init__(message)
        self.payload = payload


class TransportFailure(LaoZhangError):
    """Non-2xx response, timeout or connection failure."""


class MalformedResponse(LaoZhangError):
    """Response without choices or without message content."""


class NoImageProduced(LaoZhangError):
    """The model answered without any image reference."""


class VendorMappedError(LaoZhangError):
    """A recognised vendor error, rewritten to a friendlier message."""

    def __init__(self, message: str, category: str, payload: Optional[dict] = None):
        super().__init__(message, payload)
        self.category = category


class UnknownError(LaoZhangError):
    pass


class VideoGenerationError(LaoZhangError):
    pass


def extract_image_urls(content: str) -> List[str]:
    """Return every image reference in content, in order of appearance."""
    image_urls = []
    for match in IMAGE_REFERENCE_PATTERN.finditer(content):
        image_urls.append(match.group(1) or match.group(0))
    return image_urls


def strip_image_references(content: str) -> Optional[str]:
    """Remove all image references; returns None when nothing but whitespace is left."""
    text = IMAGE_REFERENCE_PATTERN.sub('', content).strip()
    return text or None


def parse_completion(data) -> GeneratedContent:
    """Turn a chat completion body into GeneratedContent.

    The first image reference wins, the remaining text becomes ``text``.
    Raises MalformedResponse or NoImageProduced.
    """
    payload = data if isinstance(data, dict) else None
    choices = payload.get('choices') if payload else None
    if not isinstance(choices, list) or len(choices) == 0:
        raise MalformedResponse(get_message("no_valid_data"), payload=payload)

    choice = choices[0]
    message = choice.get('message') if isinstance(choice, dict) else None
    if not isinstance(message, dict) or not isinstance(message.get('content'), str):
        raise MalformedResponse(get_message("unexpected_format"), payload=payload)

    content = message['content']
    image_urls = extract_image_urls(content)
    text = strip_image_references(content)

    if not image_urls:
        # The model usually explains a refusal in its text
        raise NoImageProduced(text or get_message("no_image"))

    return GeneratedContent(image_url=image_urls[0], text=text)


def _json_body(response: httpx.Response) -> Optional[dict]:
    try:
        body = response.json()
    except (ValueError, RecursionError):
        return None
    return body if isinstance(body, dict) else None


def describe_http_error(response: httpx.Response) -> str:
    """Build an error message from a failed response: JSON message, raw text, then status line"""
    prefix = f"{get_message('request_failed')} ({response.status_code})"
    detail = response.reason_phrase
    try:
        error_data = response.json()
        if isinstance(error_data, dict):
            error = error_data.get('error')
            if isinstance(error, dict) and error.get('message'):
                detail = error['message']
            elif error_data.get('message'):
                detail = error_data['message']
    except (ValueError, RecursionError):
        detail = response.text or response.reason_phrase
    return f"{prefix}: {detail}"


def _map_vendor_error(payload) -> Optional[VendorMappedError]:
    vendor_error = payload.get('error') if isinstance(payload, dict) else None
    if not isinstance(vendor_error, dict) or not vendor_error.get('message'):
        return None

    status = vendor_error.get('status')
    code = vendor_error.get('code')
    if status == 'RESOURCE_EXHAUSTED':
        return VendorMappedError(get_message("rate_limited"), "rate_limited", payload)
    if code in (500, '500') or status == 'UNKNOWN':
        return VendorMappedError(get_message("server_error"), "server_error", payload)
    return VendorMappedError(str(vendor_error['message']), "vendor", payload)


def classify_vendor_error(error: Exception) -> Optional[VendorMappedError]:
    """Best-effort match of an error against the vendor error shape.

    Looks at the response body kept on the error first, then tries the
    message itself as JSON. Returns None when nothing matches.
    """
    mapped = _map_vendor_error(getattr(error, 'payload', None))
    if mapped is not None:
        return mapped
    try:
        return _map_vendor_error(json.loads(str(error)))
    except (ValueError, RecursionError):
        return None


def normalize_error(error: Exception) -> LaoZhangError:
    """Map any error raised during a call to the LaoZhangError returned to callers."""
    mapped = classify_vendor_error(error)
    if mapped is not None:
        return mapped
    if not str(error):
        return UnknownError(get_message("unknown_error"))
    if isinstance(error, LaoZhangError):
        return error
    return LaoZhangError(str(error))


class LaoZhangService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        video_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key or settings.LAOZHANG_API_KEY
        self.base_url = (base_url or settings.LAOZHANG_BASE_URL).rstrip('/')
        self.model = model or settings.LAOZHANG_MODEL
        self.timeout = settings.LAOZHANG_TIMEOUT if timeout is None else timeout
        self.video_delay = settings.VIDEO_SIMULATION_DELAY if video_delay is None else video_delay
        self.transport = transport

    def build_payload(
        self,
        image_data: str,
        mime_type: str,
        prompt: str,
        mask_data: Optional[str] = None,
        secondary_image: Optional[InlineImage] = None,
    ) -> dict:
        """Build the chat completion body: text, image, then optional mask and secondary image"""
        content = [
            {
                "type": "text",
                "text": prompt
            },
            {
                "type": "image_url",
                "image_url": {
                    "url": f"data:{mime_type};base64,{image_data}"
                }
            }
        ]

        if mask_data:
            content[0]["text"] = MASKED_EDIT_TEMPLATE.format(prompt=prompt)
            content.append({
                "type": "image_url",
                "image_url": {
                    "url": f"data:image/png;base64,{mask_data}"
                }
            })

        if secondary_image is not None:
            content.append({
                "type": "image_url",
                "image_url": {
                    "url": f"data:{secondary_image.mime_type};base64,{secondary_image.data}"
                }
            })

        return {
            "model": self.model,
            "stream": False,
            "messages": [{
                "role": "user",
                "content": content
            }]
        }

    def build_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    async def _post_completion(self, payload: dict) -> dict:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self.build_headers()
                )
            except httpx.TimeoutException as error:
                raise TransportFailure(get_message("timeout")) from error
            except httpx.RequestError as error:
                detail = str(error) or type(error).__name__
                raise TransportFailure(f"{get_message('request_failed')}: {detail}") from error

        if not response.is_success:
            raise TransportFailure(describe_http_error(response), payload=_json_body(response))

        try:
            return response.json()
        except (ValueError, RecursionError) as error:
            raise MalformedResponse(get_message("unexpected_format")) from error

    async def edit_image(
        self,
        image_data: str,
        mime_type: str,
        prompt: str,
        mask_data: Optional[str] = None,
        secondary_image: Optional[InlineImage] = None,
    ) -> GeneratedContent:
        """Edit an image with the LaoZhang chat completion endpoint.

        Raises a LaoZhangError subclass whose message can be shown to the user.
        """
        try:
            payload = self.build_payload(image_data, mime_type, prompt, mask_data, secondary_image)
            data = await self._post_completion(payload)
            return parse_completion(data)
        except Exception as error:
            print(f"[LaoZhang] Error calling LaoZhang API: {error!r}")
            normalized = normalize_error(error)
            if normalized is error:
                raise
            raise normalized from error

    async def generate_video(
        self,
        prompt: str,
        image: Optional[InlineImage] = None,
        aspect_ratio: Optional[str] = None,
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> GeneratedContent:
        """Simulate video generation with a single key frame from edit_image.

        Progress is reported at 10, 30, 70 and 100. The returned video_url is
        an empty placeholder.
        """
        def report(progress: int):
            if on_progress:
                on_progress(progress)

        try:
            report(10)

            video_prompt = f"Create a video-like image sequence for: {prompt}."
            if aspect_ratio:
                video_prompt += f" Aspect ratio: {aspect_ratio}"

            report(30)

            image_result = await self.edit_image(
                image.data if image else '',
                image.mime_type if image else 'image/jpeg',
                video_prompt,
                None,
                None
            )

            report(70)
            await asyncio.sleep(self.video_delay)
            report(100)

            disclaimer = get_message("video_disclaimer")
            return GeneratedContent(
                image_url=image_result.image_url,
                text=f"{image_result.text}\n\n{disclaimer}" if image_result.text else disclaimer,
                video_url=VIDEO_PLACEHOLDER_URL
            )

        except Exception as error:
            print(f"[LaoZhang] Video generation failed: {error!r}")
            reason = str(error) or get_message("unknown_reason")
            raise VideoGenerationError(f"{get_message('video_failed')}: {reason}") from error
