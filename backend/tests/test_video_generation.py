"""
Simulated video generation tests

generate_video wraps edit_image; these tests validate progress reporting,
prompt annotation and failure wrapping.
"""
import pytest
from unittest.mock import AsyncMock, patch

from core.i18n import get_message
from models.image_edit import InlineImage
from services.laozhang_service import (
    VideoGenerationError,
    NoImageProduced,
    VIDEO_PLACEHOLDER_URL,
)


@pytest.mark.unit
@pytest.mark.asyncio
class TestGenerateVideo:
    """Tests for LaoZhangService.generate_video"""

    async def test_progress_checkpoints(self, make_service, image_reply):
        """Test progress is reported at 10, 30, 70 and 100"""
        service = make_service(image_reply)
        progress = []

        await service.generate_video("A cat playing", on_progress=progress.append)

        assert progress == [10, 30, 70, 100]

    async def test_result_has_key_frame_and_placeholder(self, make_service, image_reply):
        """Test the key frame image, disclaimer and placeholder video are returned"""
        service = make_service(image_reply)

        result = await service.generate_video("A cat playing")

        assert result.image_url == "https://cdn.laozhang.test/out/abc.png"
        assert result.video_url == VIDEO_PLACEHOLDER_URL
        assert result.text == f"Here is your edited image:\n\n{get_message('video_disclaimer')}"

    async def test_disclaimer_only_when_model_gives_no_text(self, make_service, reply):
        service = make_service(reply("![frame](https://cdn.test/frame.webp)"))

        result = await service.generate_video("A cat playing")

        assert result.text == get_message("video_disclaimer")

    async def test_prompt_and_default_image(self, make_service, image_reply):
        """Test the prompt carries the aspect ratio and an empty JPEG is sent without an image"""
        service = make_service(image_reply)

        await service.generate_video("Waves at dusk", aspect_ratio="16:9")

        content = image_reply.last_body["messages"][0]["content"]
        assert content[0]["text"] == "Create a video-like image sequence for: Waves at dusk. Aspect ratio: 16:9"
        assert content[1]["image_url"]["url"] == "data:image/jpeg;base64,"
        assert len(content) == 2

    async def test_prompt_without_aspect_ratio(self, make_service, image_reply):
        service = make_service(image_reply)

        await service.generate_video("Waves at dusk")

        content = image_reply.last_body["messages"][0]["content"]
        assert content[0]["text"] == "Create a video-like image sequence for: Waves at dusk."

    async def test_starting_image_is_sent(self, make_service, image_reply):
        service = make_service(image_reply)

        await service.generate_video("Zoom out", image=InlineImage(data="QUJD", mime_type="image/png"))

        content = image_reply.last_body["messages"][0]["content"]
        assert content[1]["image_url"]["url"] == "data:image/png;base64,QUJD"

    async def test_waits_configured_delay(self, make_service, image_reply):
        """Test the artificial delay comes from configuration"""
        service = make_service(image_reply, video_delay=2.5)

        with patch("services.laozhang_service.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            await service.generate_video("A cat playing")

        mock_sleep.assert_awaited_once_with(2.5)

    async def test_failure_is_wrapped_and_never_completes(self, make_service, reply):
        """Test a failing edit never reports 100 and is wrapped with the video prefix"""
        service = make_service(reply("I can't animate that."))
        progress = []

        with pytest.raises(VideoGenerationError) as exc_info:
            await service.generate_video("A cat playing", on_progress=progress.append)

        assert progress == [10, 30]
        assert str(exc_info.value) == f"{get_message('video_failed')}: I can't animate that."
        assert isinstance(exc_info.value.__cause__, NoImageProduced)

    async def test_vendor_failure_reason_is_localized(self, make_service, reply):
        handler = reply(status_code=429, json_body={"error": {"message": "X", "status": "RESOURCE_EXHAUSTED"}})
        service = make_service(handler)

        with pytest.raises(VideoGenerationError) as exc_info:
            await service.generate_video("A cat playing")

        assert str(exc_info.value) == f"{get_message('video_failed')}: {get_message('rate_limited')}"
