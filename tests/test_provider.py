from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import openai
import pytest

from sora_studio.errors import AssetUnavailableError, TransportError
from sora_studio.models import CompletedJob, QueuedJob, RunningJob
from sora_studio.provider import VideoProvider

REQUEST = httpx.Request("GET", "https://api.openai.com/v1/videos/video_123")


def video(**fields):
    data = {
        "id": "video_123",
        "object": "video",
        "status": "queued",
        "created_at": 1712697600,
        "model": "sora-2",
        "size": "1280x720",
        "seconds": "8",
        "progress": 0,
    }
    data.update(fields)
    return data


def status_error(cls, status, body):
    return cls("Error code: %d" % status, response=httpx.Response(status, request=REQUEST), body=body)


@pytest.fixture
def sdk():
    return MagicMock()


@pytest.fixture
def video_provider(config, sdk):
    return VideoProvider(config, client=sdk)


def test_builds_sdk_client_from_config():
    from sora_studio.config import StudioConfig

    provider = VideoProvider(StudioConfig(api_key="sk-test", base_url="http://localhost:9999/v1"))

    assert isinstance(provider.client, openai.OpenAI)
    assert provider.client.api_key == "sk-test"
    assert str(provider.client.base_url).startswith("http://localhost:9999/v1")


def test_create_forwards_parameters(video_provider, sdk):
    sdk.videos.create.return_value = video(prompt="A red kite")

    job = video_provider.create("A red kite", "sora-2-pro", "1920x1080", "12")

    sdk.videos.create.assert_called_once_with(
        prompt="A red kite", model="sora-2-pro", size="1920x1080", seconds="12"
    )
    assert isinstance(job, QueuedJob)
    assert job.prompt == "A red kite"


def test_create_with_reference_image(video_provider, sdk):
    sdk.videos.create.return_value = video()
    image = ("first.jpg", b"\xff\xd8", "image/jpeg")

    video_provider.create("x", "sora-2", "1280x720", "4", input_reference=image)

    assert sdk.videos.create.call_args.kwargs["input_reference"] == image


def test_retrieve_parses_variant(video_provider, sdk):
    sdk.videos.retrieve.return_value = video(status="in_progress", progress=55)

    job = video_provider.retrieve("video_123")

    sdk.videos.retrieve.assert_called_once_with("video_123")
    assert isinstance(job, RunningJob)
    assert job.progress == 55


def test_retrieve_accepts_sdk_models(video_provider, sdk):
    sdk.videos.retrieve.return_value = SimpleNamespace(**video(status="completed", progress=100, error=None))

    assert isinstance(video_provider.retrieve("video_123"), CompletedJob)


def test_not_found_keeps_status_and_message(video_provider, sdk):
    sdk.videos.retrieve.side_effect = status_error(
        openai.NotFoundError, 404, {"message": "Video 'video_x' not found", "code": None}
    )

    with pytest.raises(TransportError) as info:
        video_provider.retrieve("video_x")

    assert info.value.status_code == 404
    assert info.value.message == "Video 'video_x' not found"


def test_connection_error_has_no_upstream_status(video_provider, sdk):
    sdk.videos.retrieve.side_effect = openai.APIConnectionError(request=REQUEST)

    with pytest.raises(TransportError) as info:
        video_provider.retrieve("video_123")

    assert info.value.status_code == 500
    assert info.value.message == "Connection error."


def test_list_builds_page(video_provider, sdk):
    sdk.videos.list.return_value = SimpleNamespace(
        data=[video(id="video_b"), video(id="video_a")], has_more=True
    )

    page = video_provider.list(limit=2)

    sdk.videos.list.assert_called_once_with(limit=2, order="desc")
    assert [j.id for j in page.data] == ["video_b", "video_a"]
    assert page.has_more
    assert page.first_id == "video_b"
    assert page.last_id == "video_a"


def test_list_passes_cursor(video_provider, sdk):
    sdk.videos.list.return_value = SimpleNamespace(data=[], has_more=False)

    video_provider.list(limit=5, after="video_a", order="asc")

    sdk.videos.list.assert_called_once_with(limit=5, after="video_a", order="asc")


def test_delete(video_provider, sdk):
    video_provider.delete("video_123")

    sdk.videos.delete.assert_called_once_with("video_123")


def test_download_variant(video_provider, sdk):
    sdk.videos.download_content.return_value = SimpleNamespace(content=b"RIFF....WEBP")

    asset = video_provider.download("video_123", "thumbnail")

    sdk.videos.download_content.assert_called_once_with("video_123", variant="thumbnail")
    assert asset.content == b"RIFF....WEBP"
    assert asset.content_type == "image/webp"
    assert asset.filename == "video_123.webp"


def test_download_of_unfinished_video(video_provider, sdk):
    sdk.videos.download_content.side_effect = status_error(
        openai.BadRequestError, 400, {"message": "Video is not ready yet.", "code": "video_not_ready"}
    )

    with pytest.raises(AssetUnavailableError) as info:
        video_provider.download("video_123")

    assert info.value.status_code == 400
    assert info.value.code == "video_not_ready"


def test_remix(video_provider, sdk):
    sdk.videos.remix.return_value = video(id="video_456", remixed_from_video_id="video_123")

    job = video_provider.remix("video_123", "make it blue")

    sdk.videos.remix.assert_called_once_with("video_123", prompt="make it blue")
    assert job.id == "video_456"
    assert job.remixed_from_video_id == "video_123"
