import logging
from typing import Any, Optional, Tuple

import openai
from openai import OpenAI

from sora_studio.config import StudioConfig
from sora_studio.errors import AssetUnavailableError, TransportError
from sora_studio.models import (
    VARIANTS,
    AnyJob,
    Asset,
    VideoPage,
    parse_job,
    parse_page,
)

logger = logging.getLogger(__name__)

# (filename, bytes, content type) as accepted by the SDK's multipart encoder
ImageUpload = Tuple[str, bytes, str]


def _error_message(exc: openai.APIError) -> str:
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        msg = body.get("message")
        if isinstance(msg, str) and msg:
            return msg
    return exc.message


def _translate(exc: openai.APIError, fallback: str) -> TransportError:
    status_code = exc.status_code if isinstance(exc, openai.APIStatusError) else None
    return TransportError(
        _error_message(exc) or fallback,
        status_code=status_code,
        code=getattr(exc, "code", None),
    )


def _read_binary(content: Any) -> bytes:
    if isinstance(content, (bytes, bytearray)):
        return bytes(content)
    if hasattr(content, "content"):
        return content.content
    if hasattr(content, "read"):
        return content.read()
    raise TransportError("Download returned no binary content")


class VideoProvider:
    """The six video operations against the OpenAI API.

    Each call maps onto exactly one SDK call; payloads are parsed into job
    variants and SDK failures are re-raised as TransportError carrying the
    upstream status code and message.
    """

    def __init__(self, config: StudioConfig, client: Optional[OpenAI] = None):
        self.config = config
        self.client = client or OpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.request_timeout,
            max_retries=0,
        )

    def create(
        self,
        prompt: str,
        model: str,
        size: str,
        seconds: str,
        input_reference: Optional[ImageUpload] = None,
    ) -> AnyJob:
        kwargs = {"prompt": prompt, "model": model, "size": size, "seconds": seconds}
        if input_reference is not None:
            kwargs["input_reference"] = input_reference
        logger.info("Creating video: model=%s size=%s seconds=%s", model, size, seconds)
        try:
            video = self.client.videos.create(**kwargs)
        except openai.APIError as exc:
            raise _translate(exc, "Failed to create video") from exc
        return parse_job(video)

    def retrieve(self, video_id: str) -> AnyJob:
        try:
            video = self.client.videos.retrieve(video_id)
        except openai.APIError as exc:
            raise _translate(exc, "Failed to retrieve video") from exc
        return parse_job(video)

    def list(self, limit: int = 20, after: Optional[str] = None, order: str = "desc") -> VideoPage:
        kwargs = {"limit": limit, "order": order}
        if after:
            kwargs["after"] = after
        try:
            page = self.client.videos.list(**kwargs)
        except openai.APIError as exc:
            raise _translate(exc, "Failed to list videos") from exc
        return parse_page(page)

    def delete(self, video_id: str) -> None:
        try:
            self.client.videos.delete(video_id)
        except openai.APIError as exc:
            raise _translate(exc, "Failed to delete video") from exc
        logger.info("Deleted video %s", video_id)

    def download(self, video_id: str, variant: str = "video") -> Asset:
        content_type, _ = VARIANTS[variant]
        try:
            content = self.client.videos.download_content(video_id, variant=variant)
        except openai.APIError as exc:
            err = _translate(exc, f"Failed to download {variant}")
            raise AssetUnavailableError(err.message, status_code=err.status_code, code=err.code) from exc
        return Asset(
            video_id=video_id,
            variant=variant,
            content=_read_binary(content),
            content_type=content_type,
        )

    def remix(self, video_id: str, prompt: str) -> AnyJob:
        logger.info("Remixing video %s", video_id)
        try:
            video = self.client.videos.remix(video_id, prompt=prompt)
        except openai.APIError as exc:
            raise _translate(exc, "Failed to remix video") from exc
        return parse_job(video)
