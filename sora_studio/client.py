import logging
from typing import Any, Dict, Optional, Tuple

import requests

from sora_studio.errors import AssetUnavailableError, TransportError
from sora_studio.models import (
    DEFAULT_MODEL,
    DEFAULT_SECONDS,
    DEFAULT_SIZE,
    VARIANTS,
    AnyJob,
    Asset,
    VideoPage,
    parse_job,
    parse_page,
)

logger = logging.getLogger(__name__)


class VideoClient:
    """Talks to a running studio over its /api/videos endpoints.

    Same operations as VideoProvider, so either one can back a JobPoller.
    """

    def __init__(self, base_url: str = "http://localhost:8001", session: Optional[requests.Session] = None,
                 timeout: float = 120):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, fallback: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}/api/videos/{path}"
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise TransportError(f"{fallback}: {exc}") from exc
        if r.status_code >= 400:
            message = fallback
            try:
                data = r.json()
            except ValueError:
                data = None
            if isinstance(data, dict) and data.get("error"):
                message = data["error"]
            logger.debug("%s %s -> %s: %s", method, url, r.status_code, message)
            raise TransportError(message, status_code=r.status_code)
        return r

    def _json(self, method: str, path: str, fallback: str, **kwargs) -> Dict[str, Any]:
        r = self._request(method, path, fallback, **kwargs)
        try:
            return r.json()
        except ValueError as exc:
            raise TransportError(f"{fallback}: response was not JSON") from exc

    def create(
        self,
        prompt: str,
        model: str = DEFAULT_MODEL,
        size: str = DEFAULT_SIZE,
        seconds: str = DEFAULT_SECONDS,
        input_reference: Optional[Tuple[str, bytes, str]] = None,
    ) -> AnyJob:
        # multipart/form-data, like the browser form
        files = {
            "prompt": (None, prompt),
            "model": (None, model),
            "size": (None, size),
            "seconds": (None, seconds),
        }
        if input_reference is not None:
            files["input_reference"] = input_reference
        return parse_job(self._json("POST", "create", "Failed to create video", files=files))

    def retrieve(self, video_id: str) -> AnyJob:
        return parse_job(self._json("GET", "retrieve", "Failed to retrieve video", params={"id": video_id}))

    def list(self, limit: int = 20, after: Optional[str] = None, order: str = "desc") -> VideoPage:
        params = {"limit": limit, "order": order}
        if after:
            params["after"] = after
        return parse_page(self._json("GET", "list", "Failed to list videos", params=params))

    def delete(self, video_id: str) -> None:
        self._json("DELETE", "delete", "Failed to delete video", params={"id": video_id})

    def download(self, video_id: str, variant: str = "video") -> Asset:
        fallback = f"Failed to download {variant}"
        try:
            r = self._request("GET", "download", fallback, params={"id": video_id, "variant": variant})
        except TransportError as exc:
            raise AssetUnavailableError(exc.message, status_code=exc.status_code) from exc
        content_type = r.headers.get("Content-Type", VARIANTS[variant][0]).split(";")[0]
        return Asset(video_id=video_id, variant=variant, content=r.content, content_type=content_type)

    def remix(self, video_id: str, prompt: str) -> AnyJob:
        body = {"video_id": video_id, "prompt": prompt}
        return parse_job(self._json("POST", "remix", "Failed to remix video", json=body))
