"""Sora Studio - create, track, remix and download Sora videos."""

from sora_studio.config import StudioConfig
from sora_studio.errors import AssetUnavailableError, StudioError, TransportError, ValidationError
from sora_studio.poller import JobPoller, PollHandle, PollObserver, PollState
from sora_studio.provider import VideoProvider

__version__ = "0.1.0"

__all__ = [
    "StudioConfig",
    "StudioError",
    "ValidationError",
    "TransportError",
    "AssetUnavailableError",
    "JobPoller",
    "PollHandle",
    "PollObserver",
    "PollState",
    "VideoProvider",
]
