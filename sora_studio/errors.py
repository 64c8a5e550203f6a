from typing import Optional


class StudioError(Exception):
    """Base class for every error raised by sora_studio."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(StudioError):
    """Bad input caught before any upstream call is made."""

    status_code = 400


class TransportError(StudioError):
    """The upstream call failed: network error or a non-2xx response."""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message, status_code)
        self.code = code


class AssetUnavailableError(TransportError):
    """A derived asset (video, thumbnail, spritesheet) could not be fetched."""
