import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_ATTEMPTS = 120  # ~10 minutes at the default interval


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class StudioConfig:
    """Read-only client configuration shared by the provider, poller and app.

    Built once at process start and passed explicitly to whatever needs it.
    """

    api_key: str
    base_url: Optional[str] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    transport_retries: int = 0
    request_timeout: float = 120.0
    host: str = "0.0.0.0"
    port: int = 8001

    def __post_init__(self):
        if not self.api_key:
            raise ValueError("Missing OPENAI_API_KEY in .env")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.transport_retries < 0:
            raise ValueError("transport_retries cannot be negative")

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "StudioConfig":
        load_dotenv(dotenv_path)
        return cls(
            api_key=os.getenv("OPENAI_API_KEY", "").strip(),
            base_url=os.getenv("OPENAI_BASE_URL", "").strip() or None,
            poll_interval=_env_float("SORA_POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            max_attempts=_env_int("SORA_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
            transport_retries=_env_int("SORA_TRANSPORT_RETRIES", 0),
            request_timeout=_env_float("SORA_REQUEST_TIMEOUT", 120.0),
            host=os.getenv("SORA_HOST", "0.0.0.0").strip() or "0.0.0.0",
            port=_env_int("SORA_PORT", 8001),
        )
