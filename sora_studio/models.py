"""Video job records as returned by the provider.

A job is one of four variants, keyed on its status. Only the running variant
carries ``progress`` and only the failed variant carries ``error``, so callers
branch on the type instead of probing optional fields.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from sora_studio.errors import ValidationError

VideoModel = Literal["sora-2", "sora-2-pro"]
VideoSize = Literal["480x480", "1280x720", "1920x1080", "720x1280", "1080x1920"]
VideoSeconds = Literal["4", "8", "12", "16"]

MODELS = get_args(VideoModel)
SIZES = get_args(VideoSize)
SECONDS = get_args(VideoSeconds)

DEFAULT_MODEL = "sora-2"
DEFAULT_SIZE = "1280x720"
DEFAULT_SECONDS = "8"

IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")

# variant -> (content type, file extension)
VARIANTS = {
    "video": ("video/mp4", "mp4"),
    "thumbnail": ("image/webp", "webp"),
    "spritesheet": ("image/jpeg", "jpg"),
}
PRIMARY_VARIANT = "video"

STATUS_QUEUED = "queued"
STATUS_RUNNING = "in_progress"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"
TERMINAL_STATUSES = (STATUS_COMPLETED, STATUS_FAILED)


def closest_seconds(duration: Optional[int]) -> str:
    """Map arbitrary seconds to the closest supported duration string."""
    allowed = [int(s) for s in SECONDS]
    target = min(allowed, key=lambda x: abs(x - (duration or 4)))
    return str(target)


def check_choice(name: str, value: str, allowed) -> str:
    if value not in allowed:
        raise ValidationError(f"Invalid {name} {value!r}; expected one of {', '.join(allowed)}")
    return value


class JobError(BaseModel):
    code: str = "unknown"
    message: str = "Video generation failed"

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator("code", "message", mode="before")
    @classmethod
    def _fill_blank(cls, value, info):
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return str(value)

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump()


class Job(BaseModel):
    """Fields every variant shares. Never instantiated directly."""

    id: str = Field(min_length=1)
    created_at: int = 0
    model: VideoModel = DEFAULT_MODEL
    size: VideoSize = DEFAULT_SIZE
    seconds: VideoSeconds = DEFAULT_SECONDS
    prompt: Optional[str] = None
    remixed_from_video_id: Optional[str] = None
    completed_at: Optional[int] = None
    expires_at: Optional[int] = None

    model_config = ConfigDict(frozen=True, from_attributes=True)

    @field_validator("model", "size", "seconds", mode="before")
    @classmethod
    def _as_choice(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].default
        return str(value)

    @field_validator("created_at", mode="before")
    @classmethod
    def _created_at(cls, value):
        return 0 if value is None else value

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        data["object"] = "video"
        return data


class QueuedJob(Job):
    status: Literal["queued"] = STATUS_QUEUED


class RunningJob(Job):
    # some deployments report "running" instead of "in_progress"
    status: Literal["in_progress", "running"] = STATUS_RUNNING
    progress: int = Field(0, ge=0, le=100)

    @field_validator("status")
    @classmethod
    def _canonical_status(cls, value):
        return STATUS_RUNNING

    @field_validator("progress", mode="before")
    @classmethod
    def _progress(cls, value):
        return 0 if value is None else value


class CompletedJob(Job):
    status: Literal["completed"] = STATUS_COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["progress"] = 100
        return data


class FailedJob(Job):
    status: Literal["failed"] = STATUS_FAILED
    error: JobError = Field(default_factory=JobError)

    @field_validator("error", mode="before")
    @classmethod
    def _error(cls, value):
        if value is None:
            return JobError()
        if isinstance(value, str):
            return JobError(message=value)
        return value


AnyJob = Annotated[
    Union[QueuedJob, RunningJob, CompletedJob, FailedJob],
    Field(discriminator="status"),
]

_job_adapter = TypeAdapter(AnyJob)


def _invalid(exc: PydanticValidationError) -> ValidationError:
    err = exc.errors()[0]
    where = ".".join(str(part) for part in err["loc"])
    if where:
        return ValidationError(f"Invalid video payload ({where}): {err['msg']}")
    return ValidationError(f"Invalid video payload: {err['msg']}")


def parse_job(payload: Any) -> AnyJob:
    """Build the job variant matching the payload's status.

    Accepts a plain dict or any object exposing the fields as attributes,
    such as the SDK's ``Video`` model.
    """
    try:
        return _job_adapter.validate_python(payload, from_attributes=True)
    except PydanticValidationError as exc:
        raise _invalid(exc) from exc


class VideoPage(BaseModel):
    data: List[AnyJob] = Field(default_factory=list)
    has_more: bool = False

    model_config = ConfigDict(from_attributes=True)

    @field_validator("has_more", mode="before")
    @classmethod
    def _has_more(cls, value):
        return bool(value)

    @property
    def first_id(self) -> Optional[str]:
        return self.data[0].id if self.data else None

    @property
    def last_id(self) -> Optional[str]:
        return self.data[-1].id if self.data else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "object": "list",
            "data": [job.to_dict() for job in self.data],
            "has_more": self.has_more,
            "first_id": self.first_id,
            "last_id": self.last_id,
        }


def parse_page(payload: Any) -> VideoPage:
    try:
        return VideoPage.model_validate(payload, from_attributes=True)
    except PydanticValidationError as exc:
        raise _invalid(exc) from exc


@dataclass(frozen=True)
class Asset:
    """One downloaded binary for a job."""

    video_id: str
    variant: str
    content: bytes
    content_type: str

    @property
    def filename(self) -> str:
        return asset_filename(self.video_id, self.variant)


def asset_filename(video_id: str, variant: str) -> str:
    _, ext = VARIANTS[variant]
    return f"{video_id}.{ext}"
