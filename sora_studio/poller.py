"""Track one video job from creation to a terminal state.

A run checks the job status, hands every snapshot to an observer and, while the
job is still queued or in progress, schedules the next check on a timer. Once
the job completes the primary video is downloaded (and the thumbnail, best
effort) before the observer is told the run is over.

    poller = JobPoller(provider, config)
    handle = poller.start(video_id, observer)
    ...
    handle.cancel()   # when the owner goes away

Checks within one run never overlap: the next one is only scheduled after the
previous result has been processed. Separate runs share nothing.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Dict, Optional

from sora_studio.config import StudioConfig
from sora_studio.errors import StudioError
from sora_studio.models import (
    PRIMARY_VARIANT,
    AnyJob,
    Asset,
    CompletedJob,
    FailedJob,
    JobError,
    RunningJob,
)

logger = logging.getLogger(__name__)

# Error codes synthesized locally; the provider never reports these.
POLL_TIMEOUT = "poll_timeout"
TRANSPORT_ERROR = "transport_error"
ASSET_UNAVAILABLE = "asset_unavailable"


class PollState(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self not in (PollState.QUEUED, PollState.RUNNING)


class PollObserver:
    """Receives the progress of one run. Override what you need."""

    def on_snapshot(self, job: AnyJob) -> None:
        pass

    def on_completed(self, job: CompletedJob, assets: Dict[str, Asset]) -> None:
        pass

    def on_failed(self, job: Optional[AnyJob], error: JobError) -> None:
        pass


class ThreadTimerScheduler:
    """Runs each delayed call on its own daemon timer thread."""

    def call_later(self, delay: float, fn: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, fn)
        timer.daemon = True
        timer.start()
        return timer


class PollHandle:
    """A single polling run. Keep it around and cancel it when done with it."""

    def __init__(self, video_id: str, transport, observer: PollObserver, scheduler,
                 poll_interval: float, max_attempts: int, transport_retries: int):
        self.video_id = video_id
        self.state = PollState.QUEUED
        self.job: Optional[AnyJob] = None
        self.assets: Dict[str, Asset] = {}
        self.error: Optional[JobError] = None
        self.attempts = 0

        self._transport = transport
        self._observer = observer
        self._scheduler = scheduler
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._transport_retries = transport_retries
        self._transport_failures = 0

        self._lock = threading.RLock()
        self._cancelled = False
        self._pending = None
        self._done = threading.Event()

    @property
    def done(self) -> bool:
        return self.state.is_terminal

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the run reaches a terminal state. Returns False on timeout."""
        return self._done.wait(timeout)

    def cancel(self) -> bool:
        with self._lock:
            if self.state.is_terminal:
                return False
            self._cancelled = True
            self.state = PollState.CANCELLED
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
        logger.info("[%s] Polling cancelled after %d checks", self.video_id, self.attempts)
        self._done.set()
        return True

    def _schedule(self, delay: float) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._pending = self._scheduler.call_later(delay, self._check)

    def _deliver(self, callback: Callable, *args) -> bool:
        with self._lock:
            if self._cancelled:
                return False
            callback(*args)
            return True

    def _finish(self, state: PollState, error: Optional[JobError] = None) -> None:
        with self._lock:
            if self._cancelled:
                return
            self.state = state
            self.error = error
            try:
                if state == PollState.COMPLETED:
                    self._observer.on_completed(self.job, self.assets)
                else:
                    self._observer.on_failed(self.job, error)
            finally:
                self._done.set()

    def _check(self) -> None:
        with self._lock:
            if self._cancelled:
                return
            self._pending = None
            self.attempts += 1
            attempt = self.attempts

        try:
            job = self._transport.retrieve(self.video_id)
        except StudioError as exc:
            self._on_transport_error(exc)
            return
        except Exception as exc:
            logger.exception("[%s] Status check raised", self.video_id)
            self._finish(
                PollState.FAILED,
                JobError(code=TRANSPORT_ERROR, message=str(exc) or "Failed to check video status"),
            )
            return

        self._transport_failures = 0
        with self._lock:
            if self._cancelled:
                return
            self.job = job
            if isinstance(job, RunningJob):
                self.state = PollState.RUNNING
            logger.debug("[%s] Check %d: %s", self.video_id, attempt, job.status)
            if not self._deliver(self._observer.on_snapshot, job) or self._cancelled:
                return

        if isinstance(job, CompletedJob):
            self._fetch_assets(job)
        elif isinstance(job, FailedJob):
            logger.info("[%s] Generation failed: %s", self.video_id, job.error.message)
            self._finish(PollState.FAILED, job.error)
        elif attempt >= self._max_attempts:
            logger.warning("[%s] Gave up after %d checks", self.video_id, attempt)
            self._finish(
                PollState.TIMED_OUT,
                JobError(code=POLL_TIMEOUT, message="Video generation timed out"),
            )
        else:
            self._schedule(self._poll_interval)

    def _on_transport_error(self, exc: StudioError) -> None:
        if self._transport_failures < self._transport_retries and self.attempts < self._max_attempts:
            self._transport_failures += 1
            delay = self._poll_interval * 2 ** self._transport_failures
            logger.warning(
                "[%s] Status check failed (%s), retrying in %.1fs",
                self.video_id, exc.message, delay,
            )
            self._schedule(delay)
            return
        logger.error("[%s] Status check failed: %s", self.video_id, exc.message)
        self._finish(
            PollState.FAILED,
            JobError(code=TRANSPORT_ERROR, message=exc.message or "Failed to check video status"),
        )

    def _fetch_assets(self, job: CompletedJob) -> None:
        try:
            primary = self._transport.download(job.id, PRIMARY_VARIANT)
        except Exception as exc:
            message = exc.message if isinstance(exc, StudioError) else str(exc)
            logger.error("[%s] Video download failed: %s", self.video_id, message)
            self._finish(
                PollState.FAILED,
                JobError(code=ASSET_UNAVAILABLE, message=message or "Failed to download video"),
            )
            return
        self.assets[PRIMARY_VARIANT] = primary

        try:
            self.assets["thumbnail"] = self._transport.download(job.id, "thumbnail")
        except Exception as exc:
            logger.debug("[%s] Thumbnail not available: %s", self.video_id, exc)

        logger.info("[%s] Completed after %d checks", self.video_id, self.attempts)
        self._finish(PollState.COMPLETED)


class JobPoller:
    """Starts polling runs against a transport.

    The transport is anything with ``retrieve(video_id)`` and
    ``download(video_id, variant)``: a VideoProvider talking to the API
    directly, or a VideoClient talking to the studio's HTTP endpoints.
    """

    def __init__(self, transport, config: StudioConfig, scheduler=None):
        self.transport = transport
        self.config = config
        self.scheduler = scheduler or ThreadTimerScheduler()

    def start(self, video_id: str, observer: Optional[PollObserver] = None) -> PollHandle:
        """Check the job right away and keep checking until it is terminal."""
        handle = PollHandle(
            video_id,
            self.transport,
            observer or PollObserver(),
            self.scheduler,
            poll_interval=self.config.poll_interval,
            max_attempts=self.config.max_attempts,
            transport_retries=self.config.transport_retries,
        )
        logger.info("[%s] Polling every %.1fs", video_id, self.config.poll_interval)
        handle._check()
        return handle
