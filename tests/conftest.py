"""Shared fixtures: an in-memory provider, a manual clock and a recording observer."""

from typing import Dict, List, Optional

import pytest

from sora_studio.app import create_app
from sora_studio.config import StudioConfig
from sora_studio.errors import AssetUnavailableError, TransportError
from sora_studio.models import VARIANTS, Asset, VideoPage, parse_job
from sora_studio.poller import PollObserver


def steps(*statuses) -> List:
    """Build a retrieve script; strings become status payloads, exceptions are raised."""
    script = []
    for item in statuses:
        if isinstance(item, str):
            script.append({"status": item})
        else:
            script.append(item)
    return script


class FakeProvider:
    """Behaves like the upstream API, but in memory.

    ``scripts[video_id]`` is consumed one step per retrieve call; a step is a
    dict merged into the stored job or an exception to raise.
    """

    def __init__(self):
        self.jobs: Dict[str, dict] = {}
        self.scripts: Dict[str, list] = {}
        self.calls: List[tuple] = []
        self.missing_variants = set()
        self.broken_variants: Dict[str, Exception] = {}
        self.create_script: Optional[list] = None
        self._counter = 0
        self._clock = 1_700_000_000

    def add_job(self, status="queued", script=None, **fields) -> str:
        self._counter += 1
        self._clock += 1
        job_id = fields.pop("id", f"video_{self._counter:03d}")
        job = {
            "id": job_id,
            "object": "video",
            "status": status,
            "created_at": self._clock,
            "model": "sora-2",
            "size": "1280x720",
            "seconds": "8",
        }
        job.update(fields)
        self.jobs[job_id] = job
        if script is not None:
            self.scripts[job_id] = list(script)
        return job_id

    def _get(self, video_id):
        if video_id not in self.jobs:
            raise TransportError(f"Video '{video_id}' not found", status_code=404)
        return self.jobs[video_id]

    def download_calls(self, variant=None):
        return [c for c in self.calls if c[0] == "download" and (variant is None or c[2] == variant)]

    def retrieve_calls(self):
        return [c for c in self.calls if c[0] == "retrieve"]

    def create(self, prompt, model, size, seconds, input_reference=None):
        self.calls.append(("create", prompt, model, size, seconds, input_reference))
        job_id = self.add_job(
            prompt=prompt, model=model, size=size, seconds=seconds, script=self.create_script
        )
        return parse_job(dict(self.jobs[job_id]))

    def retrieve(self, video_id):
        self.calls.append(("retrieve", video_id))
        job = self._get(video_id)
        script = self.scripts.get(video_id)
        if script:
            step = script.pop(0)
            if isinstance(step, Exception):
                raise step
            job.update(step)
        return parse_job(dict(job))

    def list(self, limit=20, after=None, order="desc"):
        self.calls.append(("list", limit, after, order))
        ordered = sorted(self.jobs.values(), key=lambda j: j["created_at"], reverse=order == "desc")
        if after:
            ids = [j["id"] for j in ordered]
            ordered = ordered[ids.index(after) + 1:]
        return VideoPage(
            data=[parse_job(dict(j)) for j in ordered[:limit]],
            has_more=len(ordered) > limit,
        )

    def delete(self, video_id):
        self.calls.append(("delete", video_id))
        self._get(video_id)
        del self.jobs[video_id]

    def download(self, video_id, variant="video"):
        self.calls.append(("download", video_id, variant))
        job = self._get(video_id)
        if job["status"] != "completed":
            raise AssetUnavailableError("Video is not ready yet", status_code=400)
        if variant in self.broken_variants:
            raise self.broken_variants[variant]
        if variant in self.missing_variants:
            raise AssetUnavailableError(f"No {variant} for this video", status_code=404)
        return Asset(
            video_id=video_id,
            variant=variant,
            content=f"{variant}:{video_id}".encode(),
            content_type=VARIANTS[variant][0],
        )

    def remix(self, video_id, prompt):
        self.calls.append(("remix", video_id, prompt))
        source = self._get(video_id)
        if source["status"] != "completed":
            raise TransportError("Source video must be completed before remixing", status_code=400)
        new_id = self.add_job(
            prompt=prompt,
            model=source["model"],
            size=source["size"],
            seconds=source["seconds"],
            remixed_from_video_id=video_id,
        )
        return parse_job(dict(self.jobs[new_id]))


class ScheduledCall:
    def __init__(self, when, fn):
        self.when = when
        self.fn = fn
        self.cancelled = False
        self.ran = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Fake clock: delayed calls only run when the test advances time."""

    def __init__(self):
        self.now = 0.0
        self.calls: List[ScheduledCall] = []

    def call_later(self, delay, fn):
        call = ScheduledCall(self.now + delay, fn)
        self.calls.append(call)
        return call

    @property
    def pending(self):
        return [c for c in self.calls if not c.cancelled and not c.ran]

    def _run(self, call):
        self.now = call.when
        call.ran = True
        call.fn()

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [c for c in self.pending if c.when <= target]
            if not due:
                break
            self._run(min(due, key=lambda c: c.when))
        self.now = target

    def run_until_idle(self, limit=1000):
        for _ in range(limit):
            if not self.pending:
                return
            self._run(min(self.pending, key=lambda c: c.when))
        raise AssertionError("scheduler did not go idle")


class RecordingObserver(PollObserver):
    def __init__(self):
        self.events = []

    @property
    def snapshots(self):
        return [e[1] for e in self.events if e[0] == "snapshot"]

    def on_snapshot(self, job):
        self.events.append(("snapshot", job))

    def on_completed(self, job, assets):
        self.events.append(("completed", job, dict(assets)))

    def on_failed(self, job, error):
        self.events.append(("failed", job, error))


@pytest.fixture
def config():
    return StudioConfig(api_key="test-key", poll_interval=5, max_attempts=120)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def app(config, provider):
    app = create_app(config, provider)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
