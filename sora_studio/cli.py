#!/usr/bin/env python3
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from sora_studio.config import StudioConfig
from sora_studio.errors import StudioError, ValidationError
from sora_studio.models import (
    DEFAULT_MODEL,
    DEFAULT_SIZE,
    IMAGE_TYPES,
    MODELS,
    PRIMARY_VARIANT,
    SIZES,
    VARIANTS,
    Asset,
    CompletedJob,
    JobError,
    RunningJob,
    asset_filename,
    closest_seconds,
)
from sora_studio.poller import JobPoller, PollObserver, PollState
from sora_studio.provider import VideoProvider

IMAGE_SUFFIXES = {".jpg": "image/jpeg", ".jpeg": "image/jpeg", ".png": "image/png", ".webp": "image/webp"}


def load_config() -> StudioConfig:
    try:
        return StudioConfig.from_env()
    except ValueError as exc:
        print(f"{exc}. Put it in .env or export it.")
        sys.exit(2)


def save_binary(content: bytes, out_path: Path) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "wb") as f:
        f.write(content)


def read_image(path: str):
    image_path = Path(path)
    content_type = IMAGE_SUFFIXES.get(image_path.suffix.lower())
    if content_type not in IMAGE_TYPES:
        raise ValidationError(f"Unsupported image {path}; use a JPEG, PNG, or WebP file")
    if not image_path.is_file():
        raise ValidationError(f"Image not found: {path}")
    return (image_path.name, image_path.read_bytes(), content_type)


class ConsoleObserver(PollObserver):
    """Prints each status check on one line."""

    def on_snapshot(self, job):
        if isinstance(job, RunningJob):
            print(f"  {job.id}: {job.status} {job.progress}%")
        else:
            print(f"  {job.id}: {job.status}")

    def on_failed(self, job, error: JobError):
        print(f"Video generation failed [{error.code}]: {error.message}")


def wait_and_save(provider, config: StudioConfig, video_id: str, out: Optional[str]) -> int:
    poller = JobPoller(provider, config)
    handle = poller.start(video_id, ConsoleObserver())
    try:
        handle.wait()
    except KeyboardInterrupt:
        handle.cancel()
        print("Cancelled.")
        return 130

    if handle.state != PollState.COMPLETED:
        return 3

    out_path = Path(out) if out else Path("videos") / asset_filename(video_id, PRIMARY_VARIANT)
    save_binary(handle.assets[PRIMARY_VARIANT].content, out_path)
    print(f"Saved video to {out_path}")
    thumb: Optional[Asset] = handle.assets.get("thumbnail")
    if thumb is not None:
        thumb_path = out_path.with_suffix("." + VARIANTS["thumbnail"][1])
        save_binary(thumb.content, thumb_path)
        print(f"Saved thumbnail to {thumb_path}")
    return 0


def cmd_generate(args, provider, config) -> int:
    input_reference = read_image(args.image) if args.image else None
    job = provider.create(
        prompt=args.prompt,
        model=args.model,
        size=args.size,
        seconds=closest_seconds(args.seconds),
        input_reference=input_reference,
    )
    print(f"Created {job.id} ({job.model}, {job.size}, {job.seconds}s)")
    return wait_and_save(provider, config, job.id, args.out)


def cmd_remix(args, provider, config) -> int:
    job = provider.remix(args.video_id, args.prompt)
    print(f"Created remix {job.id} from {args.video_id}")
    return wait_and_save(provider, config, job.id, args.out)


def cmd_status(args, provider, config) -> int:
    print(json.dumps(provider.retrieve(args.video_id).to_dict(), indent=2))
    return 0


def cmd_list(args, provider, config) -> int:
    page = provider.list(limit=args.limit, after=args.after, order=args.order)
    for job in page.data:
        progress = f" {job.progress}%" if isinstance(job, RunningJob) else ""
        print(f"{job.id}  {job.status}{progress}  {job.model} {job.size} {job.seconds}s  {job.prompt or ''}")
    if page.has_more:
        print(f"More available: --after {page.last_id}")
    return 0


def cmd_download(args, provider, config) -> int:
    job = provider.retrieve(args.video_id)
    if not isinstance(job, CompletedJob):
        print(f"Video {job.id} is {job.status}; only completed videos can be downloaded.")
        return 3
    asset = provider.download(args.video_id, args.variant)
    out_path = Path(args.out) if args.out else Path("videos") / asset.filename
    save_binary(asset.content, out_path)
    print(f"Saved {args.variant} to {out_path}")
    return 0


def cmd_delete(args, provider, config) -> int:
    provider.delete(args.video_id)
    print(f"Deleted {args.video_id}")
    return 0


def cmd_serve(args, provider, config) -> int:
    from sora_studio.app import create_app

    app = create_app(config, provider)
    host = args.host or config.host
    port = args.port or config.port
    print(f"\nStarting Sora Studio on http://localhost:{port}\n")
    app.run(debug=args.debug, host=host, port=port)
    return 0


COMMANDS = {
    "generate": cmd_generate,
    "remix": cmd_remix,
    "status": cmd_status,
    "list": cmd_list,
    "download": cmd_download,
    "delete": cmd_delete,
    "serve": cmd_serve,
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="sora-studio", description="Generate and manage Sora videos")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate", help="Generate a video and wait for it")
    g.add_argument("--prompt", required=True, help="Text prompt for the video")
    g.add_argument("--model", default=DEFAULT_MODEL, choices=MODELS)
    g.add_argument("--size", default=DEFAULT_SIZE, choices=SIZES, help="Resolution like 1280x720")
    g.add_argument("--seconds", type=int, default=8, help="Duration; snapped to 4, 8, 12 or 16")
    g.add_argument("--image", help="Reference image for the first frame")
    g.add_argument("--out", help="Output mp4 path")

    r = sub.add_parser("remix", help="Remix a completed video and wait for it")
    r.add_argument("--video-id", required=True)
    r.add_argument("--prompt", required=True)
    r.add_argument("--out", help="Output mp4 path")

    s = sub.add_parser("status", help="Show a video's current state")
    s.add_argument("--video-id", required=True)

    ls = sub.add_parser("list", help="List videos")
    ls.add_argument("--limit", type=int, default=20)
    ls.add_argument("--after")
    ls.add_argument("--order", default="desc", choices=("asc", "desc"))

    d = sub.add_parser("download", help="Download one asset of a completed video")
    d.add_argument("--video-id", required=True)
    d.add_argument("--variant", default=PRIMARY_VARIANT, choices=tuple(VARIANTS))
    d.add_argument("--out")

    rm = sub.add_parser("delete", help="Delete a video")
    rm.add_argument("--video-id", required=True)

    sv = sub.add_parser("serve", help="Run the web studio")
    sv.add_argument("--host")
    sv.add_argument("--port", type=int)
    sv.add_argument("--debug", action="store_true")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None, provider=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    config = load_config()
    provider = provider or VideoProvider(config)
    try:
        return COMMANDS[args.command](args, provider, config)
    except StudioError as exc:
        print(f"Error: {exc.message}")
        return 3


if __name__ == "__main__":
    sys.exit(main())
