#!/usr/bin/env python3
import io
import logging
from typing import Optional

from flask import Flask, jsonify, render_template_string, request, send_file

from sora_studio.config import StudioConfig
from sora_studio.errors import StudioError, ValidationError
from sora_studio.models import (
    DEFAULT_MODEL,
    DEFAULT_SECONDS,
    DEFAULT_SIZE,
    IMAGE_TYPES,
    MODELS,
    PRIMARY_VARIANT,
    SECONDS,
    SIZES,
    VARIANTS,
    check_choice,
)
from sora_studio.provider import VideoProvider

logger = logging.getLogger(__name__)

MAX_LIST_LIMIT = 100


def error_response(exc: StudioError, fallback: str):
    status = exc.status_code if 400 <= (exc.status_code or 0) < 600 else 500
    return jsonify({"error": exc.message or fallback}), status


def _required_id() -> str:
    video_id = request.args.get("id", "").strip()
    if not video_id:
        raise ValidationError("Video ID is required")
    return video_id


def _list_params():
    raw_limit = request.args.get("limit", "").strip()
    try:
        limit = int(raw_limit) if raw_limit else 20
    except ValueError:
        raise ValidationError("limit must be an integer")
    if not 1 <= limit <= MAX_LIST_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_LIST_LIMIT}")
    order = check_choice("order", request.args.get("order") or "desc", ("asc", "desc"))
    after = request.args.get("after") or None
    return limit, after, order


def _input_reference():
    upload = request.files.get("input_reference")
    if upload is None or not upload.filename:
        return None
    if upload.mimetype not in IMAGE_TYPES:
        raise ValidationError("Please upload a JPEG, PNG, or WebP image")
    return (upload.filename, upload.read(), upload.mimetype)


def create_app(config: Optional[StudioConfig] = None, provider: Optional[VideoProvider] = None) -> Flask:
    """Build the studio app.

    The provider is created from the config unless one is passed in, so tests
    (or another process layout) can swap the upstream out.
    """
    if provider is None:
        config = config or StudioConfig.from_env()
        provider = VideoProvider(config)

    app = Flask(__name__)

    @app.route("/")
    def index():
        return render_template_string(
            HTML_TEMPLATE,
            models=MODELS,
            sizes=SIZES,
            seconds=SECONDS,
            default_model=DEFAULT_MODEL,
            default_size=DEFAULT_SIZE,
            default_seconds=DEFAULT_SECONDS,
            poll_interval_ms=int((config.poll_interval if config else 5) * 1000),
            max_attempts=config.max_attempts if config else 120,
        )

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.route("/api/videos/create", methods=["POST"])
    def create_video():
        """Start a new generation job."""
        try:
            prompt = request.form.get("prompt", "").strip()
            if not prompt:
                raise ValidationError("Prompt is required")
            model = check_choice("model", request.form.get("model") or DEFAULT_MODEL, MODELS)
            size = check_choice("size", request.form.get("size") or DEFAULT_SIZE, SIZES)
            seconds = check_choice("seconds", request.form.get("seconds") or DEFAULT_SECONDS, SECONDS)
            job = provider.create(
                prompt=prompt,
                model=model,
                size=size,
                seconds=seconds,
                input_reference=_input_reference(),
            )
        except StudioError as exc:
            logger.error("Error creating video: %s", exc.message)
            return error_response(exc, "Failed to create video")
        return jsonify(job.to_dict())

    @app.route("/api/videos/retrieve", methods=["GET"])
    def retrieve_video():
        try:
            job = provider.retrieve(_required_id())
        except StudioError as exc:
            logger.error("Error retrieving video: %s", exc.message)
            return error_response(exc, "Failed to retrieve video")
        return jsonify(job.to_dict())

    @app.route("/api/videos/list", methods=["GET"])
    def list_videos():
        """One page of videos, newest first by default."""
        try:
            limit, after, order = _list_params()
            page = provider.list(limit=limit, after=after, order=order)
        except StudioError as exc:
            logger.error("Error listing videos: %s", exc.message)
            return error_response(exc, "Failed to list videos")
        return jsonify(page.to_dict())

    @app.route("/api/videos/delete", methods=["DELETE"])
    def delete_video():
        try:
            provider.delete(_required_id())
        except StudioError as exc:
            logger.error("Error deleting video: %s", exc.message)
            return error_response(exc, "Failed to delete video")
        return jsonify({"success": True, "message": "Video deleted successfully"})

    @app.route("/api/videos/download", methods=["GET"])
    def download_video():
        """Relay one asset of a completed video as an attachment."""
        try:
            video_id = _required_id()
            variant = check_choice("variant", request.args.get("variant") or PRIMARY_VARIANT, tuple(VARIANTS))
            asset = provider.download(video_id, variant)
        except StudioError as exc:
            logger.error("Error downloading video: %s", exc.message)
            return error_response(exc, "Failed to download video")
        return send_file(
            io.BytesIO(asset.content),
            mimetype=asset.content_type,
            as_attachment=True,
            download_name=asset.filename,
        )

    @app.route("/api/videos/remix", methods=["POST"])
    def remix_video():
        """Start a new job from a completed one plus a new prompt."""
        try:
            data = request.get_json(silent=True) or {}
            video_id = str(data.get("video_id") or "").strip()
            prompt = str(data.get("prompt") or "").strip()
            if not video_id or not prompt:
                raise ValidationError("Video ID and prompt are required")
            job = provider.remix(video_id, prompt)
        except StudioError as exc:
            logger.error("Error remixing video: %s", exc.message)
            return error_response(exc, "Failed to remix video")
        return jsonify(job.to_dict())

    return app


HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Sora Studio</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            min-height: 100vh;
            padding: 20px;
        }
        .container { max-width: 1100px; margin: 0 auto; }
        h1 { color: white; text-align: center; margin-bottom: 20px; font-size: 2.2em; }
        .tabs { display: flex; gap: 8px; justify-content: center; margin-bottom: 20px; }
        .tab {
            padding: 10px 20px; border: none; border-radius: 8px; cursor: pointer;
            background: rgba(255,255,255,0.2); color: white; font-weight: 600;
        }
        .tab.active { background: white; color: #667eea; }
        .card {
            background: white; border-radius: 16px; padding: 30px;
            box-shadow: 0 20px 60px rgba(0,0,0,0.3); display: none;
        }
        .card.active { display: block; }
        h2 { color: #667eea; margin-bottom: 20px; font-size: 1.5em; }
        .form-group { margin-bottom: 16px; }
        .row { display: grid; grid-template-columns: repeat(3, 1fr); gap: 12px; }
        label { display: block; color: #333; font-weight: 600; margin-bottom: 6px; font-size: 0.9em; }
        input[type="text"], textarea, select {
            width: 100%; padding: 10px; border: 2px solid #e0e0e0; border-radius: 8px; font-size: 14px;
        }
        textarea { resize: vertical; min-height: 90px; font-family: inherit; }
        .btn {
            width: 100%; padding: 12px; border: none; border-radius: 8px; font-size: 15px; font-weight: 600;
            cursor: pointer; color: white; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        }
        .btn:disabled { opacity: 0.5; cursor: not-allowed; }
        .btn-small {
            padding: 6px 10px; font-size: 12px; border: none; border-radius: 6px; cursor: pointer;
            font-weight: 600; color: white; background: #667eea;
        }
        .btn-delete { background: #dc3545; }
        .btn-remix { background: #28a745; }
        .status { margin-top: 14px; padding: 12px; border-radius: 8px; font-size: 14px; display: none; }
        .status.show { display: block; }
        .status.error { background: #fee; color: #c33; }
        .status.success { background: #efe; color: #3a3; }
        .status.loading { background: #fef8e7; color: #856404; }
        progress { width: 100%; margin-top: 8px; }
        video { width: 100%; display: block; background: #000; border-radius: 8px; margin-top: 14px; }
        .actions { display: flex; gap: 8px; flex-wrap: wrap; margin-top: 10px; }
        .video-grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(260px, 1fr)); gap: 16px; }
        .video-card { background: #f8f9fa; border-radius: 12px; padding: 14px; }
        .video-meta { font-size: 12px; color: #666; margin: 6px 0; word-break: break-word; }
        .badge { display: inline-block; padding: 2px 8px; border-radius: 10px; font-size: 11px; background: #ddd; }
        .badge.completed { background: #d4edda; }
        .badge.failed { background: #f8d7da; }
        .empty-state { text-align: center; padding: 40px 20px; color: #999; }
        dialog { border: none; border-radius: 16px; padding: 24px; width: min(900px, 90vw); }
        dialog::backdrop { background: rgba(0,0,0,0.6); }
        dialog h2 { word-break: break-word; }
    </style>
</head>
<body>
<div class="container">
    <h1>Sora Studio</h1>
    <div class="tabs">
        <button class="tab active" data-view="create">Create</button>
        <button class="tab" data-view="library">Library</button>
        <button class="tab" data-view="remix">Remix</button>
    </div>

    <div class="card active" id="view-create">
        <h2>Create Video</h2>
        <form id="createForm">
            <div class="form-group">
                <label>Prompt *</label>
                <textarea id="prompt" placeholder="Wide shot of a child flying a red kite in a grassy park, golden hour sunlight, camera slowly pans upward."></textarea>
            </div>
            <div class="row form-group">
                <div>
                    <label>Model</label>
                    <select id="model">
                        {% for m in models %}<option value="{{ m }}" {% if m == default_model %}selected{% endif %}>{{ m }}</option>{% endfor %}
                    </select>
                </div>
                <div>
                    <label>Resolution</label>
                    <select id="size">
                        {% for s in sizes %}<option value="{{ s }}" {% if s == default_size %}selected{% endif %}>{{ s }}</option>{% endfor %}
                    </select>
                </div>
                <div>
                    <label>Duration</label>
                    <select id="seconds">
                        {% for s in seconds %}<option value="{{ s }}" {% if s == default_seconds %}selected{% endif %}>{{ s }} seconds</option>{% endfor %}
                    </select>
                </div>
            </div>
            <div class="form-group">
                <label>Input Reference Image (Optional)</label>
                <input type="file" id="inputReference" accept="image/jpeg,image/png,image/webp">
            </div>
            <button type="submit" class="btn" id="generateBtn">Generate Video</button>
        </form>
        <div class="status" id="createStatus"></div>
        <div id="createResult"></div>
    </div>

    <div class="card" id="view-library">
        <h2>Your Videos <button class="btn-small" id="refreshBtn">Refresh</button></h2>
        <div class="video-grid" id="videoGrid"></div>
        <div class="actions"><button class="btn-small" id="moreBtn" style="display:none">Load more</button></div>
        <div class="status" id="libraryStatus"></div>
    </div>

    <div class="card" id="view-remix">
        <h2>Remix Video</h2>
        <div class="form-group">
            <label>Source Video ID</label>
            <input type="text" id="remixSource" placeholder="video_...">
        </div>
        <div class="form-group">
            <button class="btn-small" id="loadSourceBtn">Load source</button>
            <div id="remixSourcePreview"></div>
        </div>
        <div class="form-group">
            <label>Remix Prompt *</label>
            <textarea id="remixPrompt" placeholder="Make it blue"></textarea>
        </div>
        <button class="btn" id="remixBtn" disabled>Remix Video</button>
        <div class="status" id="remixStatus"></div>
        <div id="remixResult"></div>
    </div>

    <dialog id="viewer">
        <h2 id="viewerTitle"></h2>
        <div id="viewerBody"></div>
        <div class="actions"><button class="btn-small" id="viewerClose">Close</button></div>
    </dialog>
</div>

<script>
    const POLL_INTERVAL_MS = {{ poll_interval_ms }};
    const MAX_ATTEMPTS = {{ max_attempts }};
    const EXTENSIONS = {video: 'mp4', thumbnail: 'webp', spritesheet: 'jpg'};
    const runs = {};
    let libraryCursor = null;

    // One polling run per view; starting a new one cancels the old.
    function pollVideo(viewName, videoId, onSnapshot, onDone, onError) {
        cancelRun(viewName);
        const run = {cancelled: false, timer: null};
        runs[viewName] = run;
        let attempts = 0;

        const check = async () => {
            if (run.cancelled) return;
            attempts++;
            let data;
            try {
                const response = await fetch(`/api/videos/retrieve?id=${encodeURIComponent(videoId)}`);
                data = await response.json();
                if (!response.ok) throw new Error(data.error || 'Failed to check video status');
            } catch (err) {
                if (!run.cancelled) onError(err.message || 'Failed to check video status');
                return;
            }
            if (run.cancelled) return;
            onSnapshot(data);

            if (data.status === 'completed') {
                try {
                    const videoUrl = await fetchAsset(videoId, 'video');
                    let thumbnailUrl = null;
                    try {
                        thumbnailUrl = await fetchAsset(videoId, 'thumbnail');
                    } catch (e) {
                        console.log('Thumbnail not available');
                    }
                    if (!run.cancelled) {
                        onDone(data, videoUrl, thumbnailUrl);
                    } else {
                        [videoUrl, thumbnailUrl].filter(Boolean).forEach(url => URL.revokeObjectURL(url));
                    }
                } catch (err) {
                    if (!run.cancelled) onError(err.message || 'Failed to download video');
                }
            } else if (data.status === 'failed') {
                onError((data.error && data.error.message) || 'Video generation failed');
            } else if (attempts < MAX_ATTEMPTS) {
                run.timer = setTimeout(check, POLL_INTERVAL_MS);
            } else {
                onError('Video generation timed out');
            }
        };
        check();
    }

    function cancelRun(viewName) {
        const run = runs[viewName];
        if (run) {
            run.cancelled = true;
            clearTimeout(run.timer);
            delete runs[viewName];
        }
    }

    async function fetchAsset(videoId, variant) {
        const response = await fetch(`/api/videos/download?id=${encodeURIComponent(videoId)}&variant=${variant}`);
        if (!response.ok) {
            const data = await response.json().catch(() => ({}));
            throw new Error(data.error || `Failed to download ${variant}`);
        }
        return URL.createObjectURL(await response.blob());
    }

    async function downloadAsset(videoId, variant) {
        try {
            const url = await fetchAsset(videoId, variant);
            const a = document.createElement('a');
            a.href = url;
            a.download = `${videoId}.${EXTENSIONS[variant]}`;
            document.body.appendChild(a);
            a.click();
            document.body.removeChild(a);
            URL.revokeObjectURL(url);
        } catch (err) {
            alert(`Failed to download ${variant}`);
        }
    }

    function showStatus(id, type, message, progress) {
        const status = document.getElementById(id);
        status.className = 'status show ' + type;
        status.textContent = message;
        if (progress !== undefined && progress !== null) {
            const bar = document.createElement('progress');
            bar.max = 100;
            bar.value = progress;
            status.appendChild(bar);
        }
    }

    function el(tag, className, text) {
        const node = document.createElement(tag);
        if (className) node.className = className;
        if (text !== undefined && text !== null) node.textContent = text;
        return node;
    }

    function button(label, className, onClick) {
        const b = el('button', className, label);
        b.type = 'button';
        b.addEventListener('click', onClick);
        return b;
    }

    function videoElement(url) {
        const video = el('video');
        video.controls = true;
        video.preload = 'metadata';
        video.src = url;
        return video;
    }

    // Object URLs held by each display slot, released when the slot is redrawn.
    const heldUrls = {};

    function releaseSlot(slot) {
        (heldUrls[slot] || []).forEach(url => URL.revokeObjectURL(url));
        delete heldUrls[slot];
        const node = document.getElementById(slot);
        if (node) node.replaceChildren();
    }

    function holdUrls(slot, urls) {
        heldUrls[slot] = urls.filter(Boolean);
    }

    function saveUrl(url, filename) {
        const a = document.createElement('a');
        a.href = url;
        a.download = filename;
        document.body.appendChild(a);
        a.click();
        document.body.removeChild(a);
    }

    function renderResult(slot, videoId, videoUrl, thumbnailUrl) {
        releaseSlot(slot);
        holdUrls(slot, [videoUrl, thumbnailUrl]);
        const actions = el('div', 'actions');
        actions.appendChild(button('Download Video', 'btn-small',
            () => saveUrl(videoUrl, `${videoId}.${EXTENSIONS.video}`)));
        if (thumbnailUrl) {
            actions.appendChild(button('Download Thumbnail', 'btn-small',
                () => saveUrl(thumbnailUrl, `${videoId}.${EXTENSIONS.thumbnail}`)));
        }
        actions.appendChild(button('Download Spritesheet', 'btn-small',
            () => downloadAsset(videoId, 'spritesheet')));
        document.getElementById(slot).append(videoElement(videoUrl), actions);
    }

    function snapshotMessage(data) {
        return data.status === 'in_progress'
            ? `Generating... ${data.progress || 0}%`
            : `Status: ${data.status}`;
    }

    // Create view
    document.getElementById('createForm').addEventListener('submit', async (e) => {
        e.preventDefault();
        const prompt = document.getElementById('prompt').value.trim();
        if (!prompt) {
            showStatus('createStatus', 'error', 'Please enter a prompt');
            return;
        }
        const formData = new FormData();
        formData.append('prompt', prompt);
        formData.append('model', document.getElementById('model').value);
        formData.append('size', document.getElementById('size').value);
        formData.append('seconds', document.getElementById('seconds').value);
        const file = document.getElementById('inputReference').files[0];
        if (file) formData.append('input_reference', file);

        const generateBtn = document.getElementById('generateBtn');
        generateBtn.disabled = true;
        releaseSlot('createResult');
        showStatus('createStatus', 'loading', 'Starting generation...');
        try {
            const response = await fetch('/api/videos/create', {method: 'POST', body: formData});
            const data = await response.json();
            if (!response.ok) throw new Error(data.error || 'Failed to create video');
            pollVideo('create', data.id,
                (snap) => showStatus('createStatus', 'loading', snapshotMessage(snap),
                                     snap.status === 'in_progress' ? snap.progress : null),
                (snap, videoUrl, thumbnailUrl) => {
                    showStatus('createStatus', 'success', `Video ${snap.id} is ready`);
                    renderResult('createResult', snap.id, videoUrl, thumbnailUrl);
                    generateBtn.disabled = false;
                },
                (message) => {
                    showStatus('createStatus', 'error', message);
                    generateBtn.disabled = false;
                });
        } catch (err) {
            showStatus('createStatus', 'error', err.message || 'An error occurred');
            generateBtn.disabled = false;
        }
    });

    // Library view
    const STATUSES = ['queued', 'in_progress', 'completed', 'failed'];

    function videoCard(video) {
        const card = el('div', 'video-card');
        const badge = el('span', 'badge', video.status);
        if (STATUSES.includes(video.status)) badge.classList.add(video.status);
        card.appendChild(badge);
        card.appendChild(el('div', 'video-meta', video.prompt || '(no prompt)'));
        const created = new Date(video.created_at * 1000).toLocaleString();
        card.appendChild(el('div', 'video-meta',
            `${video.seconds}s • ${video.size} • ${video.model} • ${created}`));
        if (video.status === 'in_progress') {
            const bar = el('progress');
            bar.max = 100;
            bar.value = video.progress || 0;
            card.appendChild(bar);
        }
        const actions = el('div', 'actions');
        actions.appendChild(button('View', 'btn-small', () => viewVideo(video)));
        if (video.status === 'completed') {
            actions.appendChild(button('Download', 'btn-small', () => downloadAsset(video.id, 'video')));
            actions.appendChild(button('Remix', 'btn-small btn-remix', () => openRemix(video.id)));
        }
        actions.appendChild(button('Delete', 'btn-small btn-delete', () => deleteVideo(video.id)));
        card.appendChild(actions);
        return card;
    }

    async function loadLibrary(append) {
        const grid = document.getElementById('videoGrid');
        const params = new URLSearchParams({limit: '20'});
        if (append && libraryCursor) params.set('after', libraryCursor);
        try {
            const response = await fetch(`/api/videos/list?${params}`);
            const page = await response.json();
            if (!response.ok) throw new Error(page.error || 'Failed to fetch videos');
            libraryCursor = page.last_id;
            document.getElementById('moreBtn').style.display = page.has_more ? 'inline-block' : 'none';
            if (!append) grid.replaceChildren();
            page.data.forEach(video => grid.appendChild(videoCard(video)));
            if (!grid.children.length) {
                grid.appendChild(el('div', 'empty-state', 'No videos yet. Generate your first one!'));
            }
        } catch (err) {
            showStatus('libraryStatus', 'error', err.message);
        }
    }

    async function viewVideo(video) {
        if (video.status !== 'completed') {
            showStatus('libraryStatus', 'error', 'Video is not ready yet');
            return;
        }
        const dialog = document.getElementById('viewer');
        document.getElementById('viewerTitle').textContent = video.prompt || video.id;
        releaseSlot('viewerBody');
        dialog.showModal();
        try {
            const url = await fetchAsset(video.id, 'video');
            if (!dialog.open) {
                URL.revokeObjectURL(url);
                return;
            }
            holdUrls('viewerBody', [url]);
            const player = videoElement(url);
            player.autoplay = true;
            document.getElementById('viewerBody').appendChild(player);
        } catch (err) {
            document.getElementById('viewerBody').appendChild(el('div', 'status show error', err.message));
        }
    }

    async function deleteVideo(videoId) {
        if (!confirm(`Delete "${videoId}"?`)) return;
        try {
            const response = await fetch(`/api/videos/delete?id=${encodeURIComponent(videoId)}`, {method: 'DELETE'});
            if (!response.ok) throw new Error((await response.json()).error || 'Failed to delete video');
            loadLibrary();
        } catch (err) {
            showStatus('libraryStatus', 'error', err.message);
        }
    }

    // Remix view
    function openRemix(videoId) {
        document.getElementById('remixSource').value = videoId;
        switchView('remix');
        loadRemixSource();
    }

    function loadRemixSource() {
        const videoId = document.getElementById('remixSource').value.trim();
        if (!videoId) return;
        document.getElementById('remixBtn').disabled = true;
        releaseSlot('remixSourcePreview');
        pollVideo('remix-source', videoId,
            (snap) => showStatus('remixStatus', 'loading', 'Source ' + snapshotMessage(snap)),
            (snap, videoUrl, thumbnailUrl) => {
                releaseSlot('remixSourcePreview');
                holdUrls('remixSourcePreview', [videoUrl, thumbnailUrl]);
                document.getElementById('remixSourcePreview').appendChild(videoElement(videoUrl));
                showStatus('remixStatus', 'success', 'Source video loaded');
                document.getElementById('remixBtn').disabled = false;
            },
            (message) => showStatus('remixStatus', 'error', message));
    }

    async function submitRemix() {
        const videoId = document.getElementById('remixSource').value.trim();
        const prompt = document.getElementById('remixPrompt').value.trim();
        if (!videoId || !prompt) {
            showStatus('remixStatus', 'error', 'Video ID and prompt are required');
            return;
        }
        const remixBtn = document.getElementById('remixBtn');
        remixBtn.disabled = true;
        releaseSlot('remixResult');
        showStatus('remixStatus', 'loading', 'Starting remix...');
        try {
            const response = await fetch('/api/videos/remix', {
                method: 'POST',
                headers: {'Content-Type': 'application/json'},
                body: JSON.stringify({video_id: videoId, prompt}),
            });
            const data = await response.json();
            if (!response.ok) throw new Error(data.error || 'Failed to remix video');
            pollVideo('remix', data.id,
                (snap) => showStatus('remixStatus', 'loading', 'Remix ' + snapshotMessage(snap),
                                     snap.status === 'in_progress' ? snap.progress : null),
                (snap, videoUrl, thumbnailUrl) => {
                    showStatus('remixStatus', 'success', `Remix ${snap.id} is ready`);
                    renderResult('remixResult', snap.id, videoUrl, thumbnailUrl);
                    remixBtn.disabled = false;
                },
                (message) => {
                    showStatus('remixStatus', 'error', message);
                    remixBtn.disabled = false;
                });
        } catch (err) {
            showStatus('remixStatus', 'error', err.message || 'An error occurred');
            remixBtn.disabled = false;
        }
    }

    function switchView(name) {
        document.querySelectorAll('.tab').forEach(t => t.classList.toggle('active', t.dataset.view === name));
        document.querySelectorAll('.card').forEach(c => c.classList.toggle('active', c.id === 'view-' + name));
        if (name === 'library') loadLibrary();
    }

    document.querySelectorAll('.tab').forEach(tab => tab.addEventListener('click', () => switchView(tab.dataset.view)));
    document.getElementById('refreshBtn').addEventListener('click', () => loadLibrary());
    document.getElementById('moreBtn').addEventListener('click', () => loadLibrary(true));
    document.getElementById('loadSourceBtn').addEventListener('click', loadRemixSource);
    document.getElementById('remixBtn').addEventListener('click', submitRemix);
    document.getElementById('viewerClose').addEventListener('click', () => document.getElementById('viewer').close());
    document.getElementById('viewer').addEventListener('close', () => releaseSlot('viewerBody'));
    window.addEventListener('beforeunload', () => {
        Object.keys(runs).forEach(cancelRun);
        Object.keys(heldUrls).forEach(releaseSlot);
    });
</script>
</body>
</html>
"""


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    studio_config = StudioConfig.from_env()
    print("\nStarting Sora Studio...")
    print(f"Open: http://localhost:{studio_config.port}\n")
    create_app(studio_config).run(debug=True, host=studio_config.host, port=studio_config.port)
