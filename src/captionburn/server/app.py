"""
Flask API server for burning transcript subtitles into videos.

This server provides endpoints for:
- Uploading a video with its transcript for processing
- Subscribing to job events (progress, completion, errors) as Server-Sent Events
- Downloading processed videos
- Checking server and queue health

Jobs are processed one at a time by a background ProcessingQueue; the upload
response is sent before processing starts.
"""

import atexit
import logging
from datetime import datetime
from typing import Optional

from flask import Blueprint, Flask, Response, current_app, jsonify, request, send_from_directory
from flask_cors import CORS

from ..config import ConfigManager, ServerSettings
from .artifact_store import ArtifactStore
from .engine import FFmpegEngine
from .job_runner import Engine, JobRunner
from .processing_queue import ProcessingQueue, QueueFullError
from .session import EventChannel, SessionRegistry

logger = logging.getLogger(__name__)

EXTENSION_KEY = "captionburn"

api_bp = Blueprint("api", __name__)


class Services:
    """Components shared by the request handlers of one app."""

    def __init__(self, settings: ServerSettings, engine: Optional[Engine] = None):
        self.settings = settings
        self.store = ArtifactStore(settings.upload_dir, settings.processed_dir, settings.public_base_url)
        self.sessions = SessionRegistry()
        self.engine = engine or FFmpegEngine(settings.ffmpeg_path, settings.ffprobe_path, settings.subtitle_style)
        self.runner = JobRunner(
            self.store,
            self.sessions,
            self.engine,
            words_per_cue=settings.words_per_cue,
            seconds_per_cue=settings.seconds_per_cue,
        )
        self.queue = ProcessingQueue(self.runner, max_pending=settings.max_pending_jobs)


def _services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


@api_bp.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint."""
    services = _services()
    queue_status = services.queue.get_queue_status()
    return jsonify(
        {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "queue_running": queue_status["is_running"],
            "queue_size": queue_status["queue_size"],
            "client_connected": services.sessions.current() is not None,
        }
    )


@api_bp.route("/upload", methods=["POST"])
def upload_video():
    """
    Upload a video and transcript for processing.

    Expected form data:
    - video: Video file to caption
    - transcript: Plain-text transcript (optional, empty means no captions)

    Returns:
    - 202 with the job_id once the job is queued
    - 400 if no video was sent
    - 503 if the processing queue is full
    """
    services = _services()

    file = request.files.get("video")
    if file is None or not file.filename:
        return jsonify({"success": False, "message": "No video file uploaded"}), 400

    try:
        video_path = services.store.save_upload(file)
    except ValueError as e:
        return jsonify({"success": False, "message": str(e)}), 400

    transcript = request.form.get("transcript", "")
    logger.info(f"Transcript received: {len(transcript.split())} words")

    job = services.runner.create_job(video_path, transcript)
    try:
        services.queue.enqueue_job(job)
    except QueueFullError as e:
        logger.warning(f"Rejecting upload {video_path}: {e}")
        services.store.cleanup([video_path])
        return jsonify({"success": False, "message": "Server is busy, try again later"}), 503

    return jsonify(
        {
            "success": True,
            "message": "Upload successful, processing started.",
            "job_id": job.job_id,
        }
    ), 202


@api_bp.route("/events", methods=["GET"])
def events():
    """
    Event stream for the connected client.

    Connecting replaces any previously connected client. Events:
    processing_progress, processing_complete, processing_error.
    """
    sessions = _services().sessions
    channel = EventChannel()
    sessions.register(channel)

    def generate():
        try:
            yield ": connected\n\n"
            yield from channel.listen()
        finally:
            sessions.clear(channel)

    return Response(
        generate(),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@api_bp.route("/processed/<path:filename>", methods=["GET"])
def processed_file(filename: str):
    """Serve a processed video."""
    return send_from_directory(_services().store.processed_dir.resolve(), filename)


@api_bp.route("/queue/status", methods=["GET"])
def get_queue_status():
    """Get detailed queue status information."""
    return jsonify(_services().queue.get_queue_status())


def create_app(settings: Optional[ServerSettings] = None, engine: Optional[Engine] = None) -> Flask:
    """
    Create the Flask app and start its processing queue.

    Args:
        settings: Server settings, read from the environment if omitted
        engine: Transcoding engine, FFmpegEngine if omitted

    Returns:
        Configured Flask app
    """
    settings = settings or ServerSettings.from_env()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_mb * 1024 * 1024
    CORS(app)

    services = Services(settings, engine)
    services.store.ensure_directories()
    services.queue.start()
    app.extensions[EXTENSION_KEY] = services

    app.register_blueprint(api_bp)
    return app


def configure_logging(log_level: str) -> None:
    level = getattr(logging, log_level, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    logging.getLogger("werkzeug").setLevel(max(level, logging.WARNING))


def main():
    """Run the development server."""
    settings = ServerSettings.from_env()
    configure_logging(settings.log_level)

    for key in ("PUBLIC_BASE_URL", "UPLOAD_DIR", "PROCESSED_DIR", "FFMPEG_PATH"):
        value, source = ConfigManager.get_display_value(key)
        logger.info(f"{key}={value} ({source})")

    app = create_app(settings)
    services = app.extensions[EXTENSION_KEY]
    atexit.register(services.queue.stop)

    logger.info(f"Server is running on http://{settings.host}:{settings.port}")
    app.run(host=settings.host, port=settings.port, threaded=True, use_reloader=False)


if __name__ == "__main__":
    main()
