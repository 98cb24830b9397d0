"""
Subtitle burning server package.

This package provides a Flask API server that accepts a video and transcript,
burns generated subtitles into the video with ffmpeg on a background worker,
and streams progress to the connected client as Server-Sent Events.
"""

from .app import create_app
from .artifact_store import ArtifactStore
from .engine import FFmpegEngine
from .job_runner import JobRunner
from .models import Job, JobState
from .processing_queue import ProcessingQueue, QueueFullError
from .session import EventChannel, SessionRegistry

__all__ = [
    "create_app",
    "ArtifactStore",
    "EventChannel",
    "FFmpegEngine",
    "Job",
    "JobRunner",
    "JobState",
    "ProcessingQueue",
    "QueueFullError",
    "SessionRegistry",
]
