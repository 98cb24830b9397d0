"""
Data models for the subtitle burning server.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union


class JobState(Enum):
    """Lifecycle state of a transcoding job."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


@dataclass
class Job:
    """One transcoding run: source video + transcript in, captioned video out."""

    job_id: str
    source_video_path: str
    transcript_text: str
    subtitle_path: str
    output_path: str
    output_file_name: str
    state: JobState = JobState.IDLE
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_id": self.job_id,
            "source_video_path": self.source_video_path,
            "subtitle_path": self.subtitle_path,
            "output_file_name": self.output_file_name,
            "state": self.state.value,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class EngineProgress:
    """Raw progress reported by the engine, in percent (may be noisy)."""

    percent: float


@dataclass(frozen=True)
class EngineCompleted:
    """The engine finished and the output file was written."""


@dataclass(frozen=True)
class EngineFailed:
    """The engine could not start or exited abnormally."""

    message: str


EngineEvent = Union[EngineProgress, EngineCompleted, EngineFailed]
