"""
Job execution for subtitle burning.

This module drives one job through its lifecycle:
synthesize subtitles, run the engine, relay its events to the connected
client, and clean up the intermediate files whatever the outcome.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Iterator, Optional, Protocol, Union

from ..events import COMPLETE_EVENT, ERROR_EVENT, PROGRESS_EVENT
from ..subtitles import DEFAULT_SECONDS_PER_CUE, DEFAULT_WORDS_PER_CUE, synthesize_cues, write_srt
from .artifact_store import ArtifactStore
from .models import (
    EngineCompleted,
    EngineEvent,
    EngineFailed,
    EngineProgress,
    Job,
    JobState,
)
from .session import SessionRegistry

logger = logging.getLogger(__name__)


class Engine(Protocol):
    def run(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        subtitle_path: Optional[Union[str, Path]] = None,
    ) -> Iterator[EngineEvent]: ...


class ProgressGate:
    """Turns noisy engine percentages into increasing integers in [0, 100]."""

    def __init__(self):
        self.last = 0

    def accept(self, percent: float) -> Optional[int]:
        """
        Returns:
            The value to forward, or None if it does not advance progress
        """
        value = min(100, max(0, int(percent)))
        if value <= self.last:
            return None
        self.last = value
        return value


class JobRunner:
    """Creates and runs transcoding jobs."""

    def __init__(
        self,
        store: ArtifactStore,
        sessions: SessionRegistry,
        engine: Engine,
        words_per_cue: int = DEFAULT_WORDS_PER_CUE,
        seconds_per_cue: float = DEFAULT_SECONDS_PER_CUE,
    ):
        """
        Initialize the job runner.

        Args:
            store: Artifact store for paths and cleanup
            sessions: Registry receiving job events
            engine: Transcoding engine adapter
            words_per_cue: Maximum words per subtitle cue
            seconds_per_cue: Duration of every subtitle cue
        """
        self.store = store
        self.sessions = sessions
        self.engine = engine
        self.words_per_cue = words_per_cue
        self.seconds_per_cue = seconds_per_cue

    def create_job(self, video_path: Union[str, Path], transcript: str) -> Job:
        """Build a job for an uploaded video and its transcript."""
        output_file_name = self.store.new_output_name()
        return Job(
            job_id=uuid.uuid4().hex,
            source_video_path=str(video_path),
            transcript_text=transcript or "",
            subtitle_path=str(self.store.subtitle_path_for(video_path)),
            output_path=str(self.store.output_path(output_file_name)),
            output_file_name=output_file_name,
        )

    def run(self, job: Job) -> Job:
        """
        Run a job to a terminal state.

        Engine failures and unexpected errors are reported to the client and
        never raised. Source video and subtitle file are always removed.

        Args:
            job: Job to run

        Returns:
            The same job, in state SUCCEEDED or FAILED
        """
        start_time = time.time()
        job.state = JobState.RUNNING
        logger.info(f"Starting processing for job {job.job_id}: {job.source_video_path}")

        try:
            cues = synthesize_cues(job.transcript_text, self.words_per_cue, self.seconds_per_cue)
            write_srt(cues, job.subtitle_path)

            if not cues:
                logger.warning(f"Empty transcript for job {job.job_id}, skipping subtitle filter")
            subtitle_path = job.subtitle_path if cues else None

            self._relay_events(job, self.engine.run(job.source_video_path, job.output_path, subtitle_path))

        except Exception as e:
            logger.exception(f"Processing failed for job {job.job_id}")
            self._fail(job, str(e))

        finally:
            if not job.state.is_terminal:
                self._fail(job, "Engine stopped without reporting a result")
            self.store.cleanup([job.source_video_path, job.subtitle_path])

        processing_time = time.time() - start_time
        logger.info(f"Job {job.job_id} {job.state.value} in {processing_time:.2f} seconds")
        return job

    def _relay_events(self, job: Job, events: Iterator[EngineEvent]) -> None:
        gate = ProgressGate()

        for event in events:
            if isinstance(event, EngineProgress):
                progress = gate.accept(event.percent)
                if progress is not None:
                    logger.info(f"Processing: {progress}% done")
                    self.sessions.emit(PROGRESS_EVENT, {"progress": progress})

            elif isinstance(event, EngineCompleted):
                job.state = JobState.SUCCEEDED
                logger.info(f"Processing finished successfully: {job.output_path}")
                self.sessions.emit(COMPLETE_EVENT, {"downloadUrl": self.store.download_url(job.output_file_name)})
                return

            elif isinstance(event, EngineFailed):
                self._fail(job, event.message)
                return

    def _fail(self, job: Job, message: str) -> None:
        job.state = JobState.FAILED
        job.error = message
        logger.error(f"Error during processing of job {job.job_id}: {message}")
        self.sessions.emit(ERROR_EVENT, {"message": message})
