"""
FFmpeg adapter that burns subtitles into a video.

The adapter runs ffmpeg as a subprocess and turns its machine-readable
``-progress`` output into a stream of typed events:

    EngineProgress* (EngineCompleted | EngineFailed)

The stream always ends with exactly one terminal event. A missing binary
and a non-zero exit both surface as EngineFailed.
"""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Iterator, List, Optional, Union

from ..subtitles import escape_filter_path
from .models import EngineCompleted, EngineEvent, EngineFailed, EngineProgress

logger = logging.getLogger(__name__)

DEFAULT_SUBTITLE_STYLE = "Alignment=2,Fontsize=24,PrimaryColour=&Hffffff&"

# Keys in ffmpeg -progress output carrying the output position in microseconds
# (out_time_ms is also microseconds, a long-standing ffmpeg quirk)
_OUT_TIME_KEYS = ("out_time_us", "out_time_ms")


def parse_progress_line(line: str, duration: Optional[float]) -> Optional[float]:
    """
    Convert one ``key=value`` line of ffmpeg progress output to a percentage.

    Args:
        line: Line from ffmpeg -progress output
        duration: Input duration in seconds, None if unknown

    Returns:
        Percent complete (unclamped), or None if the line carries no position
    """
    if not duration or duration <= 0 or "=" not in line:
        return None

    key, _, value = line.strip().partition("=")
    if key not in _OUT_TIME_KEYS:
        return None

    try:
        out_time_us = int(value)
    except ValueError:
        return None  # "N/A" before the first frame

    return out_time_us / 1_000_000 / duration * 100


class FFmpegEngine:
    """Runs ffmpeg to burn a subtitle file into a video."""

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        ffprobe_path: str = "ffprobe",
        subtitle_style: str = DEFAULT_SUBTITLE_STYLE,
    ):
        """
        Initialize the engine.

        Args:
            ffmpeg_path: ffmpeg executable
            ffprobe_path: ffprobe executable, used to read the input duration
            subtitle_style: ASS force_style applied to burned captions
        """
        self.ffmpeg_path = ffmpeg_path
        self.ffprobe_path = ffprobe_path
        self.subtitle_style = subtitle_style

    def probe_duration(self, input_path: Union[str, Path]) -> Optional[float]:
        """Input duration in seconds, or None if it cannot be determined."""
        cmd = [
            self.ffprobe_path,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(input_path),
        ]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.warning(f"Could not probe duration of {input_path}: {e}")
            return None

        if result.returncode != 0:
            logger.warning(f"ffprobe failed for {input_path}: {result.stderr.strip()}")
            return None

        try:
            return float(result.stdout.strip())
        except ValueError:
            return None

    def build_command(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        subtitle_path: Optional[Union[str, Path]] = None,
    ) -> List[str]:
        """ffmpeg command line; without subtitle_path the video is re-encoded as is."""
        cmd = [self.ffmpeg_path, "-y", "-i", str(input_path)]
        if subtitle_path is not None:
            subtitle_filter = f"subtitles={escape_filter_path(str(subtitle_path))}"
            if self.subtitle_style:
                subtitle_filter += f":force_style='{self.subtitle_style}'"
            cmd += ["-vf", subtitle_filter]
        cmd += ["-progress", "pipe:1", "-nostats", "-loglevel", "error", str(output_path)]
        return cmd

    def run(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        subtitle_path: Optional[Union[str, Path]] = None,
    ) -> Iterator[EngineEvent]:
        """
        Run ffmpeg and yield its events.

        Args:
            input_path: Source video
            output_path: Destination video
            subtitle_path: SRT file to burn in, None to skip the subtitle filter

        Yields:
            EngineProgress events followed by one EngineCompleted or EngineFailed
        """
        duration = self.probe_duration(input_path)
        cmd = self.build_command(input_path, output_path, subtitle_path)
        logger.debug(f"FFmpeg command: {' '.join(cmd)}")

        with tempfile.TemporaryFile(mode="w+") as stderr_file:
            try:
                process = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=stderr_file, text=True)
            except OSError as e:
                yield EngineFailed(f"Failed to start ffmpeg: {e}")
                return

            try:
                for line in process.stdout:
                    percent = parse_progress_line(line, duration)
                    if percent is not None:
                        yield EngineProgress(percent)

                returncode = process.wait()
            finally:
                if process.poll() is None:
                    process.kill()
                    process.wait()
                process.stdout.close()

            if returncode != 0:
                stderr_file.seek(0)
                detail = stderr_file.read().strip().splitlines()
                reason = detail[-1] if detail else "no error output"
                yield EngineFailed(f"ffmpeg exited with code {returncode}: {reason}")
                return

        yield EngineCompleted()
