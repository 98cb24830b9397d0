"""
Subtitle synthesis from a plain-text transcript.

The transcript carries no timing information, so cues are built with a
fixed word budget and a fixed duration: every ``words_per_cue`` words form
one cue lasting ``seconds_per_cue`` seconds, each cue starting where the
previous one ended. The resulting track is written as a SubRip (.srt) file.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from .utils import format_srt_timestamp

logger = logging.getLogger(__name__)

DEFAULT_WORDS_PER_CUE = 5
DEFAULT_SECONDS_PER_CUE = 3


@dataclass(frozen=True)
class Cue:
    """A single timed subtitle entry."""

    index: int
    start_seconds: float
    end_seconds: float
    text: str


def synthesize_cues(
    transcript: str,
    words_per_cue: int = DEFAULT_WORDS_PER_CUE,
    seconds_per_cue: float = DEFAULT_SECONDS_PER_CUE,
) -> List[Cue]:
    """
    Split a transcript into contiguous, fixed-duration cues.

    Args:
        transcript: Transcript text, any whitespace separates words
        words_per_cue: Maximum number of words per cue
        seconds_per_cue: Duration of every cue in seconds

    Returns:
        Ordered list of cues, empty for a blank transcript

    Raises:
        ValueError: If words_per_cue or seconds_per_cue is not positive
    """
    if words_per_cue < 1:
        raise ValueError(f"words_per_cue must be positive, got {words_per_cue}")
    if seconds_per_cue <= 0:
        raise ValueError(f"seconds_per_cue must be positive, got {seconds_per_cue}")

    words = (transcript or "").split()
    cues: List[Cue] = []
    start = 0

    for offset in range(0, len(words), words_per_cue):
        end = start + seconds_per_cue
        cues.append(
            Cue(
                index=len(cues) + 1,
                start_seconds=start,
                end_seconds=end,
                text=" ".join(words[offset : offset + words_per_cue]),
            )
        )
        start = end

    return cues


def render_srt(cues: List[Cue]) -> str:
    """Render cues in SubRip format (index, timing line, text, blank line)."""
    blocks = []
    for cue in cues:
        blocks.append(
            f"{cue.index}\n"
            f"{format_srt_timestamp(cue.start_seconds)} --> {format_srt_timestamp(cue.end_seconds)}\n"
            f"{cue.text}\n\n"
        )
    return "".join(blocks)


def write_srt(cues: List[Cue], output_path: Union[str, Path]) -> Path:
    """
    Write cues to an SRT file.

    An empty track produces an empty file.

    Args:
        cues: Cues to write
        output_path: Destination path

    Returns:
        Path of the written file
    """
    output_path = Path(output_path)
    output_path.write_text(render_srt(cues), encoding="utf-8")
    logger.info(f"Generated SRT file: {output_path} ({len(cues)} cues)")
    return output_path
