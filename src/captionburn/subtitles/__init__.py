"""
Subtitle generation package.

Turns a plain-text transcript into a timed SubRip track.

Example usage:
    from captionburn.subtitles import synthesize_cues, write_srt

    cues = synthesize_cues("the quick brown fox jumps over the lazy dog")
    write_srt(cues, "video.mp4.srt")
"""

from .synthesizer import (
    DEFAULT_SECONDS_PER_CUE,
    DEFAULT_WORDS_PER_CUE,
    Cue,
    render_srt,
    synthesize_cues,
    write_srt,
)
from .utils import escape_filter_path, format_srt_timestamp

__all__ = [
    "Cue",
    "DEFAULT_SECONDS_PER_CUE",
    "DEFAULT_WORDS_PER_CUE",
    "escape_filter_path",
    "format_srt_timestamp",
    "render_srt",
    "synthesize_cues",
    "write_srt",
]
