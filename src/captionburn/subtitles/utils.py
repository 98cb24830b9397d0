"""
Utility functions for subtitle handling.

Timestamp formatting for SubRip files and escaping of paths embedded in
ffmpeg filter graphs.
"""

import re

# Characters special to a filter option value, and to the filtergraph around it
_OPTION_SPECIAL = re.compile(r"([\\':])")
_GRAPH_SPECIAL = re.compile(r"([\\'\[\],;])")


def format_srt_timestamp(seconds: float) -> str:
    """
    Format seconds as an SRT timestamp (HH:MM:SS,mmm).

    Args:
        seconds: Time in seconds, negative values clamp to zero

    Returns:
        Formatted time string, e.g. "00:00:03,000"
    """
    if seconds < 0:
        seconds = 0

    total_millis = int(round(seconds * 1000))
    hours, remainder = divmod(total_millis, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)

    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def escape_filter_path(path: str) -> str:
    """
    Escape a file path for use as an ffmpeg filter option value inside a -vf graph.

    ffmpeg unescapes twice: the filtergraph parser strips one level of
    backslashes and quotes, then the filter splits its options on ':' and
    unescapes again. The path is escaped for the option level first, then
    for the graph level.
    """
    escaped = _OPTION_SPECIAL.sub(r"\\\1", path)
    return _GRAPH_SPECIAL.sub(r"\\\1", escaped)
