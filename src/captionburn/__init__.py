"""
captionburn: burn transcript subtitles into uploaded videos.

Subpackages:
- subtitles: transcript to timed SubRip track
- server: Flask upload server, job queue, ffmpeg engine, client event stream
- client: requests-based client for the server
"""

__version__ = "0.1.0"
