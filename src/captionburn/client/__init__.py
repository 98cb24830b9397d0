"""
Client package for communicating with the subtitle burning API server.
"""

from .api_client import APIClient, JobFailedError, parse_sse_lines, upload_and_process

__all__ = ["APIClient", "JobFailedError", "parse_sse_lines", "upload_and_process"]
