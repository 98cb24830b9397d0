"""
Client module for communicating with the subtitle burning API server.

This module provides a simple interface to:
- Upload a video with its transcript
- Follow job events on the server's event stream
- Check server and queue status
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple

import requests
from requests.exceptions import ConnectionError, RequestException

from ..events import COMPLETE_EVENT, ERROR_EVENT, PROGRESS_EVENT


class JobFailedError(RuntimeError):
    """Raised when the server reports a processing error."""


def parse_sse_lines(lines: Iterable[str]) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """
    Parse Server-Sent-Events lines into (event, data) pairs.

    Comment lines (starting with ':') are ignored. Frames without an event
    name get the default name "message".
    """
    event = None
    data_lines = []

    for line in lines:
        if line == "":
            if data_lines:
                yield event or "message", json.loads("\n".join(data_lines))
            event = None
            data_lines = []
        elif line.startswith(":"):
            continue
        elif line.startswith("event:"):
            event = line[len("event:") :].strip()
        elif line.startswith("data:"):
            data_lines.append(line[len("data:") :].strip())


class APIClient:
    """Client for communicating with the subtitle burning API server."""

    def __init__(self, base_url: str = "http://localhost:4000"):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the API server
        """
        self.base_url = base_url.rstrip("/")
        self.session = requests.Session()

    def health_check(self) -> Dict[str, Any]:
        """
        Check if the API server is healthy.

        Raises:
            ConnectionError: If unable to connect to the server
        """
        try:
            response = self.session.get(f"{self.base_url}/health", timeout=30)
            response.raise_for_status()
            return response.json()
        except RequestException as e:
            raise ConnectionError(f"Unable to connect to API server: {e}")

    def upload_video(self, file_path: str, transcript: str = "", timeout: int = 300) -> Dict[str, Any]:
        """
        Upload a video file and its transcript for processing.

        Args:
            file_path: Path to the video file to upload
            transcript: Plain-text transcript to burn in as subtitles
            timeout: Request timeout in seconds

        Returns:
            Dictionary containing job_id and the server's acknowledgement

        Raises:
            FileNotFoundError: If the file doesn't exist
            RequestException: If the upload fails
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Video file not found: {file_path}")

        try:
            with open(file_path, "rb") as video_file:
                files = {"video": (file_path.name, video_file)}
                response = self.session.post(
                    f"{self.base_url}/upload", files=files, data={"transcript": transcript}, timeout=timeout
                )
                response.raise_for_status()
                return response.json()
        except RequestException as e:
            raise RequestException(f"Upload failed: {e}")

    def get_queue_status(self) -> Dict[str, Any]:
        """Get the server's processing queue status."""
        try:
            response = self.session.get(f"{self.base_url}/queue/status", timeout=30)
            response.raise_for_status()
            return response.json()
        except RequestException as e:
            raise RequestException(f"Failed to get queue status: {e}")

    def open_event_stream(self) -> requests.Response:
        """
        Connect to the server's event stream.

        Connecting makes this client the server's current session, so open
        the stream before uploading to receive every event of the job.
        """
        try:
            response = self.session.get(f"{self.base_url}/events", stream=True, timeout=(10, None))
            response.raise_for_status()
            return response
        except RequestException as e:
            raise RequestException(f"Failed to open event stream: {e}")

    @staticmethod
    def iter_events(response: requests.Response) -> Iterator[Tuple[str, Dict[str, Any]]]:
        """Yield (event, data) pairs from an open event stream."""
        return parse_sse_lines(response.iter_lines(decode_unicode=True))

    @staticmethod
    def wait_for_completion(
        response: requests.Response, on_progress: Optional[Callable[[int], None]] = None
    ) -> str:
        """
        Follow an open event stream until the job finishes.

        Args:
            response: Stream returned by open_event_stream
            on_progress: Optional callable receiving each progress percentage

        Returns:
            Download URL of the processed video

        Raises:
            JobFailedError: If the server reports a processing error
            ConnectionError: If the stream ends before the job finishes
        """
        for event, data in APIClient.iter_events(response):
            if event == PROGRESS_EVENT and on_progress is not None:
                on_progress(data.get("progress", 0))
            elif event == COMPLETE_EVENT:
                return data["downloadUrl"]
            elif event == ERROR_EVENT:
                raise JobFailedError(data.get("message", "Unknown error"))

        raise ConnectionError("Event stream closed before the job finished")


# Convenience function for quick uploads
def upload_and_process(
    file_path: str,
    transcript: str,
    api_url: str = "http://localhost:4000",
    wait_for_result: bool = True,
    on_progress: Optional[Callable[[int], None]] = None,
) -> Dict[str, Any]:
    """
    Upload a video and optionally wait for processing to complete.

    Args:
        file_path: Path to the video file
        transcript: Transcript text
        api_url: API server URL
        wait_for_result: Whether to follow the event stream until completion
        on_progress: Optional callable receiving progress percentages

    Returns:
        Upload acknowledgement, with "download_url" added when waited for
    """
    client = APIClient(api_url)

    if not wait_for_result:
        return client.upload_video(file_path, transcript)

    stream = client.open_event_stream()
    try:
        upload_result = client.upload_video(file_path, transcript)
        upload_result["download_url"] = client.wait_for_completion(stream, on_progress)
        return upload_result
    finally:
        stream.close()
