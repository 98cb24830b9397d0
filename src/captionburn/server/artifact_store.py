"""
Filesystem layout for uploads, generated subtitles and processed outputs.

- Uploads land in the upload directory as <unixMillis>-<filename>
- The subtitle file for an upload lives next to it as <upload path>.srt
- Finished videos are written to the processed directory as
  processed-<unixMillis>.mp4 and are never deleted here
"""

import logging
import os
import threading
import time
from pathlib import Path
from typing import Iterable, List, Union

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

SUBTITLE_SUFFIX = ".srt"
OUTPUT_PREFIX = "processed-"
OUTPUT_EXTENSION = ".mp4"


def _unix_millis() -> int:
    return time.time_ns() // 1_000_000


class ArtifactStore:
    """Owns the upload and output directories and intermediate file cleanup."""

    def __init__(self, upload_dir: str = "uploads", processed_dir: str = "processed", public_base_url: str = ""):
        """
        Initialize the artifact store.

        Args:
            upload_dir: Directory receiving uploaded videos and subtitle files
            processed_dir: Directory receiving finished videos
            public_base_url: Base URL under which /processed is served
        """
        self.upload_dir = Path(upload_dir)
        self.processed_dir = Path(processed_dir)
        self.public_base_url = public_base_url.rstrip("/")

        # Last millisecond value handed out by new_output_name
        self._last_output_millis = 0
        self._name_lock = threading.Lock()

    def ensure_directories(self) -> None:
        """Create the upload and output directories if missing."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.processed_dir.mkdir(parents=True, exist_ok=True)

    def save_upload(self, file: FileStorage) -> Path:
        """
        Save an uploaded file into the upload directory.

        Args:
            file: Uploaded file from the request

        Returns:
            Path of the saved file

        Raises:
            ValueError: If the filename is empty after sanitization
        """
        filename = secure_filename(file.filename or "")
        if not filename:
            raise ValueError("Invalid filename")

        self.ensure_directories()
        target_path = self.upload_dir / f"{_unix_millis()}-{filename}"
        file.save(str(target_path))
        logger.info(f"File uploaded: {target_path}")
        return target_path

    @staticmethod
    def subtitle_path_for(video_path: Union[str, Path]) -> Path:
        """Subtitle file path derived from the video path."""
        return Path(f"{video_path}{SUBTITLE_SUFFIX}")

    def new_output_name(self) -> str:
        """
        Timestamped output name, unique among names issued by this store and
        not yet present in the processed directory.
        """
        with self._name_lock:
            millis = max(_unix_millis(), self._last_output_millis + 1)
            while (self.processed_dir / f"{OUTPUT_PREFIX}{millis}{OUTPUT_EXTENSION}").exists():
                millis += 1
            self._last_output_millis = millis
        return f"{OUTPUT_PREFIX}{millis}{OUTPUT_EXTENSION}"

    def output_path(self, output_file_name: str) -> Path:
        return self.processed_dir / output_file_name

    def download_url(self, output_file_name: str) -> str:
        return f"{self.public_base_url}/processed/{output_file_name}"

    def cleanup(self, paths: Iterable[Union[str, Path]]) -> List[Path]:
        """
        Delete intermediate files.

        Missing files are skipped silently. Other deletion errors are logged
        and reported back instead of raised.

        Args:
            paths: Files to delete

        Returns:
            Paths that could not be deleted
        """
        failed = []
        for path in paths:
            path = Path(path)
            try:
                os.remove(path)
                logger.debug(f"Removed {path}")
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Failed to cleanup file {path}: {e}")
                failed.append(path)
        return failed
