"""
Streaming HTTP downloads with progress tracking.

Archives are never written to disk before unpacking: the response body is
exposed as a file-like object that the tar reader consumes directly.
Failed requests are reported once, without retrying, and no timeout is
applied unless the caller asks for one.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Callable, Iterator, Optional

import requests
import urllib3
from requests.exceptions import RequestException

from .exceptions import DownloadError

logger = logging.getLogger(__name__)


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


ProgressCallback = Callable[[DownloadProgress], None]


class ProgressReader:
    """
    Wrap a readable byte stream and report progress as it is consumed.

    Progress is reported at most once per ``interval`` seconds, and once more
    when the stream reaches the announced total size.
    """

    def __init__(
        self,
        stream: BinaryIO,
        total_bytes: int = 0,
        progress_callback: Optional[ProgressCallback] = None,
        interval: float = 0.5,
    ):
        self._stream = stream
        self.total_bytes = total_bytes
        self.bytes_read = 0
        self._callback = progress_callback
        self._interval = interval
        self._start = time.time()
        self._last_report = self._start

    def read(self, size: int = -1) -> bytes:
        """
        Read up to ``size`` bytes.

        Raises:
            DownloadError: If the connection breaks while reading the body
        """
        try:
            data = self._stream.read(size)
        except (urllib3.exceptions.HTTPError, RequestException, OSError) as e:
            raise DownloadError(
                f"Connection broken after {self.bytes_read} bytes: {e}"
            ) from e
        if data:
            self.bytes_read += len(data)
            self._report()
        return data

    def _report(self) -> None:
        if not self._callback:
            return
        now = time.time()
        if now - self._last_report < self._interval and self.bytes_read != self.total_bytes:
            return

        elapsed = now - self._start
        speed = self.bytes_read / elapsed if elapsed > 0 else 0
        remaining = self.total_bytes - self.bytes_read if self.total_bytes > 0 else 0
        eta = remaining / speed if speed > 0 else 0

        self._callback(
            DownloadProgress(
                bytes_downloaded=self.bytes_read,
                total_bytes=self.total_bytes if self.total_bytes > 0 else self.bytes_read,
                percentage=(self.bytes_read / self.total_bytes * 100)
                if self.total_bytes > 0
                else 0,
                speed_bps=speed,
                eta_seconds=eta,
            )
        )
        self._last_report = now


@contextmanager
def open_stream(
    url: str,
    progress_callback: Optional[ProgressCallback] = None,
    timeout: Optional[float] = None,
) -> Iterator[ProgressReader]:
    """
    Open a URL and yield its body as a readable byte stream.

    The body is yielded exactly as sent by the server, without undoing any
    transfer encoding, so compressed archives stay compressed.

    Args:
        url: URL to stream
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds (None waits indefinitely)

    Raises:
        DownloadError: If the request fails or the server returns an error status

    Example:
        >>> with open_stream("https://example.com/llvm.src.tar.xz") as stream:
        ...     header = stream.read(6)
    """
    if not url:
        raise ValueError("URL cannot be empty")

    logger.info(f"Download: {url}")
    try:
        response = requests.get(url, stream=True, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
    except RequestException as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    content_length = response.headers.get("content-length")
    total = int(content_length) if content_length and content_length.isdigit() else 0

    try:
        yield ProgressReader(response.raw, total, progress_callback)
    finally:
        response.close()


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0 and progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    else:
        # Unknown total size
        return f"{mb_downloaded:.1f} MB " f"at {speed_mbps:.1f} MB/s"
