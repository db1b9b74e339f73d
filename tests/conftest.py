"""
Pytest configuration and shared fixtures for llvmenv tests.
"""

import io
import os
import tarfile
import tempfile
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Dict, Generator

import pytest

from llvmenv.core.directory import EnvironmentPaths


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def env_paths(temp_dir: Path) -> EnvironmentPaths:
    """Managed directories below a temporary root, with a fake system prefix."""
    system_prefix = temp_dir / "usr"
    (system_prefix / "bin").mkdir(parents=True)
    return EnvironmentPaths.under(temp_dir / "llvmenv", system_prefix=system_prefix).ensure()


@pytest.fixture
def make_build(env_paths: EnvironmentPaths):
    """
    Factory creating installed builds in the data directory.

    Example:
        def test_something(make_build):
            prefix = make_build("7.0.0")
            assert (prefix / "bin").is_dir()
    """

    def _make(name: str, with_bin: bool = True) -> Path:
        prefix = env_paths.data_dir / name
        if with_bin:
            (prefix / "bin").mkdir(parents=True)
        else:
            prefix.mkdir(parents=True)
        return prefix

    return _make


def build_tar(files: Dict[str, bytes], compression: str = "gz", dirs=()) -> bytes:
    """
    Build an in-memory tar archive.

    Args:
        files: Member path -> content
        compression: "gz", "xz" or "bz2"
        dirs: Directory members to add before the files
    """
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode=f"w:{compression}") as tar:
        for name in dirs:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, content in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(content))
    return buffer.getvalue()


@pytest.fixture
def source_archive() -> bytes:
    """A gzip source archive wrapped in a single top-level directory."""
    return build_tar(
        {
            "X-1.0/a.txt": b"alpha\n",
            "X-1.0/lib/b.txt": b"beta\n",
        },
        dirs=["X-1.0", "X-1.0/lib"],
    )


@pytest.fixture
def tar_builder():
    """Expose build_tar() to tests."""
    return build_tar


@pytest.fixture
def flaky_server():
    """
    Local HTTP server for an archive whose first response is cut in half.

    The Content-Length always announces the full archive; later requests get
    the complete body. Yields (url, request_log).
    """
    body = build_tar(
        {
            "X-1.0/a.txt": b"alpha\n",
            "X-1.0/blob.bin": os.urandom(200 * 1024),
        }
    )
    requests_seen = []

    class Handler(BaseHTTPRequestHandler):
        def do_GET(self):
            requests_seen.append(self.path)
            self.send_response(200)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            if len(requests_seen) == 1:
                self.wfile.write(body[: len(body) // 2])
            else:
                self.wfile.write(body)

        def log_message(self, format, *args):
            pass

    server = HTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_port}/X-1.0.tar.gz", requests_seen
    finally:
        server.shutdown()
        server.server_close()
