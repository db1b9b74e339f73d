"""
Unit tests for llvmenv.build.installation module.
"""

import tarfile
from pathlib import Path
from unittest.mock import patch

import pytest

from llvmenv.core.exceptions import ExternalToolNotFoundError, VersionParseError
from llvmenv.build.installation import Installation, expand_archive, parse_version


class TestParseVersion:
    """Tests for parse_version()."""

    @pytest.mark.parametrize(
        "output,expected",
        [
            ("clang version 6.0.1-svn331815-1~exp1~20180510084719.80 (branches/release_60)", (6, 0, 1)),
            ("clang version 7.0.0 (tags/RELEASE_700/final)\nTarget: x86_64-pc-linux-gnu", (7, 0, 0)),
            ("Ubuntu clang version 14.0.0-1ubuntu1", (14, 0, 0)),
            ("version 6.0.1-svn331815-1~exp1", (6, 0, 1)),
        ],
    )
    def test_parse(self, output, expected):
        assert parse_version(output) == expected

    def test_first_match_wins(self):
        assert parse_version("clang version 3.9.1 (based on LLVM 3.9.0)") == (3, 9, 1)

    @pytest.mark.parametrize("output", ["", "clang version 7", "clang version 7.0"])
    def test_no_version(self, output):
        with pytest.raises(VersionParseError):
            parse_version(output)


class TestInstallation:
    """Tests for Installation."""

    def test_system_always_exists(self, temp_dir):
        system = Installation.system(temp_dir / "nowhere")
        assert system.is_system
        assert system.exists()

    def test_exists_requires_bin(self, temp_dir):
        build = Installation.from_path(temp_dir / "7.0.0")
        assert build.name == "7.0.0"
        assert not build.exists()

        build.prefix.mkdir()
        assert not build.exists()

        (build.prefix / "bin").mkdir()
        assert build.exists()

    def test_version(self, temp_dir):
        build = Installation.from_path(temp_dir / "7.0.0")

        with patch(
            "llvmenv.build.installation.capture_output",
            return_value="clang version 7.0.0 (tags/RELEASE_700/final)\n",
        ) as mock_capture:
            assert build.version() == (7, 0, 0)

        mock_capture.assert_called_once_with([temp_dir / "7.0.0" / "bin" / "clang", "--version"])

    def test_version_missing_clang(self, temp_dir):
        build = Installation.from_path(temp_dir / "7.0.0")
        (build.prefix / "bin").mkdir(parents=True)

        with pytest.raises(ExternalToolNotFoundError):
            build.version()

    def test_str(self, temp_dir):
        assert str(Installation.from_path(temp_dir / "llvm-mirror")) == "llvm-mirror"


class TestArchive:
    """Tests for archiving and expanding builds."""

    def test_archive_and_expand(self, temp_dir, make_build, env_paths):
        prefix = make_build("llvm-dev")
        (prefix / "bin" / "clang").write_text("fake clang")
        out = temp_dir / "out"
        out.mkdir()

        archive = Installation.from_path(prefix).archive(out)

        assert archive == out / "llvm-dev.tar.xz"
        with tarfile.open(archive) as tar:
            assert "llvm-dev/bin/clang" in tar.getnames()

        other_data = temp_dir / "other-data"
        expand_archive(archive, other_data)
        assert (other_data / "llvm-dev" / "bin" / "clang").read_text() == "fake clang"
