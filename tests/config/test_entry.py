"""
Unit tests for entries: entry.yaml parsing, official releases and the
checkout/build workflow with external tools mocked.
"""

from pathlib import Path
from unittest.mock import Mock, call, patch

import pytest

from llvmenv.config.entry import (
    ENTRY_FILE,
    BuildType,
    CMakeGenerator,
    Entry,
    EntrySetting,
    Tool,
    init_config,
    load_entries,
    load_entry,
    load_entry_yaml,
    official_releases,
)
from llvmenv.core.exceptions import (
    ConfigExistsError,
    DownloadError,
    EntryNotFoundError,
    FilesystemIOError,
    InvalidEntryError,
    UnsupportedGeneratorError,
)
from llvmenv.resource.descriptor import Archive, GitRepository

SAMPLE_YAML = """
llvm-mirror:
  url: https://github.com/llvm-mirror/llvm
  branch: release_80
  target: [X86, AArch64]
  option:
    LLVM_ENABLE_ASSERTIONS: "ON"
  tools:
    - name: clang
      url: https://github.com/llvm-mirror/clang
    - name: clang-extra
      url: https://github.com/llvm-mirror/clang-tools-extra
      relative_path: tools/clang/tools/extra
local-llvm:
  path: /opt/src/llvm
  builder: ninja
  build_type: Debug
"""


class TestCMakeGenerator:
    """Tests for CMakeGenerator."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Makefile", CMakeGenerator.MAKEFILE),
            ("ninja", CMakeGenerator.NINJA),
            ("NINJA", CMakeGenerator.NINJA),
            ("vs", CMakeGenerator.VISUAL_STUDIO),
            ("VisualStudio", CMakeGenerator.VISUAL_STUDIO),
            ("platform", CMakeGenerator.PLATFORM),
        ],
    )
    def test_from_str(self, name, expected):
        assert CMakeGenerator.from_str(name) == expected

    def test_unknown(self):
        with pytest.raises(UnsupportedGeneratorError, match="Unsupported Generator: scons"):
            CMakeGenerator.from_str("scons")

    def test_options(self):
        assert CMakeGenerator.NINJA.option() == ["-G", "Ninja"]
        assert CMakeGenerator.MAKEFILE.option() == ["-G", "Unix Makefiles"]
        assert CMakeGenerator.PLATFORM.option() == []
        assert CMakeGenerator.NINJA.build_option(8) == ["--", "-j", "8"]
        assert CMakeGenerator.VISUAL_STUDIO.build_option(8) == []


class TestEntryYaml:
    """Tests for load_entry_yaml()."""

    def test_parse(self, env_paths):
        remote, local = load_entry_yaml(SAMPLE_YAML, env_paths)

        assert remote.name == "llvm-mirror"
        assert not remote.is_local
        assert remote.setting.branch == "release_80"
        assert remote.setting.target == ["X86", "AArch64"]
        assert remote.setting.option == {"LLVM_ENABLE_ASSERTIONS": "ON"}
        assert [t.rel_path() for t in remote.tools] == ["tools/clang", "tools/clang/tools/extra"]

        assert local.name == "local-llvm"
        assert local.is_local
        assert local.src_dir() == Path("/opt/src/llvm")
        assert local.setting.builder is CMakeGenerator.NINJA
        assert local.setting.build_type is BuildType.DEBUG

    def test_empty(self, env_paths):
        assert load_entry_yaml("", env_paths) == []

    def test_malformed_yaml(self, env_paths):
        with pytest.raises(InvalidEntryError, match="Invalid YAML"):
            load_entry_yaml("a: [unclosed", env_paths)

    def test_not_a_mapping(self, env_paths):
        with pytest.raises(InvalidEntryError):
            load_entry_yaml("- a\n- b\n", env_paths)

    def test_url_and_path(self, env_paths):
        with pytest.raises(InvalidEntryError, match="One of path or url"):
            load_entry_yaml("x:\n  url: https://a/b\n  path: /c\n", env_paths)

    def test_neither_url_nor_path(self, env_paths):
        with pytest.raises(InvalidEntryError):
            load_entry_yaml("x:\n  target: [X86]\n", env_paths)

    def test_unknown_field(self, env_paths):
        with pytest.raises(InvalidEntryError, match="Unknown fields"):
            load_entry_yaml("x:\n  url: https://a/b\n  colour: red\n", env_paths)

    def test_invalid_tool(self, env_paths):
        with pytest.raises(InvalidEntryError, match="Invalid tool"):
            load_entry_yaml("x:\n  url: https://a/b\n  tools:\n    - url: https://a/c\n", env_paths)

    def test_invalid_build_type(self, env_paths):
        with pytest.raises(InvalidEntryError, match="build_type"):
            load_entry_yaml("x:\n  url: https://a/b\n  build_type: Fast\n", env_paths)

    def test_local_entry_ignores_tools(self, env_paths, caplog):
        text = "x:\n  path: /src\n  tools:\n    - name: clang\n      url: https://a/c\n"

        with caplog.at_level("WARNING", logger="llvmenv.config.entry"):
            (entry,) = load_entry_yaml(text, env_paths)

        assert entry.tools == []
        assert "'tools' must be used with url" in caplog.text

    def test_local_path_expanded(self, env_paths, monkeypatch):
        monkeypatch.setenv("LLVM_SRC", "/work/llvm")
        (entry,) = load_entry_yaml("x:\n  path: $LLVM_SRC/trunk\n", env_paths)
        assert entry.src_dir() == Path("/work/llvm/trunk")


class TestOfficialReleases:
    """Tests for pre-defined release entries."""

    def test_releases(self, env_paths):
        entries = official_releases(env_paths)
        names = [e.name for e in entries]

        assert names[0] == "8.0.0"
        assert "6.0.1" in names
        assert names[-1] == "3.9.0"

    def test_release_urls(self, env_paths):
        entry = {e.name: e for e in official_releases(env_paths)}["6.0.1"]

        assert entry.url == "http://releases.llvm.org/6.0.1/llvm-6.0.1.src.tar.xz"
        assert [(t.name, t.url) for t in entry.tools] == [
            ("clang", "http://releases.llvm.org/6.0.1/cfe-6.0.1.src.tar.xz"),
            ("lld", "http://releases.llvm.org/6.0.1/lld-6.0.1.src.tar.xz"),
        ]


class TestLoadEntries:
    """Tests for load_entries(), load_entry() and init_config()."""

    def test_without_entry_file(self, env_paths):
        entries = load_entries(env_paths)
        assert entries[0].name == "8.0.0"

    def test_user_entries_first(self, env_paths):
        (env_paths.config_dir / ENTRY_FILE).write_text(SAMPLE_YAML)

        names = [e.name for e in load_entries(env_paths)]

        assert names[:3] == ["llvm-mirror", "local-llvm", "8.0.0"]

    def test_load_entry(self, env_paths):
        assert load_entry(env_paths, "7.0.0").name == "7.0.0"

    def test_load_entry_missing(self, env_paths):
        with pytest.raises(EntryNotFoundError):
            load_entry(env_paths, "nope")

    def test_init_config(self, env_paths):
        path = init_config(env_paths)

        assert path == env_paths.config_dir / ENTRY_FILE
        names = [e.name for e in load_entries(env_paths)]
        assert names[0] == "llvm-mirror"

    def test_init_config_twice(self, env_paths):
        init_config(env_paths)
        with pytest.raises(ConfigExistsError):
            init_config(env_paths)


@pytest.fixture
def remote_entry(env_paths):
    setting = EntrySetting(
        url="http://releases.llvm.org/6.0.1/llvm-6.0.1.src.tar.xz",
        tools=[Tool(name="clang", url="http://releases.llvm.org/6.0.1/cfe-6.0.1.src.tar.xz")],
        target=["X86"],
    )
    return Entry.parse_setting(
        "6.0.1",
        setting,
        env_paths,
        fetcher=Mock(),
        locator=Mock(classify=Mock(side_effect=lambda url, branch=None: Archive(url))),
    )


class TestEntryWorkflow:
    """Tests for checkout, update, clean and build."""

    def test_checkout_fetches_sources_and_tools(self, remote_entry, env_paths):
        remote_entry.checkout()

        src = env_paths.cache_dir / "6.0.1"
        assert remote_entry.fetcher.download.call_args_list == [
            call(Archive("http://releases.llvm.org/6.0.1/llvm-6.0.1.src.tar.xz"), src),
            call(Archive("http://releases.llvm.org/6.0.1/cfe-6.0.1.src.tar.xz"), src / "tools/clang"),
        ]

    def test_checkout_skips_existing(self, remote_entry, env_paths):
        (env_paths.cache_dir / "6.0.1" / "tools" / "clang").mkdir(parents=True)

        remote_entry.checkout()

        remote_entry.fetcher.download.assert_not_called()

    def test_checkout_local_missing_path(self, env_paths, temp_dir):
        entry = Entry.parse_setting("x", EntrySetting(path=str(temp_dir / "nope")), env_paths)
        with pytest.raises(FilesystemIOError, match="is not a directory"):
            entry.checkout()

    def test_update(self, env_paths):
        locator = Mock(classify=Mock(side_effect=lambda url, branch=None: GitRepository(url, branch)))
        setting = EntrySetting(
            url="https://github.com/llvm-mirror/llvm",
            branch="release_80",
            tools=[Tool(name="clang", url="https://github.com/llvm-mirror/clang")],
        )
        entry = Entry.parse_setting("m", setting, env_paths, fetcher=Mock(), locator=locator)

        entry.update()

        src = env_paths.cache_dir / "m"
        assert entry.fetcher.update.call_args_list == [
            call(GitRepository("https://github.com/llvm-mirror/llvm", "release_80"), src),
            call(GitRepository("https://github.com/llvm-mirror/clang", None), src / "tools/clang"),
        ]

    def test_clean_cache_dir(self, remote_entry, env_paths):
        src = env_paths.cache_dir / "6.0.1"
        (src / "build").mkdir(parents=True)

        remote_entry.clean_cache_dir()

        assert not src.exists()

    def test_clean_build_dir(self, remote_entry, env_paths):
        build = env_paths.cache_dir / "6.0.1" / "build"
        build.mkdir(parents=True)

        remote_entry.clean_build_dir()

        assert not build.exists()
        assert build.parent.exists()

    def test_configure_args(self, remote_entry, env_paths):
        remote_entry.set_builder("ninja")
        remote_entry.setting.option = {"LLVM_ENABLE_ASSERTIONS": "ON"}

        assert remote_entry.configure_args() == [
            "cmake",
            "-G",
            "Ninja",
            str(env_paths.cache_dir / "6.0.1"),
            f"-DCMAKE_INSTALL_PREFIX={env_paths.data_dir / '6.0.1'}",
            "-DCMAKE_BUILD_TYPE=Release",
            "-DLLVM_TARGETS_TO_BUILD=X86",
            "-DLLVM_ENABLE_ASSERTIONS=ON",
        ]

    def test_build(self, remote_entry, env_paths):
        remote_entry.set_builder("makefile")

        with patch("llvmenv.config.entry.check_run") as mock_run:
            remote_entry.build(4)

        build_dir = env_paths.cache_dir / "6.0.1" / "build"
        assert build_dir.is_dir()
        configure, install = mock_run.call_args_list
        assert configure.args[0][:4] == ["cmake", "-G", "Unix Makefiles", str(build_dir.parent)]
        assert configure.kwargs == {"cwd": build_dir}
        assert install.args[0] == [
            "cmake",
            "--build",
            str(build_dir),
            "--target",
            "install",
            "--",
            "-j",
            "4",
        ]

    def test_checkout_after_failed_fetch_refetches(self, env_paths, flaky_server):
        url, requests_seen = flaky_server
        entry = Entry.parse_setting(
            "flaky",
            EntrySetting(url=url),
            env_paths,
            locator=Mock(classify=Mock(side_effect=lambda url, branch=None: Archive(url))),
        )

        with pytest.raises(DownloadError):
            entry.checkout()
        assert not entry.src_dir().exists()

        entry.checkout()

        assert (entry.src_dir() / "a.txt").read_text() == "alpha\n"
        assert len(requests_seen) == 2
