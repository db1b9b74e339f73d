"""
Entries: how to fetch and compile an LLVM/Clang build.

entry.yaml
----------
Entries are read from ``$XDG_CONFIG_HOME/llvmenv/entry.yaml``; ``llvmenv init``
writes a default one:

    llvm-mirror:
      url: https://github.com/llvm-mirror/llvm
      target: [X86]
      tools:
        - name: clang
          url: https://github.com/llvm-mirror/clang
        - name: clang-extra
          url: https://github.com/llvm-mirror/clang-tools-extra
          relative_path: tools/clang/tools/extra

``tools`` are LLVM subprojects fetched into ``<llvm-src>/tools/<name>`` unless
``relative_path`` says otherwise. An entry with ``path`` instead of ``url`` is a
*local* entry building an existing source tree.

Official LLVM releases are always available as pre-defined entries.
"""

import logging
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..core.directory import EnvironmentPaths
from ..core.exceptions import (
    ConfigExistsError,
    EntryNotFoundError,
    FilesystemIOError,
    InvalidEntryError,
    UnsupportedGeneratorError,
)
from ..core.filesystem import safe_rmtree
from ..core.process import check_run
from ..resource import ResourceFetcher, ResourceLocator

logger = logging.getLogger(__name__)

ENTRY_FILE = "entry.yaml"
DEFAULT_ENTRY_TEMPLATE = Path(__file__).parent.parent / "data" / ENTRY_FILE

OFFICIAL_RELEASES = [
    (8, 0, 0),
    (7, 0, 0),
    (6, 0, 1),
    (6, 0, 0),
    (5, 0, 2),
    (5, 0, 1),
    (4, 0, 1),
    (4, 0, 0),
    (3, 9, 1),
    (3, 9, 0),
]


class CMakeGenerator(Enum):
    """CMake generator (``-G`` option)."""

    PLATFORM = "Platform"
    MAKEFILE = "Makefile"
    NINJA = "Ninja"
    VISUAL_STUDIO = "VisualStudio"

    @classmethod
    def from_str(cls, builder: str) -> "CMakeGenerator":
        """
        Parse a generator name, case-insensitively.

        Example:
            >>> CMakeGenerator.from_str("vs")
            <CMakeGenerator.VISUAL_STUDIO: 'VisualStudio'>
        """
        key = builder.lower()
        if key == "makefile":
            return cls.MAKEFILE
        if key == "ninja":
            return cls.NINJA
        if key in ("visualstudio", "vs"):
            return cls.VISUAL_STUDIO
        if key == "platform":
            return cls.PLATFORM
        raise UnsupportedGeneratorError(f"Unsupported Generator: {builder}")

    def option(self) -> List[str]:
        if self is CMakeGenerator.MAKEFILE:
            return ["-G", "Unix Makefiles"]
        if self is CMakeGenerator.NINJA:
            return ["-G", "Ninja"]
        if self is CMakeGenerator.VISUAL_STUDIO:
            return ["-G", "Visual Studio 15 2017"]
        return []

    def build_option(self, nproc: int) -> List[str]:
        if self in (CMakeGenerator.MAKEFILE, CMakeGenerator.NINJA):
            return ["--", "-j", str(nproc)]
        return []


class BuildType(Enum):
    """CMAKE_BUILD_TYPE."""

    DEBUG = "Debug"
    RELEASE = "Release"


@dataclass
class Tool:
    """An LLVM subproject (clang, lld, compiler-rt, ...) fetched into the LLVM tree."""

    name: str
    url: str
    branch: Optional[str] = None
    relative_path: Optional[str] = None

    def rel_path(self) -> str:
        return self.relative_path or f"tools/{self.name}"


@dataclass
class EntrySetting:
    """Raw settings of an entry as written in entry.yaml."""

    url: Optional[str] = None
    path: Optional[str] = None
    branch: Optional[str] = None
    tools: List[Tool] = field(default_factory=list)
    target: List[str] = field(default_factory=list)
    option: Dict[str, str] = field(default_factory=dict)
    builder: CMakeGenerator = CMakeGenerator.PLATFORM
    build_type: BuildType = BuildType.RELEASE

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "EntrySetting":
        """
        Decode the YAML mapping of one entry.

        Raises:
            InvalidEntryError: If a field has the wrong shape
            UnsupportedGeneratorError: If ``builder`` is unknown
        """
        if not isinstance(data, dict):
            raise InvalidEntryError(f"Entry '{name}' must be a mapping")

        known = {"url", "path", "branch", "tools", "target", "option", "builder", "build_type"}
        unknown = set(data) - known
        if unknown:
            raise InvalidEntryError(
                f"Unknown fields in entry '{name}': {', '.join(sorted(unknown))}"
            )

        try:
            tools = [Tool(**tool) for tool in data.get("tools") or []]
        except TypeError as e:
            raise InvalidEntryError(f"Invalid tool in entry '{name}': {e}") from e

        target = data.get("target") or []
        if not isinstance(target, list):
            raise InvalidEntryError(f"'target' of entry '{name}' must be a list")

        option = data.get("option") or {}
        if not isinstance(option, dict):
            raise InvalidEntryError(f"'option' of entry '{name}' must be a mapping")

        build_type = data.get("build_type", BuildType.RELEASE.value)
        try:
            build_type = BuildType(build_type)
        except ValueError as e:
            raise InvalidEntryError(
                f"Invalid build_type in entry '{name}': {build_type}"
            ) from e

        builder = data.get("builder")
        return cls(
            url=data.get("url"),
            path=data.get("path"),
            branch=data.get("branch"),
            tools=tools,
            target=[str(t) for t in target],
            option={str(k): str(v) for k, v in option.items()},
            builder=CMakeGenerator.from_str(builder) if builder else CMakeGenerator.PLATFORM,
            build_type=build_type,
        )


class Entry:
    """
    Describes how to compile LLVM/Clang.

    Remote entries fetch sources into the cache directory; local entries
    build a source tree the user already has.
    """

    def __init__(
        self,
        name: str,
        setting: EntrySetting,
        paths: EnvironmentPaths,
        fetcher: Optional[ResourceFetcher] = None,
        locator: Optional[ResourceLocator] = None,
    ):
        self.name = name
        self.setting = setting
        self.paths = paths
        self.fetcher = fetcher or ResourceFetcher()
        self.locator = locator or ResourceLocator()

    @classmethod
    def parse_setting(
        cls, name: str, setting: EntrySetting, paths: EnvironmentPaths, **kwargs
    ) -> "Entry":
        """
        Validate ``setting`` and build the entry.

        Raises:
            InvalidEntryError: If both or neither of url and path are given
        """
        if setting.path and setting.url:
            raise InvalidEntryError(f"One of path or url is allowed: {name}")
        if setting.path:
            if setting.tools:
                logger.warning(f"'tools' must be used with url, ignored ({name})")
            setting.path = os.path.expandvars(os.path.expanduser(setting.path))
            return cls(name, setting, paths, **kwargs)
        if setting.url:
            return cls(name, setting, paths, **kwargs)
        raise InvalidEntryError(f"Path nor URL are not found: {name}")

    @property
    def is_local(self) -> bool:
        return self.setting.path is not None

    @property
    def url(self) -> Optional[str]:
        return self.setting.url

    @property
    def tools(self) -> List[Tool]:
        return [] if self.is_local else self.setting.tools

    def set_builder(self, builder: str) -> None:
        self.setting.builder = CMakeGenerator.from_str(builder)

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def src_dir(self) -> Path:
        if self.is_local:
            return Path(self.setting.path)
        return self.paths.cache_dir / self.name

    def build_dir(self) -> Path:
        directory = self.src_dir() / "build"
        if not directory.exists():
            logger.info(f"Create build dir: {directory}")
            try:
                directory.mkdir(parents=True)
            except OSError as e:
                raise FilesystemIOError(directory, f"Failed to create {directory}: {e}") from e
        return directory

    def prefix(self) -> Path:
        return self.paths.data_dir / self.name

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def checkout(self) -> None:
        """
        Fetch the sources of the entry if they are not there yet.

        Raises:
            FilesystemIOError: If a local entry's path is not a directory
        """
        if self.is_local:
            if not self.src_dir().is_dir():
                raise FilesystemIOError(
                    self.src_dir(), f"Path '{self.src_dir()}' is not a directory"
                )
            return

        src = self.src_dir()
        if not src.is_dir():
            resource = self.locator.classify(self.setting.url, self.setting.branch)
            self.fetcher.download(resource, src)
        for tool in self.tools:
            path = src / tool.rel_path()
            if not path.is_dir():
                resource = self.locator.classify(tool.url, tool.branch)
                self.fetcher.download(resource, path)

    def update(self) -> None:
        """Update the fetched sources of a remote entry."""
        if self.is_local:
            return
        src = self.src_dir()
        resource = self.locator.classify(self.setting.url, self.setting.branch)
        self.fetcher.update(resource, src)
        for tool in self.tools:
            resource = self.locator.classify(tool.url, tool.branch)
            self.fetcher.update(resource, src / tool.rel_path())

    def clean_cache_dir(self) -> None:
        logger.info(f"Remove cache dir: {self.src_dir()}")
        safe_rmtree(self.src_dir(), require_prefix=self.paths.cache_dir)

    def clean_build_dir(self) -> None:
        directory = self.src_dir() / "build"
        logger.info(f"Remove build dir: {directory}")
        safe_rmtree(directory)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def configure_args(self) -> List[str]:
        """CMake configure command line for this entry."""
        setting = self.setting
        args = ["cmake"] + setting.builder.option()
        args.append(str(self.src_dir()))
        args.append(f"-DCMAKE_INSTALL_PREFIX={self.prefix()}")
        args.append(f"-DCMAKE_BUILD_TYPE={setting.build_type.value}")
        if setting.target:
            args.append(f"-DLLVM_TARGETS_TO_BUILD={';'.join(setting.target)}")
        for key, value in setting.option.items():
            args.append(f"-D{key}={value}")
        return args

    def configure(self) -> None:
        check_run(self.configure_args(), cwd=self.build_dir())

    def build(self, nproc: int) -> None:
        """
        Configure, compile and install the entry into its prefix.

        Raises:
            ExternalToolError: If cmake fails
        """
        self.configure()
        check_run(
            ["cmake", "--build", str(self.build_dir()), "--target", "install"]
            + self.setting.builder.build_option(nproc)
        )
        logger.info(f"Installed {self.name} into {self.prefix()}")

    def __repr__(self) -> str:
        kind = "local" if self.is_local else "remote"
        return f"Entry({self.name!r}, {kind})"


def load_entry_yaml(text: str, paths: EnvironmentPaths) -> List[Entry]:
    """
    Parse entries from YAML text.

    Raises:
        InvalidEntryError: If the YAML is malformed
    """
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise InvalidEntryError(f"Invalid YAML in {ENTRY_FILE}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidEntryError(f"{ENTRY_FILE} must map entry names to settings")

    return [
        Entry.parse_setting(str(name), EntrySetting.from_dict(str(name), setting), paths)
        for name, setting in data.items()
    ]


def official_releases(paths: EnvironmentPaths) -> List[Entry]:
    """Pre-defined entries for official LLVM releases."""
    entries = []
    for major, minor, patch in OFFICIAL_RELEASES:
        version = f"{major}.{minor}.{patch}"
        base = f"http://releases.llvm.org/{version}"
        setting = EntrySetting(
            url=f"{base}/llvm-{version}.src.tar.xz",
            tools=[
                Tool(name="clang", url=f"{base}/cfe-{version}.src.tar.xz"),
                Tool(name="lld", url=f"{base}/lld-{version}.src.tar.xz"),
            ],
        )
        entries.append(Entry.parse_setting(version, setting, paths))
    return entries


def load_entries(paths: EnvironmentPaths) -> List[Entry]:
    """
    User entries from entry.yaml followed by the official releases.

    A missing entry.yaml only leaves the official releases.
    """
    entry_file = paths.config_dir / ENTRY_FILE
    entries: List[Entry] = []
    if entry_file.exists():
        logger.debug(f"Loading entries from {entry_file}")
        try:
            text = entry_file.read_text(encoding="utf-8")
        except OSError as e:
            raise FilesystemIOError(entry_file, f"Failed to read {entry_file}: {e}") from e
        entries.extend(load_entry_yaml(text, paths))
    else:
        logger.debug(f"Entry file not found (optional): {entry_file}")
    entries.extend(official_releases(paths))
    return entries


def load_entry(paths: EnvironmentPaths, name: str) -> Entry:
    """
    Find the entry called ``name``.

    Raises:
        EntryNotFoundError: If there is no such entry
    """
    for entry in load_entries(paths):
        if entry.name == name:
            return entry
    raise EntryNotFoundError(name)


def init_config(paths: EnvironmentPaths) -> Path:
    """
    Write the default entry.yaml.

    Raises:
        ConfigExistsError: If entry.yaml already exists
    """
    paths.ensure()
    entry_file = paths.config_dir / ENTRY_FILE
    if entry_file.exists():
        raise ConfigExistsError(f"Setting already exists: {entry_file}")
    logger.info(f"Create default entry setting: {entry_file}")
    try:
        shutil.copyfile(DEFAULT_ENTRY_TEMPLATE, entry_file)
    except OSError as e:
        raise FilesystemIOError(entry_file, f"Failed to write {entry_file}: {e}") from e
    return entry_file
