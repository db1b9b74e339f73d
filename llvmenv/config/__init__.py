"""
Entry configuration for llvmenv.
"""

from .entry import (
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

__all__ = [
    "ENTRY_FILE",
    "BuildType",
    "CMakeGenerator",
    "Entry",
    "EntrySetting",
    "Tool",
    "init_config",
    "load_entries",
    "load_entry",
    "load_entry_yaml",
    "official_releases",
]
