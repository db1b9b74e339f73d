"""
Zsh command implementation.

Prints the shell integration script; use as ``source <(llvmenv zsh)``.
"""

from pathlib import Path

ZSH_SCRIPT = Path(__file__).parent.parent.parent / "data" / "llvmenv.zsh"


def run(args) -> int:
    print(ZSH_SCRIPT.read_text(encoding="utf-8"))
    return 0
