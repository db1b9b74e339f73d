"""
llvmenv - Manage multiple LLVM/Clang builds.
"""

__version__ = "0.3.2"
