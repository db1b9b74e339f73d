"""
Command handlers for the llvmenv CLI.
"""
