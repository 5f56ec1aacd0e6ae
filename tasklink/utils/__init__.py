"""
Utility helpers shared by the CLI and services.
"""

from tasklink.utils.file import read_json, safe_read_file, write_json

__all__ = ["read_json", "safe_read_file", "write_json"]
