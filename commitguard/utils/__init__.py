"""Utility helpers for the scanner."""

from .fileio import decode_text, looks_binary, read_yaml_file

__all__ = [
    "decode_text",
    "looks_binary",
    "read_yaml_file",
]
