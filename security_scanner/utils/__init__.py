"""Utility helpers for the scanner."""

from .fileio import read_structured_file, read_text_file
from .files import GlobMatcher, expand_braces, find_files, iter_files

__all__ = [
    "read_structured_file",
    "read_text_file",
    "GlobMatcher",
    "expand_braces",
    "find_files",
    "iter_files",
]
