#!/usr/bin/env python3
"""
Utility functions for Libman
Provides helpers for number parsing and directory listing.
"""

import os
import re
from pathlib import Path
from typing import List, Optional, Tuple


INTEGER_PATTERN = re.compile(r'[+-]?\d+', re.ASCII)


def try_parse_int(text: Optional[str]) -> Optional[int]:
    """Parse text as a whole integer, returning None when it is not one"""
    if not text:
        return None

    if not INTEGER_PATTERN.fullmatch(text):
        return None

    return int(text)


def camel_case(name: str) -> str:
    """Convert a property name like 'release_group' to 'ReleaseGroup'"""
    parts = re.split(r'[_\-\s]+', name)
    return ''.join(part[:1].upper() + part[1:] for part in parts if part)


def list_children(directory: Path, sort_entries: bool = True) -> Tuple[List[Path], List[Path]]:
    """
    List the direct children of a directory

    Args:
        directory: Directory to list
        sort_entries: If True, sort both lists by case-insensitive name.
                      If False, keep the order returned by the filesystem.

    Returns:
        Tuple of (files, directories)

    Raises:
        NotADirectoryError: If directory is not a directory
        OSError: If the directory can't be listed
    """
    files = []
    folders = []

    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.is_dir():
                folders.append(Path(entry.path))
            elif entry.is_file():
                files.append(Path(entry.path))

    if sort_entries:
        files.sort(key=lambda x: (x.name.lower(), x.name))
        folders.sort(key=lambda x: (x.name.lower(), x.name))

    return files, folders
