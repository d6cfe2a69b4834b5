"""
Shared fixtures for Libman tests

Most tests use FakeTokenizer, a small deterministic stand-in for guessit so the
classification rules can be checked without depending on guessit's heuristics.
It understands names shaped like:

    [Group] Title - 03 - Episode Title (1080p).mkv
    Title S01E02.mkv
    Season 2
"""

import re
import sys
from pathlib import Path

import pytest

# Add parent directory to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Config
from library_manager import LibraryManager
from tokenizer import Category, Token


VIDEO_EXTENSIONS = ('mkv', 'mp4', 'avi')


class FakeTokenizer:
    """Regex tokenizer with per-name overrides"""

    def __init__(self, overrides=None):
        self.overrides = overrides or {}
        self.calls = []

    def __call__(self, name):
        self.calls.append(name)
        if name in self.overrides:
            return list(self.overrides[name])

        stem, extension = name, None
        match = re.fullmatch(r'(.+)\.([A-Za-z0-9]+)', name)
        if match and match.group(2).lower() in VIDEO_EXTENSIONS:
            stem, extension = match.groups()

        tokens = [Token(Category.FILE_NAME, stem, 'file_name')]
        rest = stem

        group = re.match(r'\[([^\]]+)\]\s*', rest)
        if group:
            tokens.append(Token(Category.OTHER, group.group(1), 'release_group'))
            rest = rest[group.end():]

        resolution = None
        resolution_match = re.search(r'\s*\((\d{3,4}p)\)', rest)
        if resolution_match:
            resolution = resolution_match.group(1)
            rest = rest[:resolution_match.start()] + rest[resolution_match.end():]

        season = episode = episode_title = None
        season_match = re.search(r'\b(?:Season\s*|S)(\d+)(?:E(\d+(?:\.\d+)?))?\b', rest, re.IGNORECASE)
        if season_match:
            season, episode = season_match.groups()
            rest = rest[:season_match.start()] + rest[season_match.end():]

        episode_match = re.search(r'\s+-\s+(\d+(?:\.\d+)?)(?:\s+-\s+(.+))?$', rest)
        if episode_match:
            episode, episode_title = episode_match.groups()
            rest = rest[:episode_match.start()]

        title = rest.strip(' -.')
        if title:
            tokens.append(Token(Category.TITLE, title, 'title'))
        if season:
            tokens.append(Token(Category.SEASON_NUMBER, season, 'season'))
        if episode:
            tokens.append(Token(Category.EPISODE_NUMBER, episode, 'episode'))
        if episode_title:
            tokens.append(Token(Category.EPISODE_TITLE, episode_title, 'episode_title'))
        if resolution:
            tokens.append(Token(Category.OTHER, resolution, 'screen_size'))
        if extension:
            tokens.append(Token(Category.FILE_EXTENSION, extension, 'container'))

        return tokens


def make_tree(base: Path, entries):
    """
    Create files and folders under base

    Entries ending with '/' are folders, everything else is a file.
    """
    for entry in entries:
        target = base / entry
        if entry.endswith('/'):
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(b"fake video content")
    return base


@pytest.fixture
def tokenizer():
    return FakeTokenizer()


@pytest.fixture
def manager(tokenizer):
    return LibraryManager(tokenizer=tokenizer, config=Config())


@pytest.fixture
def library_root(tmp_path):
    root = tmp_path / "library"
    root.mkdir()
    return root
