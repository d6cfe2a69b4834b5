#!/usr/bin/env python3
"""
Filename tokenizer for Libman
Turns a file or folder name into an ordered list of categorized tokens.

guessit does the actual parsing; this module only maps its properties into
the categories the library manager understands:

- title          -> Category.TITLE
- season         -> Category.SEASON_NUMBER
- episode        -> Category.EPISODE_NUMBER
- episode_title  -> Category.EPISODE_TITLE
- container      -> Category.FILE_EXTENSION for video containers only
- anything else  -> Category.OTHER (the property name is kept on the token)

guessit also reports a container for subtitles, .nfo, .torrent... files.
Those stay OTHER tokens so nothing treats them as playable.

A FILE_NAME token (name without extension) is always emitted first.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from guessit import guessit

from util import camel_case


class Category(Enum):
    TITLE = "title"
    SEASON_NUMBER = "season_number"
    EPISODE_NUMBER = "episode_number"
    EPISODE_TITLE = "episode_title"
    FILE_EXTENSION = "file_extension"
    FILE_NAME = "file_name"
    OTHER = "other"


GUESSIT_CATEGORIES = {
    'title': Category.TITLE,
    'season': Category.SEASON_NUMBER,
    'episode': Category.EPISODE_NUMBER,
    'episode_title': Category.EPISODE_TITLE,
    'container': Category.FILE_EXTENSION,
}

VIDEO_CONTAINERS = frozenset({
    '3g2', '3gp', 'asf', 'avi', 'divx', 'flv', 'iso', 'm2ts', 'm4v', 'mk3d', 'mkv', 'mov',
    'mp4', 'mpeg', 'mpg', 'ogm', 'ogv', 'qt', 'rm', 'rmvb', 'ts', 'vob', 'webm', 'wmv',
})

DEFAULT_IGNORED_PROPERTIES = ('mimetype', 'type')


def is_video_container(container: Any, mimetype: Any = None) -> bool:
    """True when guessit's container/mimetype describe a playable video file"""
    if mimetype and str(mimetype).startswith('video/'):
        return True
    return bool(container) and str(container).lower() in VIDEO_CONTAINERS


@dataclass(frozen=True)
class Token:
    """A classified fragment of a filename"""
    category: Category
    value: str
    name: str = ""  # Source property name, required for Category.OTHER

    @property
    def label(self) -> str:
        """Tag label, e.g. 'ReleaseGroup' for the release_group property"""
        if self.category is Category.OTHER:
            return camel_case(self.name)
        return camel_case(self.category.value)

    def as_tag(self) -> str:
        return f"{self.label}={self.value}"


def first_value(tokens: Iterable[Token], category: Category) -> Optional[str]:
    """Value of the first token of a category, None if there is none"""
    for token in tokens:
        if token.category is category:
            return token.value
    return None


def build_tags(tokens: Iterable[Token], consumed: Iterable[Category]) -> List[str]:
    """Format every token whose category wasn't consumed as 'Category=Value'"""
    consumed = set(consumed)
    return [token.as_tag() for token in tokens if token.category not in consumed]


class GuessitTokenizer:
    """Callable tokenizer backed by guessit"""

    def __init__(
        self,
        options: Optional[Dict[str, Any]] = None,
        ignored_properties: Iterable[str] = DEFAULT_IGNORED_PROPERTIES,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            options: Options passed through to guessit
            ignored_properties: guessit properties that never become tokens
            logger: Optional logger instance
        """
        self.options = dict(options or {})
        self.ignored_properties = frozenset(ignored_properties)
        self.logger = logger or logging.getLogger('Libman')

    def __call__(self, filename: str) -> List[Token]:
        try:
            guess = guessit(filename, self.options)
        except Exception as e:
            self.logger.warning(f"Could not tokenize '{filename}': {e}")
            return [Token(Category.FILE_NAME, filename, 'file_name')]

        tokens = [Token(Category.FILE_NAME, self._strip_extension(filename, guess.get('container')), 'file_name')]
        video = is_video_container(guess.get('container'), guess.get('mimetype'))

        for name, value in guess.items():
            if name in self.ignored_properties:
                continue

            category = GUESSIT_CATEGORIES.get(name, Category.OTHER)
            if category is Category.FILE_EXTENSION and not video:
                category = Category.OTHER
            values = value if isinstance(value, list) else [value]
            for item in values:
                tokens.append(Token(category, str(item), name))

        return tokens

    @staticmethod
    def _strip_extension(filename: str, container: Optional[str]) -> str:
        if container and filename.lower().endswith('.' + str(container).lower()):
            return filename[:-(len(str(container)) + 1)]
        return filename


_default_tokenizer: Optional[GuessitTokenizer] = None


def tokenize(filename: str) -> List[Token]:
    """Tokenize a basename with the default guessit options"""
    global _default_tokenizer
    if _default_tokenizer is None:
        _default_tokenizer = GuessitTokenizer()
    return _default_tokenizer(filename)
