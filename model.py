#!/usr/bin/env python3
"""
Data models for Libman
Defines the catalog produced by a scan: libraries, shows, seasons and episodes.
All models are frozen and built in a single pass.
"""

from typing import Tuple
from dataclasses import dataclass


@dataclass(frozen=True)
class Episode:
    """Represents a single playable file inside a season"""
    number: str  # String to keep specials and recaps like "2.5"
    title: str
    tags: Tuple[str, ...]
    path: str


@dataclass(frozen=True)
class Season:
    """Represents a numbered group of episodes"""
    title: str
    number: int
    episodes: Tuple[Episode, ...]
    tags: Tuple[str, ...]
    path: str


@dataclass(frozen=True)
class Show:
    """Represents a series (with seasons) or a movie (without)"""
    title: str
    movie: bool
    seasons: Tuple[Season, ...]
    tags: Tuple[str, ...]
    path: str

    def __post_init__(self):
        if self.movie and self.seasons:
            raise ValueError(f"Movie '{self.title}' can't have seasons")


@dataclass(frozen=True)
class Library:
    """Represents a scanned library root"""
    name: str
    path: str
    shows: Tuple[Show, ...]


@dataclass(frozen=True)
class ScanFailure:
    """A failure contained while scanning, reported instead of raised"""
    path: str
    reason: str


@dataclass(frozen=True)
class ScanReport:
    """Result of a batch scan, libraries are index-aligned with the input roots"""
    libraries: Tuple[Library, ...]
    failures: Tuple[ScanFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures
