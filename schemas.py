"""Pydantic schemas for the machine-readable scan output"""

from typing import List

import yaml
from pydantic import BaseModel, Field

from model import Episode, Library, ScanFailure, ScanReport, Season, Show


class EpisodeSchema(BaseModel):
    number: str
    title: str = ""
    tags: List[str] = Field(default_factory=list)
    path: str

    @classmethod
    def from_model(cls, episode: Episode) -> 'EpisodeSchema':
        return cls(number=episode.number, title=episode.title, tags=list(episode.tags), path=episode.path)


class SeasonSchema(BaseModel):
    title: str = ""
    number: int
    episodes: List[EpisodeSchema] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    path: str

    @classmethod
    def from_model(cls, season: Season) -> 'SeasonSchema':
        return cls(
            title=season.title,
            number=season.number,
            episodes=[EpisodeSchema.from_model(e) for e in season.episodes],
            tags=list(season.tags),
            path=season.path
        )


class ShowSchema(BaseModel):
    title: str = ""
    movie: bool = False
    seasons: List[SeasonSchema] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    path: str

    @classmethod
    def from_model(cls, show: Show) -> 'ShowSchema':
        return cls(
            title=show.title,
            movie=show.movie,
            seasons=[SeasonSchema.from_model(s) for s in show.seasons],
            tags=list(show.tags),
            path=show.path
        )


class LibrarySchema(BaseModel):
    name: str
    path: str
    shows: List[ShowSchema] = Field(default_factory=list)

    @classmethod
    def from_model(cls, library: Library) -> 'LibrarySchema':
        return cls(
            name=library.name,
            path=library.path,
            shows=[ShowSchema.from_model(s) for s in library.shows]
        )


class ScanFailureSchema(BaseModel):
    path: str
    reason: str

    @classmethod
    def from_model(cls, failure: ScanFailure) -> 'ScanFailureSchema':
        return cls(path=failure.path, reason=failure.reason)


class ScanReportSchema(BaseModel):
    libraries: List[LibrarySchema] = Field(default_factory=list)
    failures: List[ScanFailureSchema] = Field(default_factory=list)

    @classmethod
    def from_model(cls, report: ScanReport) -> 'ScanReportSchema':
        return cls(
            libraries=[LibrarySchema.from_model(library) for library in report.libraries],
            failures=[ScanFailureSchema.from_model(f) for f in report.failures]
        )


OUTPUT_FORMATS = ('json', 'yaml')


def dump_report(report: ScanReport, fmt: str = 'json') -> str:
    """Render a scan report as JSON or YAML"""
    schema = ScanReportSchema.from_model(report)

    if fmt == 'json':
        return schema.model_dump_json(indent=2)
    if fmt == 'yaml':
        return yaml.safe_dump(schema.model_dump(), allow_unicode=True, sort_keys=False)

    raise ValueError(f"Unsupported output format: {fmt} (expected one of {', '.join(OUTPUT_FORMATS)})")
