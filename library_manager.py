#!/usr/bin/env python3
"""
Libman - Media Library Manager
Builds a catalog (library -> show -> season -> episode) from a directory tree
of media files, combining the folder layout with what the filenames say.

Supported layouts for a show folder:
1. Episode files directly in the show folder (a single season)
2. Season subfolders ("1", "2", "Season 3"...) containing episode files,
   optionally next to movie files and extras folders
3. A single movie file placed where a show folder is expected
"""

import os
import sys
import argparse
import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union
from concurrent.futures import ThreadPoolExecutor, as_completed

from config import Config, load_config
from logger import LOGGER_NAME, Colors, setup_logging
from model import Episode, Library, ScanFailure, ScanReport, Season, Show
from schemas import OUTPUT_FORMATS, dump_report
from tokenizer import Category, GuessitTokenizer, Token, build_tags, first_value
from util import list_children, try_parse_int

__version__ = "1.0.0"

PathLike = Union[str, os.PathLike]
Tokenizer = Callable[[str], Sequence[Token]]

# Categories a show, movie or season takes for itself, the rest become tags
SHOW_CONSUMED = (Category.TITLE, Category.SEASON_NUMBER, Category.FILE_EXTENSION, Category.FILE_NAME)
SEASON_CONSUMED = SHOW_CONSUMED
EPISODE_CONSUMED = (
    Category.TITLE, Category.EPISODE_NUMBER, Category.EPISODE_TITLE,
    Category.FILE_EXTENSION, Category.FILE_NAME
)


class LibraryManager:
    """Scans library folders and builds the catalog"""

    def __init__(self, tokenizer: Optional[Tokenizer] = None, config: Optional[Config] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Args:
            tokenizer: Callable turning a basename into tokens. Defaults to guessit.
            config: Scan configuration, defaults when None
            logger: Optional logger instance
        """
        self.config = config or Config()
        self.logger = logger or logging.getLogger(LOGGER_NAME)

        if tokenizer is None:
            tokenizer = GuessitTokenizer(
                options=self.config.tokenizer.options,
                ignored_properties=self.config.tokenizer.ignored_properties,
                logger=self.logger
            )
        self.tokenizer = tokenizer

        self.sort_entries = self.config.scan.sort_entries
        self.max_workers = self.config.scan.max_workers
        self.extras_folders = {name.lower() for name in self.config.scan.extras_folders}

    def scan(self, paths: Union[PathLike, Iterable[PathLike]]) -> List[Library]:
        """
        Scan one or more library roots

        Returns:
            One Library per root, in the same order as paths
        """
        return list(self.scan_report(paths).libraries)

    def scan_report(self, paths: Union[PathLike, Iterable[PathLike]]) -> ScanReport:
        """
        Scan one or more library roots, isolating failures per root and per show

        Returns:
            ScanReport with index-aligned libraries and the failures that were contained
        """
        if isinstance(paths, (str, os.PathLike)):
            paths = [paths]
        paths = list(paths)

        self.logger.debug(f"Scanning {len(paths)} library paths...")

        results = self._map_ordered(self._build_library, paths)

        libraries = tuple(library for library, _ in results)
        failures = tuple(failure for _, failures in results for failure in failures)

        return ScanReport(libraries=libraries, failures=failures)

    def parse_library(self, path: PathLike) -> Library:
        """Build the Library for a single root"""
        library, _ = self._build_library(path)
        return library

    def _build_library(self, path: PathLike) -> Tuple[Library, List[ScanFailure]]:
        root = Path(path).resolve()
        self.logger.debug(f"Parsing library located at {root}")

        try:
            files, folders = list_children(root, self.sort_entries)
        except OSError as e:
            self.logger.error(f"Can't list library {root}: {e}")
            return Library(name=root.name, path=str(root), shows=()), [ScanFailure(str(root), str(e))]

        for file in files:
            self.logger.debug(f"Skipping stray file in library root: {file.name}")

        results = self._map_ordered(self._classify_show, folders)

        shows = tuple(show for shows, _ in results for show in shows)
        failures = [failure for _, show_failures in results for failure in show_failures]

        self.logger.debug(f"Library {root.name} parsed with {len(shows)} shows in it")

        return Library(name=root.name, path=str(root), shows=shows), failures

    def _classify_show(self, path: Path) -> Tuple[List[Show], List[ScanFailure]]:
        try:
            return self._build_show(path)
        except OSError as e:
            self.logger.warning(f"Skipping show {path}: {e}")
            return [], [ScanFailure(str(path), str(e))]
        except Exception as e:
            self.logger.error(f"Error parsing show {path}: {e}")
            return [], [ScanFailure(str(path), f"{type(e).__name__}: {e}")]

    def parse_show(self, path: PathLike) -> List[Show]:
        """
        Classify a show candidate as a movie or a series

        Returns:
            An empty list for entries that are neither a video file nor a folder,
            a single Show for movies and plain series, or the series followed by
            one movie Show per video file found next to its season folders.
        """
        shows, _ = self._build_show(Path(path))
        return shows

    def _build_show(self, path: Path) -> Tuple[List[Show], List[ScanFailure]]:
        self.logger.debug(f"Parsing show located at {path}")

        tokens = self._tokenize(path.name)
        title = first_value(tokens, Category.TITLE) or ""
        tags = tuple(build_tags(tokens, SHOW_CONSUMED))

        if first_value(tokens, Category.FILE_EXTENSION) is not None:
            self.logger.debug(f"Show {title} is a movie")
            return [Show(title=title, movie=True, seasons=(), tags=tags, path=str(path))], []

        try:
            files, folders = list_children(path, self.sort_entries)
        except NotADirectoryError:
            self.logger.debug(f"Ignoring {path}: not a video file nor a folder")
            return [], []

        if not folders or self._only_extras(folders):
            seasons, _, failures = self._resolve_seasons(path, [])
            return [Show(title=title, movie=False, seasons=tuple(seasons), tags=tags, path=str(path))], failures

        self.logger.debug(f"Found {len(folders)} inner folders, checking which ones are seasons")

        seasons, has_season_folders, failures = self._resolve_seasons(path, folders)
        show = Show(title=title, movie=False, seasons=tuple(seasons), tags=tags, path=str(path))

        if not has_season_folders:
            return [show], failures

        self.logger.debug(f"Found {len(seasons)} seasons, assuming the rest of the video files are movies")

        movies = [movie for movie in (self._parse_movie(file, show.tags) for file in files) if movie]
        return [show] + movies, failures

    def _only_extras(self, folders: List[Path]) -> bool:
        return len(folders) == 1 and folders[0].name.lower() in self.extras_folders

    def _parse_movie(self, path: Path, fallback_tags: Tuple[str, ...]) -> Optional[Show]:
        self.logger.debug(f"Parsing movie located at {path}")

        tokens = self._tokenize(path.name)
        if first_value(tokens, Category.FILE_EXTENSION) is None:
            self.logger.debug(f"Skipping {path.name}: not a video file")
            return None

        tags = tuple(build_tags(tokens, SHOW_CONSUMED)) or fallback_tags

        return Show(
            title=first_value(tokens, Category.TITLE) or "",
            movie=True,
            seasons=(),
            tags=tags,
            path=str(path)
        )

    def parse_seasons(self, path: PathLike) -> List[Season]:
        """
        Build the seasons of a show folder

        Returns:
            One Season per season folder, or a single Season 1 holding the files
            of the show folder itself when there are no season folders.
        """
        path = Path(path)

        try:
            _, folders = list_children(path, self.sort_entries)
        except NotADirectoryError:
            folders = []

        seasons, _, _ = self._resolve_seasons(path, folders)
        return seasons

    def _resolve_seasons(self, path: Path, folders: List[Path]) -> Tuple[List[Season], bool, List[ScanFailure]]:
        candidates = []
        for folder in folders:
            numeric = try_parse_int(folder.name)
            tokens = self._tokenize(folder.name)

            if numeric is None and first_value(tokens, Category.SEASON_NUMBER) is None:
                # Extras, openings, endings...
                self.logger.debug(f"Skipping {folder.name}: not a season folder")
                continue

            candidates.append((folder, tokens, numeric))

        failures = []

        if not candidates:
            episodes = self._season_episodes(path, failures)
            return [Season(title="", number=1, episodes=episodes, tags=(), path=str(path))], False, failures

        seasons = []
        # Position counts from 1, season 0 only comes from an explicit season token
        for position, (folder, tokens, numeric) in enumerate(candidates, 1):
            self.logger.debug(f"Parsing season located at {folder}")

            number = try_parse_int(first_value(tokens, Category.SEASON_NUMBER))
            if number is None:
                number = numeric
            if number is None:
                number = position

            # A bare number is the season number, not a title
            title = "" if numeric is not None else first_value(tokens, Category.TITLE) or ""

            seasons.append(Season(
                title=title,
                number=number,
                episodes=self._season_episodes(folder, failures),
                tags=tuple(build_tags(tokens, SEASON_CONSUMED)),
                path=str(folder)
            ))

        return seasons, True, failures

    def _season_episodes(self, folder: Path, failures: List[ScanFailure]) -> Tuple[Episode, ...]:
        """Episodes of a season folder, an unreadable folder gives an empty season"""
        try:
            return tuple(self.parse_episodes(folder))
        except OSError as e:
            self.logger.warning(f"Can't read season folder {folder}: {e}")
            failures.append(ScanFailure(str(folder), str(e)))
            return ()

    def parse_episodes(self, path: PathLike) -> List[Episode]:
        """
        Build the episodes of a folder from the video files directly inside it

        Files the tokenizer finds no extension for are not video files and are skipped.
        """
        path = Path(path)
        self.logger.debug(f"Parsing episodes located at {path}")

        try:
            files, _ = list_children(path, self.sort_entries)
        except NotADirectoryError:
            return []

        episodes = []
        for file in files:
            tokens = self._tokenize(file.name)

            if first_value(tokens, Category.FILE_EXTENSION) is None:
                continue

            episodes.append(self._parse_episode(file, tokens, len(episodes) + 1))

        return episodes

    def _parse_episode(self, path: Path, tokens: Sequence[Token], position: int) -> Episode:
        title = first_value(tokens, Category.TITLE) or ""
        episode_title = first_value(tokens, Category.EPISODE_TITLE) or ""
        number = first_value(tokens, Category.EPISODE_NUMBER)

        if not number:
            for candidate in (first_value(tokens, Category.FILE_NAME), title):
                parsed = try_parse_int(candidate)
                if parsed is not None:
                    number = str(parsed)
                    break
            else:
                # Nothing numeric, number by position and keep the title as episode title
                number = str(position)
                episode_title = title

        return Episode(
            number=number,
            title=episode_title,
            tags=tuple(build_tags(tokens, EPISODE_CONSUMED)),
            path=str(path)
        )

    def _tokenize(self, name: str) -> List[Token]:
        try:
            return list(self.tokenizer(name))
        except Exception as e:
            self.logger.warning(f"Tokenizer failed for '{name}': {e}")
            return []

    def _map_ordered(self, func, items):
        """Apply func to every item, in parallel when configured, keeping input order"""
        items = list(items)
        if self.max_workers <= 1 or len(items) <= 1:
            return [func(item) for item in items]

        results = [None] * len(items)
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(items))) as executor:
            future_to_index = {executor.submit(func, item): index for index, item in enumerate(items)}
            for future in as_completed(future_to_index):
                results[future_to_index[future]] = future.result()

        return results


def summarize(report: ScanReport) -> dict:
    """Count shows, movies, seasons and episodes in a report"""
    stats = {'libraries': len(report.libraries), 'series': 0, 'movies': 0, 'seasons': 0, 'episodes': 0}
    for library in report.libraries:
        for show in library.shows:
            if show.movie:
                stats['movies'] += 1
                continue
            stats['series'] += 1
            stats['seasons'] += len(show.seasons)
            stats['episodes'] += sum(len(season.episodes) for season in show.seasons)
    return stats


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description="Libman - Build a media library catalog from a directory tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --path /media/anime
  %(prog)s --path /media/anime --path /media/movies --format yaml --output catalog.yaml
  %(prog)s --path ~/Videos --verbose --workers 4
        """
    )

    parser.add_argument('--path', action='append', help='Library root folder (repeatable)')
    parser.add_argument('--config', help='Path to config.yaml (default: ./config.yaml if present)')
    parser.add_argument('--format', choices=OUTPUT_FORMATS, default='json', help='Output format (default: json)')
    parser.add_argument('--output', '-o', help='Write the catalog to this file instead of stdout')
    parser.add_argument('--workers', type=int, help='Number of parallel workers (overrides scan.max_workers)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--log-file', help='Also write logs to this file')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except Exception as e:
        setup_logging(verbose=args.verbose)
        logging.getLogger(LOGGER_NAME).error(f"Failed to load configuration: {e}")
        return 1

    log_file = args.log_file or config.logging.log_file
    logger = setup_logging(Path(log_file) if log_file else None, args.verbose or config.logging.verbose)

    if not args.path:
        logger.error("Specify a path to the library with --path")
        return 1

    if args.workers is not None:
        if args.workers < 1:
            logger.error("--workers must be at least 1")
            return 1
        config.scan.max_workers = args.workers

    logger.info(f"Library path set to {Colors.CYAN}{args.path}{Colors.RESET}")

    try:
        manager = LibraryManager(config=config, logger=logger)
        report = manager.scan_report(args.path)
        output = dump_report(report, args.format)
    except KeyboardInterrupt:
        logger.warning("Scan cancelled by user.")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1

    if args.output:
        Path(args.output).write_text(output + '\n', encoding='utf-8')
        logger.info(f"Catalog saved to: {Colors.CYAN}{args.output}{Colors.RESET}")
    else:
        sys.stdout.write(output + '\n')

    stats = summarize(report)
    logger.info(
        f"Scanned {stats['libraries']} libraries: {stats['series']} series, {stats['movies']} movies, "
        f"{stats['seasons']} seasons, {stats['episodes']} episodes"
    )

    if report.failures:
        for failure in report.failures:
            logger.warning(f"{Colors.YELLOW}{failure.path}{Colors.RESET}: {failure.reason}")
        return 2

    return 0


if __name__ == '__main__':
    sys.exit(main())
