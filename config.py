#!/usr/bin/env python3
"""
Configuration loader for Libman
Loads configuration from config.yaml file, falling back to defaults when no file exists.
"""

import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field


DEFAULT_EXTRAS_FOLDERS = ["extra", "extras"]
DEFAULT_IGNORED_PROPERTIES = ["mimetype", "type"]


@dataclass
class ScanConfig:
    """Directory traversal configuration"""
    sort_entries: bool = True
    max_workers: int = 1
    extras_folders: List[str] = field(default_factory=lambda: list(DEFAULT_EXTRAS_FOLDERS))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScanConfig':
        """Create ScanConfig from dictionary"""
        max_workers = data.get('max_workers', 1)
        if isinstance(max_workers, float):
            max_workers = int(max_workers)
        if not isinstance(max_workers, int) or max_workers < 1:
            raise ValueError(f"scan.max_workers must be a positive integer, got {max_workers!r}")

        extras_folders = data.get('extras_folders', DEFAULT_EXTRAS_FOLDERS)
        if not isinstance(extras_folders, list):
            extras_folders = [extras_folders]

        return cls(
            sort_entries=bool(data.get('sort_entries', True)),
            max_workers=max_workers,
            extras_folders=[str(name).lower() for name in extras_folders]
        )


@dataclass
class TokenizerConfig:
    """guessit tokenizer configuration"""
    ignored_properties: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORED_PROPERTIES))
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TokenizerConfig':
        """Create TokenizerConfig from dictionary"""
        ignored = data.get('ignored_properties', DEFAULT_IGNORED_PROPERTIES)
        if ignored is None:
            ignored = []

        options = data.get('options') or {}
        if not isinstance(options, dict):
            raise ValueError("tokenizer.options must be a mapping")

        return cls(ignored_properties=list(ignored), options=options)


@dataclass
class LoggingConfig:
    """Logging configuration"""
    verbose: bool = False
    log_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LoggingConfig':
        """Create LoggingConfig from dictionary"""
        log_file = data.get('log_file')
        if log_file == '' or log_file == 'null':
            log_file = None

        return cls(verbose=bool(data.get('verbose', False)), log_file=log_file)


@dataclass
class Config:
    """Complete application configuration"""
    scan: ScanConfig = field(default_factory=ScanConfig)
    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create Config from dictionary, missing sections use defaults"""
        return cls(
            scan=ScanConfig.from_dict(data.get('scan') or {}),
            tokenizer=TokenizerConfig.from_dict(data.get('tokenizer') or {}),
            logging=LoggingConfig.from_dict(data.get('logging') or {})
        )


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load complete configuration from YAML file

    Args:
        config_path: Path to config.yaml file. If None, looks for config.yaml
                     in the current directory or script directory, and uses
                     defaults when neither exists.

    Returns:
        Config object

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        ValueError: If a configuration value is invalid
    """
    if config_path is None:
        config_file = Path.cwd() / 'config.yaml'

        if not config_file.exists():
            config_file = Path(__file__).parent / 'config.yaml'

        if not config_file.exists():
            return Config()
    else:
        config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config_data = yaml.safe_load(f)

    if not config_data:
        return Config()

    if not isinstance(config_data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_file}")

    return Config.from_dict(config_data)
