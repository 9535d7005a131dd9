#!/usr/bin/env python3
"""
Kenosis Configuration

Optional user settings read from ~/.kenosis/config.toml (or $KENOSIS_HOME).
The file is only ever read; kenosis keeps no state between runs.
"""

import os
import pathlib
import tomllib
from dataclasses import dataclass, field
from typing import Optional

CONFIG_FILE_NAME = "config.toml"


class ConfigurationError(RuntimeError):
    """Raised when the configuration file is unreadable or holds bad values"""


@dataclass
class KenosisConfig:
    """Settings shared by the CLI and the scanning core"""

    workers: Optional[int] = None
    follow_links: bool = True
    ignore_paths: list[str] = field(default_factory=list)
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "KenosisConfig":
        """Create from a parsed TOML table, validating value types"""
        config = cls()

        workers = data.get("workers")
        if workers is not None:
            if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
                raise ConfigurationError(f"workers must be a positive integer, got {workers!r}")
            config.workers = workers

        follow_links = data.get("follow_links", True)
        if not isinstance(follow_links, bool):
            raise ConfigurationError(f"follow_links must be true or false, got {follow_links!r}")
        config.follow_links = follow_links

        ignore_paths = data.get("ignore_paths", [])
        if not isinstance(ignore_paths, list) or not all(isinstance(p, str) for p in ignore_paths):
            raise ConfigurationError("ignore_paths must be a list of strings")
        config.ignore_paths = [str(pathlib.Path(p).expanduser()) for p in ignore_paths]

        log_level = data.get("log_level", "WARNING")
        if not isinstance(log_level, str):
            raise ConfigurationError(f"log_level must be a string, got {log_level!r}")
        config.log_level = log_level.upper()

        log_file = data.get("log_file")
        if log_file is not None and not isinstance(log_file, str):
            raise ConfigurationError(f"log_file must be a string, got {log_file!r}")
        config.log_file = log_file

        return config


def default_home() -> pathlib.Path:
    """Directory holding the configuration file"""
    env_home = os.environ.get("KENOSIS_HOME")
    if env_home:
        return pathlib.Path(env_home).expanduser()
    return pathlib.Path.home() / ".kenosis"


class ConfigManager:
    """Locates and loads the kenosis configuration file"""

    def __init__(self, kenosis_dir: Optional[pathlib.Path] = None):
        """Initialize configuration manager

        Args:
            kenosis_dir: Override default .kenosis directory location
        """
        self.kenosis_dir = kenosis_dir or default_home()
        self.config_file = self.kenosis_dir / CONFIG_FILE_NAME

    def load(self) -> KenosisConfig:
        """Load configuration from file, defaults if there is none"""
        if not self.config_file.exists():
            return KenosisConfig()

        try:
            with self.config_file.open("rb") as f:
                data = tomllib.load(f)
        except (tomllib.TOMLDecodeError, OSError) as e:
            raise ConfigurationError(f"Cannot read {self.config_file}: {e}") from e

        return KenosisConfig.from_dict(data)
