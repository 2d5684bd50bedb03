from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import pathspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CFG_FILE = "stache.yaml"

_yaml = YAML(typ="safe")


@dataclass
class LoaderConfig:
    """
    Directory-scan configuration shared by both loader strategies.

    templates_directory: root scanned recursively for template files
    templates_extension: suffix that marks a template file; stripped from logical names
    cache_size: FileLoader LRU bound; HashMapLoader refuses to load more templates than this
    exclude: gitwildmatch patterns (relative to templates_directory) skipped during discovery
    """
    templates_directory: Union[Path, str] = "./templates/"
    templates_extension: str = ".html"
    cache_size: int = 200
    exclude: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.templates_directory = Path(self.templates_directory)

        if not isinstance(self.templates_extension, str):
            raise ConfigError(f"templates_extension must be a string, got {self.templates_extension!r}")
        if not self.templates_extension.startswith("."):
            self.templates_extension = "." + self.templates_extension
        if self.templates_extension == ".":
            raise ConfigError("templates_extension must not be empty")

        # bool is an int subclass, but `cache_size: true` is certainly a typo
        if isinstance(self.cache_size, bool) or not isinstance(self.cache_size, int):
            raise ConfigError(f"cache_size must be an integer, got {self.cache_size!r}")
        if self.cache_size <= 0:
            raise ConfigError(f"cache size must be positive, got {self.cache_size}")

        if not isinstance(self.exclude, list) or not all(isinstance(p, str) for p in self.exclude):
            raise ConfigError(f"exclude must be a list of strings, got {self.exclude!r}")

    def root(self) -> Path:
        """Resolved templates directory; it must exist at the time a loader is built."""
        root = Path(self.templates_directory).resolve()
        if not root.is_dir():
            raise ConfigError(f"invalid templates directory: {self.templates_directory}")
        return root

    def exclude_spec(self) -> Optional[pathspec.PathSpec]:
        if not self.exclude:
            return None
        return pathspec.PathSpec.from_lines(pathspec.patterns.GitWildMatchPattern, self.exclude)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> LoaderConfig:
        """
        Build a config from a parsed YAML/JSON mapping.
        Missing keys take defaults; unknown keys are rejected.
        """
        if not isinstance(raw, Mapping):
            raise ConfigError(f"loader config must be a mapping, got {type(raw).__name__}")

        known = {f.name for f in fields(cls)}
        unknown = sorted(str(k) for k in raw if k not in known)
        if unknown:
            raise ConfigError(f"unknown loader config keys: {', '.join(unknown)}")

        kwargs: Dict[str, Any] = dict(raw)
        directory = kwargs.get("templates_directory")
        if directory is not None and not isinstance(directory, (str, Path)):
            raise ConfigError(f"templates_directory must be a path string, got {directory!r}")
        for key in ("templates_directory", "exclude"):
            if kwargs.get(key) is None:
                kwargs.pop(key, None)
        return cls(**kwargs)


def load_loader_config(path: Path) -> LoaderConfig:
    """
    Load LoaderConfig from a YAML file.

    • A directory means its stache.yaml.
    • If the file does not exist, return defaults.
    • A relative templates_directory given in the file is resolved against
      the YAML file's directory; an omitted one keeps the default.
    """
    if path.is_dir():
        path = path / DEFAULT_CFG_FILE
    if not path.is_file():
        logger.debug(f"Loader config {path} not found, using defaults")
        return LoaderConfig()

    try:
        raw = _yaml.load(path.read_text(encoding="utf-8")) or {}
    except YAMLError as e:
        raise ConfigError(f"failed to parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"YAML must be a mapping: {path}")

    cfg = LoaderConfig.from_dict(raw)
    directory = Path(cfg.templates_directory)
    # The default directory stays relative to the working directory
    if raw.get("templates_directory") is not None and not directory.is_absolute():
        cfg.templates_directory = path.parent / directory
    logger.debug(f"Loaded loader config from {path}: {cfg}")
    return cfg


__all__ = ["LoaderConfig", "load_loader_config", "DEFAULT_CFG_FILE"]
