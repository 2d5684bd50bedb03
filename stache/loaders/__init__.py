from __future__ import annotations

from .base import TemplateLoader
from .config import LoaderConfig, load_loader_config
from .file import FileLoader
from .hashmap import HashMapLoader
from .lru import CacheStats

__all__ = [
    "TemplateLoader",
    "HashMapLoader",
    "FileLoader",
    "LoaderConfig",
    "load_loader_config",
    "CacheStats",
]
