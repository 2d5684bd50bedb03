from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .base import TemplateLoader
from .config import LoaderConfig
from .fs import iter_template_files, read_text
from .lru import CacheStats, LRUCache
from ..errors import TemplateIOError, TemplateNotFoundError
from ..template.nodes import Template
from ..template.parser import compile_template

logger = logging.getLogger(__name__)


class FileLoader(TemplateLoader):
    """
    Lazy loader: templates are discovered at construction but compiled on
    first use, and at most config.cache_size compiled templates are kept
    (least recently used evicted first).

    `read_text` is the file-read collaborator (path -> source text).
    """

    def __init__(
        self,
        config: Optional[LoaderConfig] = None,
        *,
        read_text: Callable[[Path], str] = read_text,
    ):
        super().__init__()
        self.config = config or LoaderConfig()
        self.root = self.config.root()
        self._read_text = read_text

        # Known logical names -> template files; nothing is compiled yet
        self._known: Dict[str, Path] = dict(iter_template_files(
            self.root,
            extension=self.config.templates_extension,
            spec_exclude=self.config.exclude_spec(),
        ))
        self._cache: LRUCache[str, Template] = LRUCache(self.config.cache_size)
        logger.debug(
            f"FileLoader discovered {len(self._known)} templates in {self.root} "
            f"(cache_size={self.config.cache_size})"
        )

    def get(self, name: str) -> Template:
        with self._lock:
            template = self._cache.get(name)
            if template is not None:
                return template
            path = self._known.get(name)

        if path is None:
            raise TemplateNotFoundError(name)

        # Read and compile without holding the lock
        try:
            source = self._read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateIOError(name, path, e) from e
        template = compile_template(source, name)

        with self._lock:
            if name not in self._known and name not in self._cache:
                # Removed while we were reading; serve it once but do not cache
                return template
            # Another thread may have cached or inserted this name meanwhile; that entry wins
            return self._cache.put_if_absent(name, template)

    def remove(self, name: str) -> bool:
        with self._lock:
            cached = self._cache.pop(name) is not None
            known = self._known.pop(name, None) is not None
        if cached or known:
            logger.debug(f"Removed template '{name}' (cached={cached}, known={known})")
        return cached or known

    def names(self) -> List[str]:
        with self._lock:
            return sorted(set(self._known) | set(self._cache.keys()))

    def cached_names(self) -> List[str]:
        """Cached template names from least to most recently used."""
        with self._lock:
            return self._cache.keys()

    @property
    def cache_stats(self) -> CacheStats:
        with self._lock:
            return self._cache.stats

    def _store(self, name: str, template: Template) -> None:
        self._cache.put(name, template)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._known or name in self._cache


__all__ = ["FileLoader"]
