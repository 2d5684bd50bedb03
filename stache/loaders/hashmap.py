from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Union

from .base import TemplateLoader
from .config import LoaderConfig
from .fs import iter_template_files, read_text
from ..errors import ConfigError, TemplateIOError, TemplateNotFoundError
from ..template.nodes import Template
from ..template.parser import compile_template

logger = logging.getLogger(__name__)


class HashMapLoader(TemplateLoader):
    """
    Eager loader: every template is compiled up front and kept in memory.

    Lookups never touch the filesystem and nothing is ever evicted.
    Construction is atomic: if any entry fails to compile, no loader is built
    and the ParseError names the offending template.
    """

    def __init__(self, templates: Optional[Mapping[str, Union[str, Template]]] = None):
        super().__init__()
        compiled: Dict[str, Template] = {}
        for name, source in (templates or {}).items():
            compiled[name] = source if isinstance(source, Template) else compile_template(source, name)
        self._templates = compiled
        logger.debug(f"HashMapLoader initialized with {len(compiled)} templates")

    @classmethod
    def from_config(cls, config: Optional[LoaderConfig] = None) -> HashMapLoader:
        """
        Scan config.templates_directory and compile every template found.

        Raises:
            ConfigError: invalid directory, or more templates than config.cache_size
            TemplateIOError: a template file could not be read
            ParseError: a template file does not compile
        """
        config = config or LoaderConfig()
        root = config.root()

        sources: Dict[str, str] = {}
        for name, path in iter_template_files(
            root, extension=config.templates_extension, spec_exclude=config.exclude_spec()
        ):
            if len(sources) >= config.cache_size:
                raise ConfigError(
                    f"templates in {root} exceed cache size ({config.cache_size}); "
                    f"increase cache_size or use FileLoader"
                )
            try:
                sources[name] = read_text(path)
            except (OSError, UnicodeDecodeError) as e:
                raise TemplateIOError(name, path, e) from e

        if not sources:
            logger.warning(f"No '*{config.templates_extension}' templates found in {root}")
        else:
            logger.debug(f"Discovered {len(sources)} templates in {root}")
        return cls(sources)

    def get(self, name: str) -> Template:
        with self._lock:
            template = self._templates.get(name)
        if template is None:
            raise TemplateNotFoundError(name)
        return template

    def remove(self, name: str) -> bool:
        with self._lock:
            return self._templates.pop(name, None) is not None

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._templates)

    def _store(self, name: str, template: Template) -> None:
        self._templates[name] = template

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._templates

    def __len__(self) -> int:
        with self._lock:
            return len(self._templates)


__all__ = ["HashMapLoader"]
