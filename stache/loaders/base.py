"""
Loader contract shared by the eager (HashMapLoader) and lazy (FileLoader)
strategies.

A loader maps logical template names to compiled templates and renders
them, resolving partials through itself. Loaders are safe to share between
threads: every mutation of loader state (including LRU promotion) happens
under the loader's lock, while parsing and rendering run outside of it.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, List, Union

from ..template.nodes import Template
from ..template.parser import compile_template
from ..template.renderer import render
from ..value import Value, to_value


class TemplateLoader(ABC):
    """Abstract name -> compiled template registry with rendering helpers."""

    def __init__(self) -> None:
        self._lock = threading.RLock()

    @abstractmethod
    def get(self, name: str) -> Template:
        """
        Return the compiled template registered under `name`.

        Raises:
            TemplateNotFoundError: unknown name
            TemplateIOError: the template file could not be read (FileLoader)
            ParseError: the template file does not compile (FileLoader)
        """

    @abstractmethod
    def remove(self, name: str) -> bool:
        """Drop `name` from the loader. Returns True if anything was removed."""

    @abstractmethod
    def names(self) -> List[str]:
        """Sorted logical names the loader can currently resolve."""

    @abstractmethod
    def _store(self, name: str, template: Template) -> None:
        """Register a compiled template; called with the lock held."""

    @abstractmethod
    def __contains__(self, name: object) -> bool:
        ...

    def insert(self, name: str, source: Union[str, Template]) -> None:
        """
        Compile `source` (unless it is already a Template) and register it
        under `name`, replacing any previous entry.

        Raises:
            ParseError: the source does not compile; the loader is left unchanged
        """
        template = source if isinstance(source, Template) else compile_template(source, name)
        with self._lock:
            self._store(name, template)

    def render_to_string(self, name: str, value: Value) -> str:
        """Render template `name` against a value tree; partials resolve through this loader."""
        template = self.get(name)
        return render(template, value, self.get)

    def render_serializable_to_string(self, name: str, obj: Any) -> str:
        """Convert `obj` with to_value() and render template `name` against it."""
        return self.render_to_string(name, to_value(obj))


__all__ = ["TemplateLoader"]
