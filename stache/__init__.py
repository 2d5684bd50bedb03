"""
stache: a small Mustache template engine.

    >>> from stache import HashMapLoader
    >>> loader = HashMapLoader({"greet": "hello {{name}}!"})
    >>> loader.render_to_string("greet", {"name": "world"})
    'hello world!'
"""

from __future__ import annotations

from .errors import (
    ConfigError,
    ParseError,
    ParseErrorKind,
    SerializationError,
    StacheError,
    TemplateIOError,
    TemplateNotFoundError,
)
from .loaders import (
    CacheStats,
    FileLoader,
    HashMapLoader,
    LoaderConfig,
    TemplateLoader,
    load_loader_config,
)
from .template import Template, compile_template, escape_html, render
from .value import Value, to_value
from .version import tool_version

__version__ = tool_version()

__all__ = [
    "Template",
    "compile_template",
    "render",
    "escape_html",
    "Value",
    "to_value",
    "TemplateLoader",
    "HashMapLoader",
    "FileLoader",
    "LoaderConfig",
    "load_loader_config",
    "CacheStats",
    "StacheError",
    "ParseError",
    "ParseErrorKind",
    "TemplateNotFoundError",
    "TemplateIOError",
    "ConfigError",
    "SerializationError",
    "tool_version",
    "__version__",
]
