"""
Base exception for user-facing errors.

All expected errors that the caller can act upon (broken template syntax,
unknown template names, unreadable files, bad configuration, data that
cannot be turned into a value tree) inherit from StacheError.

Programming errors and bugs should NOT inherit from StacheError;
they will propagate with full tracebacks.
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional


class StacheError(Exception):
    """
    Base class for all user-facing errors in stache.

    A failed operation never leaves partial output behind: the error
    surfaces to the caller of the operation that triggered it.
    """
    pass


class ParseErrorKind(enum.Enum):
    """Reason a template failed to compile."""
    UNCLOSED_TAG = "unclosed tag"
    EMPTY_NAME = "empty tag name"
    INVALID_NAME = "invalid character in tag name"
    INVALID_UNESCAPED_TAG = "invalid unescaped variable tag, expected {{{ name }}}"
    UNCLOSED_COMMENT = "unclosed comment tag, expected {{! comment }}"
    UNCLOSED_SECTION = "unclosed section"
    MISMATCHED_SECTION_END = "mismatched section end tag"
    UNEXPECTED_SECTION_END = "section end tag without a matching start tag"


def _display_name(name: str) -> str:
    return f"'{name}'" if name else "anonymous"


class ParseError(StacheError):
    """
    Compile-time error with enough position information to locate the tag.
    """

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        *,
        line: int,
        column: int,
        position: int,
        template_name: str = "",
    ):
        self.kind = kind
        self.message = message
        self.line = line
        self.column = column
        self.position = position
        self.template_name = template_name
        super().__init__(
            f"error parsing {_display_name(template_name)} template: "
            f"{message} at {line}:{column}"
        )

    def with_name(self, template_name: str) -> ParseError:
        """Returns a copy of this error attributed to a named template."""
        return ParseError(
            self.kind,
            self.message,
            line=self.line,
            column=self.column,
            position=self.position,
            template_name=template_name,
        )


class TemplateNotFoundError(StacheError):
    """Requested template (or a referenced partial) is not known to the loader."""

    def __init__(self, name: str):
        super().__init__(f"loader error: {_display_name(name)} template not found")
        self.name = name


class TemplateIOError(StacheError):
    """Reading a template file failed (missing file, permissions, encoding)."""

    def __init__(self, name: str, path: Optional[Path], cause: Exception):
        super().__init__(f"error reading {_display_name(name)} template: {cause}")
        self.name = name
        self.path = path
        self.cause = cause


class ConfigError(StacheError):
    """Invalid loader configuration."""
    pass


class SerializationError(StacheError):
    """Data could not be converted into a value tree."""
    pass


__all__ = [
    "StacheError",
    "ParseErrorKind",
    "ParseError",
    "TemplateNotFoundError",
    "TemplateIOError",
    "ConfigError",
    "SerializationError",
]
