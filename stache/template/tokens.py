"""
Лексические типы.

Определяет типы токенов Mustache-шаблона и текстовые спаны,
через которые токены и узлы AST ссылаются на исходный текст.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class TokenType(enum.Enum):
    """Типы токенов в шаблоне."""

    TEXT = "TEXT"

    VARIABLE = "VARIABLE"                # {{name}}
    UNESCAPED = "UNESCAPED"              # {{{name}}} или {{&name}}
    SECTION_OPEN = "SECTION_OPEN"        # {{#name}}
    INVERTED_OPEN = "INVERTED_OPEN"      # {{^name}}
    SECTION_CLOSE = "SECTION_CLOSE"      # {{/name}}
    COMMENT = "COMMENT"                  # {{! ... }}
    PARTIAL = "PARTIAL"                  # {{>name}}

    EOF = "EOF"


# Теги, которые могут занимать строку целиком ("standalone")
STANDALONE_TYPES = frozenset({
    TokenType.SECTION_OPEN,
    TokenType.INVERTED_OPEN,
    TokenType.SECTION_CLOSE,
    TokenType.COMMENT,
    TokenType.PARTIAL,
})


@dataclass(frozen=True)
class Span:
    """
    Полуоткрытый диапазон [start, end) в исходном тексте шаблона.

    Узлы AST хранят только смещения, а сам текст принадлежит
    скомпилированному шаблону.
    """
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def of(self, source: str) -> str:
        """Возвращает фрагмент исходного текста, на который указывает спан."""
        return source[self.start:self.end]


EMPTY_SPAN = Span(0, 0)


@dataclass(frozen=True)
class Token:
    """
    Токен с позиционной информацией для точной диагностики ошибок.

    span охватывает токен целиком (для тегов вместе с {{ }}),
    name: только имя внутри тега.
    """
    type: TokenType
    span: Span
    name: Span          # Имя тега; для TEXT/COMMENT/EOF совпадает с EMPTY_SPAN
    line: int           # Номер строки (начиная с 1)
    column: int         # Номер колонки (начиная с 1)
    indent: Span = EMPTY_SPAN  # Отступ standalone-партиала

    @property
    def position(self) -> int:
        return self.span.start

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.span.start}:{self.span.end}, {self.line}:{self.column})"


__all__ = [
    "TokenType",
    "STANDALONE_TYPES",
    "Span",
    "EMPTY_SPAN",
    "Token",
]
