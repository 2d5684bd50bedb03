"""
Парсер шаблонов.

Преобразует последовательность токенов в AST (абстрактное синтаксическое
дерево) с вложенными секциями, проверяя, что каждая открытая секция
закрыта тегом с тем же именем.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .lexer import TemplateLexer
from .nodes import (
    NamePath, PartialNode, SectionNode, Template, TemplateAST, TemplateNode, TextNode, VariableNode
)
from .tokens import Span, Token, TokenType
from ..errors import ParseError, ParseErrorKind

logger = logging.getLogger(__name__)

IMPLICIT_ITERATOR = "."


class TemplateParser:
    """
    Рекурсивный парсер для шаблонов.

    Обрабатывает последовательность токенов и строит AST. Секции разбираются
    рекурсивно: открывающий тег запоминается, и ближайший закрывающий тег
    на том же уровне обязан повторить его имя.
    """

    def __init__(self, tokens: List[Token], source: str):
        self.tokens = tokens
        self.source = source
        self.position = 0

    def parse(self) -> TemplateAST:
        """
        Парсит всю последовательность токенов в AST.

        Returns:
            Кортеж корневых узлов AST

        Raises:
            ParseError: При ошибке синтаксического анализа
        """
        nodes = self._parse_block(opening=None)
        return tuple(nodes)

    def _parse_block(self, opening: Optional[Token]) -> List[TemplateNode]:
        """
        Парсит узлы до закрывающего тега секции opening (или до EOF на верхнем уровне).
        """
        nodes: List[TemplateNode] = []

        while True:
            current = self._current_token()

            if current.type == TokenType.EOF:
                if opening is not None:
                    raise self._error(
                        ParseErrorKind.UNCLOSED_SECTION,
                        f"section {self._name(opening)!r} is never closed",
                        opening,
                    )
                return nodes

            if current.type == TokenType.SECTION_CLOSE:
                self._check_close(opening, current)
                self._advance()
                return nodes

            node = self._parse_node()
            if node is not None:
                nodes.append(node)

    def _parse_node(self) -> Optional[TemplateNode]:
        """Парсит один узел; комментарии отбрасываются."""
        token = self._advance()

        if token.type == TokenType.TEXT:
            return TextNode(span=token.span)
        elif token.type == TokenType.VARIABLE:
            return VariableNode(path=self._path(token), escape=True)
        elif token.type == TokenType.UNESCAPED:
            return VariableNode(path=self._path(token), escape=False)
        elif token.type in (TokenType.SECTION_OPEN, TokenType.INVERTED_OPEN):
            children = self._parse_block(opening=token)
            return SectionNode(
                path=self._path(token),
                inverted=token.type == TokenType.INVERTED_OPEN,
                children=tuple(children),
            )
        elif token.type == TokenType.PARTIAL:
            return PartialNode(name=token.name, indent=token.indent)
        elif token.type == TokenType.COMMENT:
            return None
        else:
            raise RuntimeError(f"Unexpected token: {token!r}")

    def _check_close(self, opening: Optional[Token], closing: Token) -> None:
        """Проверяет, что закрывающий тег соответствует открытой секции."""
        if opening is None:
            raise self._error(
                ParseErrorKind.UNEXPECTED_SECTION_END,
                f"section end {self._name(closing)!r} has no matching start tag",
                closing,
            )
        if self._name(opening) != self._name(closing):
            raise self._error(
                ParseErrorKind.MISMATCHED_SECTION_END,
                f"section {self._name(opening)!r} (opened at {opening.line}:{opening.column}) "
                f"closed by {self._name(closing)!r}",
                closing,
            )

    def _path(self, token: Token) -> NamePath:
        """
        Разбивает имя тега на спаны сегментов.

        Неявный итератор {{.}} даёт пустой путь.
        """
        name = token.name
        text = self.source[name.start:name.end]
        if text == IMPLICIT_ITERATOR:
            return ()

        segments = []
        start = name.start
        for part in text.split("."):
            segments.append(Span(start, start + len(part)))
            start += len(part) + 1
        return tuple(segments)

    def _name(self, token: Token) -> str:
        return self.source[token.name.start:token.name.end]

    def _current_token(self) -> Token:
        return self.tokens[self.position]

    def _advance(self) -> Token:
        token = self.tokens[self.position]
        if token.type != TokenType.EOF:
            self.position += 1
        return token

    @staticmethod
    def _error(kind: ParseErrorKind, message: str, token: Token) -> ParseError:
        return ParseError(kind, message, line=token.line, column=token.column, position=token.position)


def compile_template(source: str, name: str = "") -> Template:
    """
    Компилирует текст шаблона в Template.

    Args:
        source: Исходный текст шаблона
        name: Логическое имя шаблона для диагностики

    Returns:
        Скомпилированный шаблон, владеющий исходным текстом

    Raises:
        ParseError: При первой же синтаксической ошибке
    """
    try:
        tokens = TemplateLexer(source).tokenize()
        nodes = TemplateParser(tokens, source).parse()
    except ParseError as e:
        if name:
            raise e.with_name(name) from None
        raise

    logger.debug(f"Compiled template '{name or 'anonymous'}' -> {len(nodes)} nodes")
    return Template(source=source, nodes=nodes, name=name)


__all__ = ["TemplateParser", "compile_template", "IMPLICIT_ITERATOR"]
