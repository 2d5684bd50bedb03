"""
Лексический анализатор Mustache-шаблонов.

Токенизирует исходный текст шаблона, разбивая его на текст и теги
с фиксированными разделителями {{ }}. Вычисляет позиции для диагностики
и применяет правило "standalone"-строк: тег секции, комментария или
партиала, занимающий строку целиком, не оставляет в выводе ни отступа,
ни перевода строки.
"""

from __future__ import annotations

import bisect
import re
from typing import Dict, List, Optional, Tuple

from .tokens import EMPTY_SPAN, STANDALONE_TYPES, Span, Token, TokenType
from ..errors import ParseError, ParseErrorKind

OPEN = "{{"
CLOSE = "}}"
UNESCAPED_OPEN = "{{{"
UNESCAPED_CLOSE = "}}}"

# Однобуквенные модификаторы тегов
_SIGILS = {
    "#": TokenType.SECTION_OPEN,
    "^": TokenType.INVERTED_OPEN,
    "/": TokenType.SECTION_CLOSE,
    "&": TokenType.UNESCAPED,
    ">": TokenType.PARTIAL,
}

# Имена переменных: сегменты [A-Za-z0-9_-], разделённые точками, либо "."
_NAME_CHARS = r"A-Za-z0-9_\-"
_VARIABLE_PATH_RE = re.compile(rf"[{_NAME_CHARS}]+(?:\.[{_NAME_CHARS}]+)*")
_VARIABLE_CHAR_RE = re.compile(rf"[{_NAME_CHARS}.]")

# Имена партиалов: пути из допустимых в именах файлов символов, через "/"
_FILE_CHARS = r"A-Za-z0-9_\-.,!@#$%^&()+=\[\]~"
_PARTIAL_PATH_RE = re.compile(rf"[{_FILE_CHARS}]+(?:/[{_FILE_CHARS}]+)*")
_PARTIAL_CHAR_RE = re.compile(rf"[{_FILE_CHARS}/]")

_TAG_WHITESPACE = " \t\r\n"
_LINE_WHITESPACE = " \t"


class TemplateLexer:
    """
    Лексический анализатор шаблонов.

    Разбивает исходный текст на токены TEXT и теги:
    - переменные {{name}}, {{{name}}}, {{&name}}
    - секции {{#name}}, {{^name}}, {{/name}}
    - комментарии {{! ... }}
    - партиалы {{>name}}

    Первая же синтаксическая ошибка прерывает разбор.
    """

    def __init__(self, text: str):
        self.text = text
        self.position = 0
        self.length = len(text)

        # Смещения начал строк для быстрого вычисления line:column
        self._line_starts = [0]
        for match in re.finditer("\n", text):
            self._line_starts.append(match.end())

    def tokenize(self) -> List[Token]:
        """
        Токенизирует весь исходный текст и возвращает список токенов.

        Последним всегда идёт EOF токен.

        Raises:
            ParseError: При ошибке лексического анализа
        """
        tokens: List[Token] = []

        while self.position < self.length:
            tag_start = self.text.find(OPEN, self.position)
            if tag_start == -1:
                tokens.append(self._make_text(self.position, self.length))
                self.position = self.length
                break

            if tag_start > self.position:
                tokens.append(self._make_text(self.position, tag_start))

            token = self._read_tag(tag_start)
            tokens.append(token)
            self.position = token.span.end

        tokens = self._apply_standalone(tokens)

        line, column = self.location(self.length)
        tokens.append(Token(TokenType.EOF, Span(self.length, self.length), EMPTY_SPAN, line, column))
        return tokens

    def location(self, position: int) -> Tuple[int, int]:
        """Возвращает (строка, колонка) для смещения в тексте, обе с 1."""
        line = bisect.bisect_right(self._line_starts, position)
        column = position - self._line_starts[line - 1] + 1
        return line, column

    # ======= Чтение тегов =======

    def _make_text(self, start: int, end: int) -> Token:
        line, column = self.location(start)
        return Token(TokenType.TEXT, Span(start, end), EMPTY_SPAN, line, column)

    def _read_tag(self, start: int) -> Token:
        """Читает один тег, начинающийся с {{ в позиции start."""
        if self.text.startswith(UNESCAPED_OPEN, start):
            return self._read_triple_tag(start)

        sigil_pos = start + len(OPEN)
        if sigil_pos >= self.length:
            raise self._error(ParseErrorKind.UNCLOSED_TAG, "unexpected end of input inside tag", start)

        sigil = self.text[sigil_pos]

        if sigil == "!":
            close = self.text.find(CLOSE, sigil_pos + 1)
            if close == -1:
                raise self._error(ParseErrorKind.UNCLOSED_COMMENT, ParseErrorKind.UNCLOSED_COMMENT.value, start)
            end = close + len(CLOSE)
            line, column = self.location(start)
            return Token(TokenType.COMMENT, Span(start, end), EMPTY_SPAN, line, column)

        close = self.text.find(CLOSE, sigil_pos)
        if close == -1:
            raise self._error(ParseErrorKind.UNCLOSED_TAG, "tag is never closed, expected }}", start)

        token_type = _SIGILS.get(sigil)
        if token_type is None:
            token_type = TokenType.VARIABLE
            name_start = sigil_pos
        else:
            name_start = sigil_pos + 1

        if token_type is TokenType.PARTIAL:
            name = self._scan_name(start, name_start, close, _PARTIAL_PATH_RE, _PARTIAL_CHAR_RE)
        else:
            name = self._scan_name(start, name_start, close, _VARIABLE_PATH_RE, _VARIABLE_CHAR_RE)

        line, column = self.location(start)
        return Token(token_type, Span(start, close + len(CLOSE)), name, line, column)

    def _read_triple_tag(self, start: int) -> Token:
        """Читает тег {{{name}}}."""
        name_start = start + len(UNESCAPED_OPEN)
        close = self.text.find(UNESCAPED_CLOSE, name_start)
        if close == -1:
            if self.text.find(CLOSE, name_start) == -1:
                raise self._error(ParseErrorKind.UNCLOSED_TAG, "tag is never closed, expected }}}", start)
            raise self._error(
                ParseErrorKind.INVALID_UNESCAPED_TAG,
                ParseErrorKind.INVALID_UNESCAPED_TAG.value,
                start,
            )

        name = self._scan_name(start, name_start, close, _VARIABLE_PATH_RE, _VARIABLE_CHAR_RE)
        line, column = self.location(start)
        return Token(TokenType.UNESCAPED, Span(start, close + len(UNESCAPED_CLOSE)), name, line, column)

    def _scan_name(
        self,
        tag_start: int,
        start: int,
        end: int,
        path_re: re.Pattern[str],
        char_re: re.Pattern[str],
    ) -> Span:
        """
        Выделяет имя внутри тега, отбрасывая окружающие пробелы,
        и проверяет его синтаксис.
        """
        while start < end and self.text[start] in _TAG_WHITESPACE:
            start += 1
        while end > start and self.text[end - 1] in _TAG_WHITESPACE:
            end -= 1

        if start == end:
            raise self._error(ParseErrorKind.EMPTY_NAME, ParseErrorKind.EMPTY_NAME.value, tag_start)

        name = self.text[start:end]
        if name == "." and path_re is _VARIABLE_PATH_RE:
            return Span(start, end)
        if path_re.fullmatch(name):
            return Span(start, end)

        # Ищем конкретный символ для диагностики; пустой сегмент указываем по началу имени
        for offset, char in enumerate(name):
            if not char_re.match(char):
                raise self._error(
                    ParseErrorKind.INVALID_NAME,
                    f"invalid character {char!r} in tag name {name!r}",
                    start + offset,
                )
        raise self._error(ParseErrorKind.INVALID_NAME, f"empty segment in tag name {name!r}", start)

    def _error(self, kind: ParseErrorKind, message: str, position: int) -> ParseError:
        line, column = self.location(position)
        return ParseError(kind, message, line=line, column=column, position=position)

    # ======= Standalone-строки =======

    def _apply_standalone(self, tokens: List[Token]) -> List[Token]:
        """
        Вырезает отступ и перевод строки вокруг тегов, занимающих строку целиком.

        Решения принимаются по исходным позициям токенов, после чего
        текстовые токены сужаются; опустевшие текстовые токены удаляются.
        """
        # index текстового токена -> [новое начало, новый конец]
        bounds: Dict[int, List[int]] = {}
        indents: Dict[int, Span] = {}

        for i, token in enumerate(tokens):
            if token.type not in STANDALONE_TYPES:
                continue

            trim = self._standalone_bounds(tokens, i)
            if trim is None:
                continue
            line_start, cut_end = trim

            if i > 0:
                prev = bounds.setdefault(i - 1, [tokens[i - 1].span.start, tokens[i - 1].span.end])
                prev[1] = min(prev[1], line_start)
            if i + 1 < len(tokens):
                nxt = bounds.setdefault(i + 1, [tokens[i + 1].span.start, tokens[i + 1].span.end])
                nxt[0] = max(nxt[0], cut_end)
            if token.type is TokenType.PARTIAL and line_start < token.span.start:
                indents[i] = Span(line_start, token.span.start)

        if not bounds and not indents:
            return tokens

        result: List[Token] = []
        for i, token in enumerate(tokens):
            if i in bounds:
                start, end = bounds[i]
                if start >= end:
                    continue
                result.append(self._make_text(start, end))
            elif i in indents:
                result.append(Token(token.type, token.span, token.name, token.line, token.column, indents[i]))
            else:
                result.append(token)
        return result

    def _standalone_bounds(self, tokens: List[Token], index: int) -> Optional[Tuple[int, int]]:
        """
        Проверяет, занимает ли тег строку целиком.

        Returns:
            (начало строки, конец вырезаемого хвоста) или None
        """
        token = tokens[index]
        prev = tokens[index - 1] if index > 0 else None
        nxt = tokens[index + 1] if index + 1 < len(tokens) else None

        line_start = self.text.rfind("\n", 0, token.span.start) + 1
        if prev is not None and (prev.type is not TokenType.TEXT or prev.span.start > line_start):
            # На той же строке есть другой тег
            return None
        if self.text[line_start:token.span.start].strip(_LINE_WHITESPACE):
            return None

        if nxt is not None and nxt.type is not TokenType.TEXT:
            return None
        line_end = self.text.find("\n", token.span.end)
        if line_end == -1:
            line_end = cut_end = self.length
        else:
            cut_end = line_end + 1
        if self.text[token.span.end:line_end].strip(_LINE_WHITESPACE + "\r"):
            return None

        return line_start, cut_end


def tokenize_template(text: str) -> List[Token]:
    """
    Удобная функция для токенизации шаблона.

    Args:
        text: Исходный текст шаблона

    Returns:
        Список токенов

    Raises:
        ParseError: При ошибке лексического анализа
    """
    lexer = TemplateLexer(text)
    return lexer.tokenize()


__all__ = ["TemplateLexer", "tokenize_template"]
