"""
AST-узлы и скомпилированный шаблон.

Узлы неизменяемы и не копируют текст шаблона: вместо строк они хранят
спаны (смещения) в исходном тексте. Исходный текст и корневые узлы
живут вместе в одном объекте Template, поэтому AST не может пережить
текст, на который ссылается.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Mapping, Optional, Tuple, Union

from .tokens import EMPTY_SPAN, Span

if TYPE_CHECKING:
    from ..value import Value


@dataclass(frozen=True)
class TemplateNode:
    """Базовый класс для всех узлов AST шаблона."""
    pass


@dataclass(frozen=True)
class TextNode(TemplateNode):
    """
    Обычный текстовый контент в шаблоне.

    Выводится в результат как есть.
    """
    span: Span


# Путь переменной: спаны сегментов имени, разделённого точками
NamePath = Tuple[Span, ...]


@dataclass(frozen=True)
class VariableNode(TemplateNode):
    """Переменная {{path}} (escape=True) или {{{path}}} / {{&path}}."""
    path: NamePath
    escape: bool = True


@dataclass(frozen=True)
class SectionNode(TemplateNode):
    """
    Секция {{#path}}...{{/path}} или инвертированная секция {{^path}}...{{/path}}.
    """
    path: NamePath
    inverted: bool = False
    children: Tuple[TemplateNode, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PartialNode(TemplateNode):
    """
    Ссылка на другой шаблон по логическому имени.

    indent: отступ standalone-партиала, добавляется к каждой строке его вывода.
    """
    name: Span
    indent: Span = EMPTY_SPAN


# Алиас для последовательности узлов (AST)
TemplateAST = Tuple[TemplateNode, ...]

# Источник партиалов: отображение имя -> шаблон/текст или функция имя -> шаблон
PartialSource = Union[
    Mapping[str, Union["Template", str]],
    Callable[[str], Optional["Template"]],
]


@dataclass(frozen=True, eq=False)
class Template:
    """
    Скомпилированный шаблон.

    Владеет исходным текстом и AST, который ссылается на этот текст.
    Неизменяем, поэтому может использоваться несколькими потоками
    одновременно.
    """
    source: str
    nodes: TemplateAST
    name: str = ""

    @classmethod
    def parse(cls, source: str, name: str = "") -> Template:
        """
        Компилирует текст шаблона.

        Raises:
            ParseError: При синтаксической ошибке (с позицией и именем шаблона)
        """
        from .parser import compile_template
        return compile_template(source, name)

    def text(self, span: Span) -> str:
        """Возвращает фрагмент исходного текста по спану."""
        return self.source[span.start:span.end]

    def path_text(self, path: NamePath) -> str:
        """Восстанавливает точечное имя по спанам сегментов."""
        return ".".join(self.text(segment) for segment in path)

    def render(self, value: Value, partials: Optional[PartialSource] = None) -> str:
        """
        Рендерит шаблон без загрузчика.

        Args:
            value: Дерево значений
            partials: Отображение или функция для разрешения партиалов

        Raises:
            TemplateNotFoundError: Если встретился неизвестный партиал
        """
        from .renderer import render, resolver_from
        return render(self, value, resolver_from(partials))

    def __repr__(self) -> str:
        label = self.name or "anonymous"
        return f"Template({label!r}, {len(self.nodes)} nodes)"


__all__ = [
    "TemplateNode",
    "TextNode",
    "VariableNode",
    "SectionNode",
    "PartialNode",
    "NamePath",
    "TemplateAST",
    "PartialSource",
    "Template",
]
