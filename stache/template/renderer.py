"""
Рендерер шаблонов.

Обходит AST скомпилированного шаблона и записывает результат
в буфер, разрешая имена через стек контекста. Партиалы запрашиваются
у резолвера по логическому имени в момент рендеринга.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .context import MISSING, ContextStack
from .nodes import (
    PartialNode, PartialSource, SectionNode, Template, TemplateAST, TemplateNode, TextNode, VariableNode
)
from .parser import compile_template
from ..errors import TemplateNotFoundError

logger = logging.getLogger(__name__)

# Функция, возвращающая скомпилированный шаблон по логическому имени
PartialResolver = Callable[[str], Template]

_ESCAPE_TABLE = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})


def escape_html(text: str) -> str:
    """Экранирует & < > " ' за один проход (& не экранируется повторно)."""
    return text.translate(_ESCAPE_TABLE)


def _format_float(value: float) -> str:
    """Кратчайшая запись float; экспонента без знака + и ведущих нулей (1e20, 1e-7)."""
    text = repr(value)
    mantissa, sep, exponent = text.partition("e")
    if not sep:
        return text
    return f"{mantissa}e{int(exponent)}"


def stringify(value: Any) -> str:
    """
    Преобразует скаляр в строку для вывода.

    Отсутствующее значение и None дают пустую строку, булевы значения
    выводятся как true/false, списки и словари не выводятся вовсе.
    """
    if value is MISSING or value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return ""
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


def is_truthy(value: Any) -> bool:
    """
    Истинность значения для секций.

    Ложными считаются: отсутствующее значение, None, False, пустая строка,
    пустой список и числовой ноль. Пустой словарь истинен.
    """
    if value is MISSING or value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, (str, list, tuple)):
        return len(value) > 0
    return True


def indent_lines(text: str, indent: str) -> str:
    """Добавляет отступ к началу каждой строки текста (кроме пустого хвоста после \\n)."""
    if not indent or not text:
        return text
    lines = text.split("\n")
    result = [indent + line for line in lines[:-1]]
    result.append(indent + lines[-1] if lines[-1] else "")
    return "\n".join(result)


def _missing_partial(name: str) -> Template:
    raise TemplateNotFoundError(name)


def resolver_from(partials: Optional[PartialSource]) -> PartialResolver:
    """
    Строит резолвер партиалов.

    Args:
        partials: None (партиалов нет), отображение имя -> Template или текст
                  шаблона, либо функция имя -> Template или None

    Returns:
        Функция, возвращающая шаблон или бросающая TemplateNotFoundError
    """
    if partials is None:
        return _missing_partial

    if isinstance(partials, Mapping):
        compiled: Dict[str, Template] = {}
        for name, entry in partials.items():
            compiled[name] = entry if isinstance(entry, Template) else compile_template(entry, name)

        def resolve_mapping(name: str) -> Template:
            template = compiled.get(name)
            if template is None:
                raise TemplateNotFoundError(name)
            return template

        return resolve_mapping

    lookup = partials

    def resolve_callable(name: str) -> Template:
        template = lookup(name)
        if template is None:
            raise TemplateNotFoundError(name)
        return template

    return resolve_callable


class TemplateRenderer:
    """
    Рендерер AST шаблона.

    Обработчики узлов регистрируются по типу узла; каждый обработчик
    дописывает фрагменты вывода в общий буфер.
    """

    def __init__(self, resolver: PartialResolver):
        self.resolver = resolver
        self._handlers: Dict[type, Callable[[Template, Any, ContextStack, List[str]], None]] = {
            TextNode: self._render_text,
            VariableNode: self._render_variable,
            SectionNode: self._render_section,
            PartialNode: self._render_partial,
        }

    def render(self, template: Template, value: Any) -> str:
        """
        Рендерит шаблон с корневым значением value.

        Вывод собирается в буфер целиком, поэтому при ошибке частичный
        результат не возвращается.

        Raises:
            TemplateNotFoundError: Если партиал не найден резолвером
        """
        stack = ContextStack(value)
        buffer: List[str] = []
        self._render_nodes(template, template.nodes, stack, buffer)
        return "".join(buffer)

    def _render_nodes(
        self,
        template: Template,
        nodes: TemplateAST,
        stack: ContextStack,
        buffer: List[str],
    ) -> None:
        for node in nodes:
            handler = self._handlers.get(type(node))
            if handler is None:
                raise RuntimeError(f"No render handler for {type(node).__name__}")
            handler(template, node, stack, buffer)

    # ======= Обработчики узлов =======

    def _render_text(self, template: Template, node: TextNode, stack: ContextStack, buffer: List[str]) -> None:
        buffer.append(template.text(node.span))

    def _render_variable(self, template: Template, node: VariableNode, stack: ContextStack, buffer: List[str]) -> None:
        text = stringify(stack.resolve(self._segments(template, node.path)))
        buffer.append(escape_html(text) if node.escape else text)

    def _render_section(self, template: Template, node: SectionNode, stack: ContextStack, buffer: List[str]) -> None:
        value = stack.resolve(self._segments(template, node.path))

        if node.inverted:
            if not is_truthy(value):
                self._render_nodes(template, node.children, stack, buffer)
            return

        if not is_truthy(value):
            return

        if isinstance(value, (list, tuple)):
            for item in value:
                with stack.scope(item):
                    self._render_nodes(template, node.children, stack, buffer)
        else:
            with stack.scope(value):
                self._render_nodes(template, node.children, stack, buffer)

    def _render_partial(self, template: Template, node: PartialNode, stack: ContextStack, buffer: List[str]) -> None:
        name = template.text(node.name)
        partial = self.resolver(name)
        logger.debug(f"Rendering partial '{name}' from '{template.name or 'anonymous'}'")

        indent = template.text(node.indent)
        if not indent:
            self._render_nodes(partial, partial.nodes, stack, buffer)
            return

        nested: List[str] = []
        self._render_nodes(partial, partial.nodes, stack, nested)
        buffer.append(indent_lines("".join(nested), indent))

    @staticmethod
    def _segments(template: Template, path) -> List[str]:
        return [template.text(segment) for segment in path]


def render(template: Template, value: Any, resolver: Optional[PartialResolver] = None) -> str:
    """
    Удобная функция для рендеринга шаблона.

    Args:
        template: Скомпилированный шаблон
        value: Корневое значение контекста
        resolver: Резолвер партиалов; без него любой партиал даёт ошибку

    Returns:
        Результат рендеринга
    """
    renderer = TemplateRenderer(resolver or _missing_partial)
    return renderer.render(template, value)


__all__ = [
    "PartialResolver",
    "TemplateRenderer",
    "render",
    "resolver_from",
    "escape_html",
    "stringify",
    "is_truthy",
    "indent_lines",
]
