"""
Шаблонизатор Mustache.

Публичный API: компиляция шаблона и рендеринг дерева значений.
"""

from __future__ import annotations

from .nodes import Template
from .parser import compile_template
from .renderer import escape_html, render, resolver_from

__all__ = ["Template", "compile_template", "render", "resolver_from", "escape_html"]
