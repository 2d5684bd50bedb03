"""
Контекст рендеринга.

Стек значений, через который разрешаются имена во время рендеринга:
поиск идёт от самого внутреннего (последнего добавленного) кадра
к корневому значению.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Sequence, Tuple


class _Missing:
    """Маркер отсутствующего значения (в отличие от явного None)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def descend(value: Any, path: Sequence[str]) -> Tuple[bool, Any]:
    """
    Спускается по сегментам пути внутрь значения.

    Словари индексируются по ключу, списки по числовому сегменту.

    Returns:
        (найдено ли значение, значение)
    """
    for segment in path:
        if isinstance(value, Mapping):
            if segment not in value:
                return False, None
            value = value[segment]
        elif isinstance(value, (list, tuple)) and segment.isdigit():
            index = int(segment)
            if index >= len(value):
                return False, None
            value = value[index]
        else:
            return False, None
    return True, value


class ContextStack:
    """
    Стек кадров контекста.

    Корневое значение всегда остаётся нижним кадром, поэтому стек
    никогда не пуст. Добавление и снятие кадров строго сбалансированы
    вокруг рендеринга секции (см. scope()).
    """

    def __init__(self, root: Any):
        self._frames: List[Any] = [root]

    @property
    def top(self) -> Any:
        """Текущий (самый внутренний) кадр."""
        return self._frames[-1]

    def push(self, value: Any) -> None:
        self._frames.append(value)

    def pop(self) -> Any:
        if len(self._frames) == 1:
            raise RuntimeError("Cannot pop the root context frame")
        return self._frames.pop()

    @contextmanager
    def scope(self, value: Any) -> Iterator[None]:
        """Добавляет кадр на время блока with и гарантированно снимает его."""
        self.push(value)
        try:
            yield
        finally:
            self.pop()

    def resolve(self, path: Sequence[str]) -> Any:
        """
        Разрешает точечное имя.

        Пустой путь (неявный итератор {{.}}) даёт текущий кадр. Иначе кадры
        перебираются от внутреннего к внешнему; побеждает первый кадр,
        в котором путь разрешился целиком.

        Returns:
            Найденное значение или MISSING
        """
        if not path:
            return self.top

        for frame in reversed(self._frames):
            found, value = descend(frame, path)
            if found:
                return value
        return MISSING


__all__ = ["ContextStack", "MISSING", "descend"]
