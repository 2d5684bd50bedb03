"""
Value tree consumed by the renderer.

A Value is JSON-shaped data: None, bool, int, float, str, a list of Values
or a dict of str -> Value. ``to_value`` converts arbitrary serializable
Python objects (pydantic models, dataclasses, enums, dates, paths...) into
that shape and reports the exact location of anything it cannot convert.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Dict, List, Mapping, Union

from pydantic import BaseModel

from .errors import SerializationError

logger = logging.getLogger(__name__)

Value = Union[None, bool, int, float, str, List["Value"], Dict[str, "Value"]]

_SCALARS = (bool, int, float, str)


def _err(path: str, msg: str) -> SerializationError:
    logger.debug(f"Serialization failed at {path}: {msg}")
    return SerializationError(f"{path}: {msg}")


def _key(key: Any, path: str) -> str:
    if isinstance(key, str):
        return key
    # Same key coercion as json.dumps
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (int, float)):
        return str(key)
    raise _err(path, f"mapping keys must be strings, got {type(key).__name__} {key!r}")


def _convert(obj: Any, path: str) -> Value:
    if obj is None or isinstance(obj, _SCALARS) and not isinstance(obj, Enum):
        return obj

    if isinstance(obj, BaseModel):
        return _convert(obj.model_dump(mode="json"), path)

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: _convert(getattr(obj, f.name), f"{path}.{f.name}")
            for f in dataclasses.fields(obj)
        }

    if isinstance(obj, Enum):
        return _convert(obj.value, path)

    if isinstance(obj, Mapping):
        out: Dict[str, Value] = {}
        for k, v in obj.items():
            key = _key(k, f"{path}.<key>")
            out[key] = _convert(v, f"{path}.{key}")
        return out

    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, PurePath):
        return obj.as_posix()
    if isinstance(obj, Decimal):
        return str(obj)

    if isinstance(obj, (bytes, bytearray, memoryview)):
        raise _err(path, f"cannot serialize {type(obj).__name__}")

    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_convert(item, f"{path}[{i}]") for i, item in enumerate(obj)]

    raise _err(path, f"cannot serialize object of type {type(obj).__name__}")


def to_value(obj: Any) -> Value:
    """
    Convert a serializable Python object into a Value tree.

    Raises:
        SerializationError: if some part of ``obj`` has no Value representation;
            the message starts with the JSON-path-like location (``$.a[0].b``).
    """
    return _convert(obj, "$")


__all__ = ["Value", "to_value"]
