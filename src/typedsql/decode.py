"""
Decode database rows into typed records.

A row is normalized with `to_structured_object` and the resulting tree is
validated against the target type with pydantic. The tree is the document:
numbers reach the validator as numbers, with no textual round trip. The
validator for each target type is built once and cached.

Targets are anything pydantic can validate: `BaseModel` subclasses,
dataclasses, TypedDicts, or plain types for the single-value path.
"""
import logging
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any, TypeVar

import pydantic
from typedsql.exceptions import RowDecodeError
from typedsql.structured import to_structured_object

logger = logging.getLogger(__name__)

T = TypeVar('T')

__all__ = ['decode_row', 'decode_rows', 'decode_scalar', 'get_type_adapter']


@lru_cache(maxsize=256)
def get_type_adapter(target: Any) -> pydantic.TypeAdapter:
    """Return the cached validator for a target type."""
    logger.debug(f'Building type adapter for {target!r}')
    return pydantic.TypeAdapter(target)


def _target_name(target: Any) -> str:
    return getattr(target, '__name__', None) or repr(target)


def decode_row(row: Mapping[str, Any], target: type[T]) -> T:
    """Decode one row into an instance of `target`.

    Column names must match field names exactly. Raises `RowDecodeError`
    when a required field has no column or a value cannot be converted to
    its field type. Columns with no matching field are ignored unless the
    target forbids them.

    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Item:
    ...     id: int
    ...     test: str
    >>> decode_row({'id': 1, 'test': 'Hello world!'}, Item)
    Item(id=1, test='Hello world!')
    """
    document = to_structured_object(row)
    try:
        return get_type_adapter(target).validate_python(document)
    except pydantic.ValidationError as exc:
        raise RowDecodeError(f'Cannot decode row into {_target_name(target)}: {exc}') from exc


def decode_rows(rows: Iterable[Mapping[str, Any]], target: type[T]) -> list[T]:
    """Decode rows in order."""
    return [decode_row(row, target) for row in rows]


def decode_scalar(value: Any, target: type[T]) -> T:
    """Decode a single value by parsing its string form as `target`.

    The value's ``str()`` is read as a JSON literal, bypassing the structured
    normalization. Strings whose text is not itself a JSON literal fail, and
    high-precision decimals pass through a JSON number on the way in.

    >>> decode_scalar(7, int)
    7
    """
    try:
        return get_type_adapter(target).validate_json(str(value))
    except pydantic.ValidationError as exc:
        raise RowDecodeError(f'Cannot decode {value!r} into {_target_name(target)}: {exc}') from exc


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
