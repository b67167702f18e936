"""
Normalize dynamic database values into a canonical structured-data tree.

The tree only contains ``None``, ``bool``, numbers, ``str``, ``list`` and
``dict`` with string keys. Numbers keep their exact value: integers and
decimals are never pushed through a binary float, so arbitrary-precision
decimals keep every digit:

>>> from decimal import Decimal
>>> to_structured(Decimal('500.123'))
Decimal('500.123')
>>> to_structured({'id': 1, 'tags': ('a', 'b'), 'ok': True, 'gone': None})
{'id': 1, 'tags': ['a', 'b'], 'ok': True, 'gone': None}
"""
import datetime
import decimal
import numbers
from collections.abc import Mapping
from typing import Any

import numpy as np
from psycopg.types.json import Json, Jsonb

__all__ = ['to_structured', 'to_structured_object', 'StructuredValue']

StructuredValue = (None | bool | int | float | decimal.Decimal | str
                   | list['StructuredValue'] | dict[str, 'StructuredValue'])

STRUCTURED_WRAPPERS = (Json, Jsonb)
EXACT_NUMBERS = (int, float, decimal.Decimal)


def _to_text(value: Any) -> str:
    """Textual fallback for values with no structured counterpart."""
    if isinstance(value, datetime.date | datetime.time):
        return value.isoformat()
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode('utf-8', errors='backslashreplace')
    return str(value)


def to_structured(value: Any) -> StructuredValue:
    """Convert one dynamic value to its structured representation.

    Never raises: values with no structured counterpart become their text,
    and so do numbers with no exact plain form (fractions, complex).
    """
    if value is None:
        return None

    if isinstance(value, bool | np.bool_):
        return bool(value)

    if isinstance(value, np.generic) and not isinstance(value, np.datetime64 | np.timedelta64):
        value = value.item()

    if isinstance(value, numbers.Number):
        return value if isinstance(value, EXACT_NUMBERS) else str(value)

    if isinstance(value, str):
        return value

    if isinstance(value, list | tuple):
        return [to_structured(item) for item in value]

    if isinstance(value, np.ndarray):
        return [to_structured(item) for item in value.tolist()]

    if isinstance(value, Mapping):
        return {str(k): to_structured(v) for k, v in value.items()}

    if isinstance(value, STRUCTURED_WRAPPERS):
        return value.obj

    return _to_text(value)


def to_structured_object(row: Mapping[str, Any]) -> dict[str, StructuredValue]:
    """Normalize every value of a row, keeping the original column names.
    """
    return {str(column): to_structured(value) for column, value in row.items()}


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
