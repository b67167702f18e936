"""
Type handling at the driver boundary.

This module provides:
- TypeConverter: Convert bound parameter values to database-compatible formats
- SQLite converters for date and datetime columns
"""
import datetime
import logging
import math
from typing import Any

import dateutil.parser
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

NUMPY_FLOAT_TYPES = (np.floating,)
NUMPY_INT_TYPES = (np.integer, np.unsignedinteger)


def _convert_numpy_value(val: Any) -> Any:
    """Convert NumPy value to Python type."""
    if isinstance(val, np.floating) and np.isnan(val):
        return None

    if isinstance(val, np.datetime64):
        if np.isnat(val):
            return None
        return pd.Timestamp(val).to_pydatetime()

    if isinstance(val, (*NUMPY_FLOAT_TYPES, *NUMPY_INT_TYPES, np.bool_)):
        return val.item()

    return val


class TypeConverter:
    """Conversion of bound parameters before they reach the driver.

    Handles NumPy scalars and pandas missing-value markers; everything else
    passes through unchanged.
    """

    @staticmethod
    def convert_value(value: Any) -> Any:
        """Convert a single value to a database-compatible format."""
        if value is None:
            return None

        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None

        if isinstance(value, type(pd.NaT)) or value is pd.NA:
            return None

        if isinstance(value, (*NUMPY_FLOAT_TYPES, *NUMPY_INT_TYPES, np.bool_, np.datetime64)):
            return _convert_numpy_value(value)

        if isinstance(value, np.ndarray):
            return [TypeConverter.convert_value(v) for v in value.tolist()]

        return value

    @staticmethod
    def convert_params(params: dict[str, Any] | None) -> dict[str, Any]:
        """Convert a named-parameter mapping for execution."""
        if not params:
            return {}
        return {k: TypeConverter.convert_value(v) for k, v in params.items()}


def convert_date(val: bytes) -> datetime.date:
    """Convert ISO 8601 date string to date object."""
    return dateutil.parser.isoparse(val.decode()).date()


def convert_datetime(val: bytes) -> datetime.datetime:
    """Convert ISO 8601 datetime string to datetime object."""
    return dateutil.parser.isoparse(val.decode())


def adapt_date_iso(val: datetime.date) -> str:
    """Convert date to ISO 8601 format string."""
    return val.isoformat()


def adapt_datetime_iso(val: datetime.datetime) -> str:
    """Convert datetime to ISO 8601 format string."""
    return val.isoformat()
