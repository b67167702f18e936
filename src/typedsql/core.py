"""
Statement and query operations against one open handle.

A handle is a SQLAlchemy `Connection`. Nothing here opens, commits or
closes handles; `Query` and `Transaction` decide that. Statement failures
propagate as SQLAlchemy errors, except in `fetch_only`, which reports them
as `QueryOnlyError.FETCH_FAILED`.
"""
import logging
from typing import Any, TypeVar

import sqlalchemy as sa
from typedsql.decode import decode_scalar
from typedsql.exceptions import KeyMappingError, KeyNotFoundError
from typedsql.exceptions import RowDecodeError, StatementFailure, ValidationError
from typedsql.result import Failure, QueryOnlyError, Result, Success
from typedsql.sql import dumpsql, prepare_statement
from typedsql.strategy import get_db_strategy
from typedsql.types import TypeConverter

logger = logging.getLogger(__name__)

T = TypeVar('T')

Params = dict[str, Any] | None
Row = dict[str, Any]

__all__ = [
    'execute',
    'execute_returning_generated_keys',
    'execute_get_key',
    'execute_get_keys',
    'fetch_all',
    'fetch_first',
    'fetch_only',
    'decode_key',
    'decode_only_key',
]


def _run(handle: sa.Connection, sql: str, params: Params) -> sa.CursorResult:
    return handle.execute(prepare_statement(sql), TypeConverter.convert_params(params))


@dumpsql
def execute(handle: sa.Connection, sql: str, params: Params = None) -> int:
    """Execute a statement and return the affected row count."""
    rowcount = _run(handle, sql, params).rowcount
    logger.debug(f'Statement affected {rowcount} rows')
    return rowcount


@dumpsql
def execute_returning_generated_keys(handle: sa.Connection, sql: str, params: Params = None,
                                     columns: list[str] | None = None) -> list[Row]:
    """Execute a statement and return the rows of generated keys.
    """
    sql = get_db_strategy(handle).generated_keys_sql(sql, columns)
    return [dict(row) for row in _run(handle, sql, params).mappings().all()]


@dumpsql
def fetch_all(handle: sa.Connection, sql: str, params: Params = None) -> list[Row]:
    """Fetch every row of a query in order."""
    rows = [dict(row) for row in _run(handle, sql, params).mappings().all()]
    logger.debug(f'Query returned {len(rows)} rows')
    return rows


@dumpsql
def fetch_first(handle: sa.Connection, sql: str, params: Params = None) -> Row | None:
    """Fetch the first row of a query, or None when there are no rows.

    The cursor is closed after the first row; later rows are never fetched.
    """
    row = _run(handle, sql, params).mappings().first()
    return dict(row) if row is not None else None


def fetch_only(handle: sa.Connection, sql: str, params: Params = None) -> Result[Row, QueryOnlyError]:
    """Fetch the single row of a query.

    Returns `QueryOnlyError.NOT_EXACTLY_ONE` for zero or several rows and
    `QueryOnlyError.FETCH_FAILED` when the statement itself fails. A wrong
    row count is an expected outcome and is only logged at debug level.
    """
    try:
        result = _execute_query(handle, sql, params)
        row = result.mappings().one()
    except (sa.exc.NoResultFound, sa.exc.MultipleResultsFound) as exc:
        logger.debug(f'Expected exactly one row: {exc}')
        return Failure(QueryOnlyError.NOT_EXACTLY_ONE)
    except StatementFailure as exc:
        logger.debug(f'Fetch failed: {exc}')
        return Failure(QueryOnlyError.FETCH_FAILED)
    return Success(dict(row))


@dumpsql
def _execute_query(handle: sa.Connection, sql: str, params: Params = None) -> sa.CursorResult:
    return _run(handle, sql, params)


def decode_key(row: Row, key: str, target: type[T]) -> T:
    """Decode one named generated key with the single-value decoder.

    Raises
        KeyNotFoundError: If the row has no such key
        KeyMappingError: If the key cannot be decoded as `target`
    """
    if key not in row or row[key] is None:
        raise KeyNotFoundError(key)
    try:
        return decode_scalar(row[key], target)
    except RowDecodeError as exc:
        raise KeyMappingError(key, target) from exc


def decode_only_key(rows: list[Row], key: str, target: type[T]) -> T:
    """Decode one named key from exactly one generated-key row.

    Raises
        ValidationError: If there is not exactly one row
    """
    if len(rows) != 1:
        raise ValidationError(f'Expected one generated-key row, got {len(rows)}')
    return decode_key(rows[0], key, target)


def execute_get_key(handle: sa.Connection, sql: str, key: str, target: type[T],
                    params: Params = None) -> T:
    """Execute a statement producing one generated-key row and decode one key.
    """
    return decode_only_key(execute_returning_generated_keys(handle, sql, params), key, target)


def execute_get_keys(handle: sa.Connection, sql: str, key: str, target: type[T],
                     params: Params = None) -> list[T]:
    """Execute a statement and decode one key from every generated-key row.
    """
    rows = execute_returning_generated_keys(handle, sql, params)
    return [decode_key(row, key, target) for row in rows]
