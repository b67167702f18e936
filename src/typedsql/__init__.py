"""
Typed SQL queries over SQLAlchemy, returning explicit results.

All operations can be called either as:
- Client methods: q.query(User, sql, params)
- Module functions: typedsql.query(q, User, sql, params)

Database failures come back as `Failure` values instead of exceptions;
rows are decoded into the requested type with pydantic.
"""
__version__ = '0.1.0'

from typing import Any, TypeVar

from typedsql.client import Query, connect
from typedsql.connection import dispose_all_engines
from typedsql.decode import decode_row, decode_rows, decode_scalar
from typedsql.exceptions import ConnectionFailure, DatabaseError, DbConnectionError
from typedsql.exceptions import IntegrityError, IntegrityViolationError
from typedsql.exceptions import KeyMappingError, KeyNotFoundError
from typedsql.exceptions import OperationalError, ProgrammingError, QueryError
from typedsql.exceptions import RowDecodeError, TypeConversionError
from typedsql.exceptions import UniqueViolation, ValidationError
from typedsql.options import DatabaseOptions
from typedsql.result import Failure, QueryOnlyError, Result, Success
from typedsql.structured import to_structured
from typedsql.transaction import Transaction

T = TypeVar('T')

Params = dict[str, Any] | None


def execute(q: Query, sql: str, params: Params = None) -> Result[int, DatabaseError]:
    """Execute a SQL statement and return the affected row count.
    """
    return q.execute(sql, params)


delete = execute
insert = execute
update = execute


def execute_returning_generated_keys(q: Query, sql: str, params: Params = None,
                                     columns: list[str] | None = None) -> Result[list[dict[str, Any]], DatabaseError]:
    """Execute a statement and return its generated-key rows.
    """
    return q.execute_returning_generated_keys(sql, params, columns)


def execute_get_key(q: Query, target: type[T], sql: str, key: str,
                    params: Params = None) -> Result[T, DatabaseError]:
    """Execute a statement and decode one generated key.
    """
    return q.execute_get_key(target, sql, key, params)


def execute_get_keys(q: Query, target: type[T], sql: str, key: str,
                     params: Params = None) -> Result[list[T], DatabaseError]:
    """Execute a statement and decode one generated key from every row.
    """
    return q.execute_get_keys(target, sql, key, params)


def query(q: Query, target: type[T], sql: str, params: Params = None) -> Result[list[T], DatabaseError]:
    """Get all rows of a query as `target` instances.
    """
    return q.query(target, sql, params)


def query_first(q: Query, target: type[T], sql: str,
                params: Params = None) -> Result[T | None, DatabaseError]:
    """Get the first row of a query as a `target` instance, or None.
    """
    return q.query_first(target, sql, params)


def query_only(q: Query, target: type[T], sql: str,
               params: Params = None) -> Result[T, QueryOnlyError]:
    """Get the single row of a query as a `target` instance.

    Fails with QueryOnlyError.NOT_EXACTLY_ONE for zero or several rows.
    """
    return q.query_only(target, sql, params)


__all__ = [
    'connect',
    'Query',
    'Transaction',
    'DatabaseOptions',
    'dispose_all_engines',
    'execute',
    'delete',
    'insert',
    'update',
    'execute_returning_generated_keys',
    'execute_get_key',
    'execute_get_keys',
    'query',
    'query_first',
    'query_only',
    'decode_row',
    'decode_rows',
    'decode_scalar',
    'to_structured',
    'Result',
    'Success',
    'Failure',
    'QueryOnlyError',
    'DatabaseError',
    'ConnectionFailure',
    'QueryError',
    'IntegrityViolationError',
    'ValidationError',
    'TypeConversionError',
    'RowDecodeError',
    'KeyMappingError',
    'KeyNotFoundError',
    'DbConnectionError',
    'IntegrityError',
    'ProgrammingError',
    'OperationalError',
    'UniqueViolation',
]
