"""
Typed query and statement operations shared by `Query` and `Transaction`.

Subclasses decide where the handle comes from and whether a completed
statement is committed. Database failures are captured here and returned as
`Failure` values; decode and generated-key errors propagate.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractContextManager
from typing import Any, TypeVar

import sqlalchemy as sa
from typedsql import core
from typedsql.decode import decode_row, decode_rows
from typedsql.exceptions import DatabaseError, StatementFailure, translate_error
from typedsql.result import Failure, QueryOnlyError, Result, Success

logger = logging.getLogger(__name__)

T = TypeVar('T')

Params = dict[str, Any] | None
Row = dict[str, Any]

__all__ = ['Operations']


class Operations(ABC):
    """Typed operations over a source of handles.
    """

    @abstractmethod
    def _handle(self) -> AbstractContextManager[sa.Connection]:
        """Context manager yielding the handle for one operation."""

    @abstractmethod
    def _commit(self, handle: sa.Connection) -> None:
        """Make the effects of a completed statement durable."""

    def _run(self, op: Callable[..., T], *args: Any, commit: bool = False,
             **kwargs: Any) -> Result[T, DatabaseError]:
        try:
            with self._handle() as handle:
                value = op(handle, *args, **kwargs)
                if commit:
                    self._commit(handle)
        except StatementFailure as exc:
            error = translate_error(exc)
            logger.debug(f'Database operation failed: {type(error).__name__}: {error}')
            return Failure(error)
        return Success(value)

    def execute(self, sql: str, params: Params = None) -> Result[int, DatabaseError]:
        """Execute a single SQL statement.

        Example use:

            q.execute('UPDATE users SET email=:email WHERE id=:id',
                      {'id': 0, 'email': 'example@email.com'})

        Returns
            Success with the number of affected rows, or Failure
        """
        return self._run(core.execute, sql, params, commit=True)

    def execute_returning_generated_keys(self, sql: str, params: Params = None,
                                         columns: list[str] | None = None) -> Result[list[Row], DatabaseError]:
        """Execute a statement and retrieve its generated keys as rows.
        """
        return self._run(core.execute_returning_generated_keys, sql, params,
                         columns=columns, commit=True)

    def execute_get_key(self, target: type[T], sql: str, key: str,
                        params: Params = None) -> Result[T, DatabaseError]:
        """Execute a statement and decode one generated key as `target`.

        The statement must produce exactly one generated-key row.

        Raises
            KeyNotFoundError: If the generated-key row has no such key
            KeyMappingError: If the key cannot be decoded as `target`
            ValidationError: If there is not exactly one generated-key row
        """
        return self.execute_returning_generated_keys(sql, params).map(
            lambda rows: core.decode_only_key(rows, key, target))

    def execute_get_keys(self, target: type[T], sql: str, key: str,
                         params: Params = None) -> Result[list[T], DatabaseError]:
        """Execute a statement and decode one generated key from every row.
        """
        return self.execute_returning_generated_keys(sql, params).map(
            lambda rows: [core.decode_key(row, key, target) for row in rows])

    def query_rows(self, sql: str, params: Params = None) -> Result[list[Row], DatabaseError]:
        """Get all rows of a query as plain dictionaries."""
        return self._run(core.fetch_all, sql, params)

    def query(self, target: type[T], sql: str, params: Params = None) -> Result[list[T], DatabaseError]:
        """Get all results of a query, mapped to the target type.

        Example use:

            class User(BaseModel):
                email: str

            q.query(User, 'SELECT * FROM users')
            q.query(User, 'SELECT * FROM users WHERE email=:email',
                    {'email': email})

        Always pass variable inputs as parameters, never by string
        interpolation.

        Raises
            RowDecodeError: If a row does not fit the target type
        """
        return self.query_rows(sql, params).map(lambda rows: decode_rows(rows, target))

    def query_first(self, target: type[T], sql: str,
                    params: Params = None) -> Result[T | None, DatabaseError]:
        """Get the first result of a query, mapped to the target type.

        Remaining rows are ignored and never decoded. The value is None when
        the query has no rows.
        """
        return self._run(core.fetch_first, sql, params).map(
            lambda row: decode_row(row, target) if row is not None else None)

    def query_only(self, target: type[T], sql: str,
                   params: Params = None) -> Result[T, QueryOnlyError]:
        """Get one, and only one, result of a query.

        Returns Failure(QueryOnlyError.NOT_EXACTLY_ONE) for zero or several
        rows and Failure(QueryOnlyError.FETCH_FAILED) when the query fails.
        """
        try:
            with self._handle() as handle:
                result = core.fetch_only(handle, sql, params)
        except StatementFailure as exc:
            logger.debug(f'Could not acquire handle: {exc}')
            return Failure(QueryOnlyError.FETCH_FAILED)
        return result.map(lambda row: decode_row(row, target))
