"""
Transaction handling for typed database operations.
"""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from typedsql.operations import Operations

logger = logging.getLogger(__name__)

__all__ = ['Transaction']


class Transaction(Operations):
    """Context manager running several operations over one exclusive handle.

    The handle is acquired on enter. Statements are not committed one by
    one: the whole unit commits when the block completes and rolls back when
    it raises. Operations return `Result` values as on `Query`; raise (for
    example with ``result.unwrap()``) to abandon the unit of work.

    Examples
        with q.transaction() as tx:
            tx.execute('DELETE FROM ...', params)
            tx.execute('UPDATE ...', params).unwrap()
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.connection: sa.Connection | None = None
        self._transaction: sa.RootTransaction | None = None

    @property
    def active(self) -> bool:
        return self.connection is not None

    def __enter__(self) -> Self:
        if self.active:
            raise RuntimeError('Nested transactions are not supported')

        self.connection = self.engine.connect()
        self._transaction = self.connection.begin()
        logger.debug(f'Started transaction for connection {id(self.connection)}')
        return self

    def __exit__(self, exc_type: type | None, value: BaseException | None,
                 traceback: Any | None) -> None:
        try:
            if exc_type is not None:
                self._transaction.rollback()
                logger.warning('Rolling back the current transaction')
            else:
                try:
                    self._transaction.commit()
                except Exception:
                    if self._transaction.is_active:
                        self._transaction.rollback()
                    logger.warning('Commit failed, rolled back the current transaction')
                    raise
                logger.debug(f'Committed transaction for connection {id(self.connection)}')
        finally:
            self.connection.close()
            logger.debug(f'Transaction cleanup complete for connection {id(self.connection)}')
            self.connection = None
            self._transaction = None

    @contextmanager
    def _handle(self) -> Iterator[sa.Connection]:
        if not self.active:
            raise RuntimeError('Transaction is not active; use it as a context manager')
        yield self.connection

    def _commit(self, handle: sa.Connection) -> None:
        """Statements inside a transaction are committed on exit."""
