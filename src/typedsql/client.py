"""
The `Query` client and the `connect()` entry point.

Testing notes:

Prefer supplying a fake client when unit-testing business logic so the
test suite remains fast and deterministic.

**Simplest approach - hand-rolled stub**

    class FakeQuery:
        def query(self, target, sql, params=None):
            return Success([target(id=1, name='stub')])

    service_under_test(q=FakeQuery())

**In-memory database**

    q = typedsql.connect({'drivername': 'sqlite', 'database': ':memory:'})
    q.execute('CREATE TABLE ...')
"""
import logging
from collections.abc import Callable
from dataclasses import fields
from typing import Any, Self, TypeVar

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from typedsql.connection import configure_engine, get_engine_for_options
from typedsql.operations import Operations
from typedsql.options import DatabaseOptions
from typedsql.strategy import get_strategy
from typedsql.transaction import Transaction

from libb import load_options

logger = logging.getLogger(__name__)

T = TypeVar('T')

__all__ = ['Query', 'connect']


class Query(Operations):
    """Runs single queries and statements, each on its own handle.

    Create with `connect()`, `Query.from_engine()` or `Query.from_url()`.
    Use `transaction()` to group statements on one handle.
    """

    def __init__(self, engine: Engine, owns_engine: bool = False) -> None:
        self.engine = engine
        self.owns_engine = owns_engine

    @classmethod
    def from_engine(cls, engine: Engine) -> Self:
        """Create a client over an existing SQLAlchemy engine.

        The engine stays owned by the caller.
        """
        return cls(configure_engine(engine))

    @classmethod
    def from_url(cls, url: str | sa.URL, username: str | None = None,
                 password: str | None = None, **engine_kwargs: Any) -> Self:
        """Create a client from a database URL.

        Credentials are only applied when both are given.
        """
        url = sa.make_url(url)
        if username is not None and password is not None:
            url = url.set(username=username, password=password)
        return cls(configure_engine(sa.create_engine(url, **engine_kwargs)), owns_engine=True)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None,
                 exc_tb: Any | None) -> None:
        self.close()

    @property
    def dialect(self) -> str:
        """Return the dialect name ('postgresql' or 'sqlite')."""
        return self.engine.dialect.name

    def handle(self) -> sa.Connection:
        """Acquire a new handle; use it as a context manager to release it."""
        return self.engine.connect()

    def _handle(self) -> sa.Connection:
        return self.handle()

    def _commit(self, handle: sa.Connection) -> None:
        handle.commit()

    def transaction(self) -> Transaction:
        """Create a transaction over one exclusive handle.

        Examples
            with q.transaction() as tx:
                tx.execute('INSERT INTO ...', params)
                tx.query(Model, 'SELECT ...')
        """
        return Transaction(self.engine)

    def run_in_transaction(self, work: Callable[[Transaction], T]) -> T:
        """Run `work` inside a transaction and return its value.

        Commits when `work` returns and rolls back when it raises.
        """
        with self.transaction() as tx:
            return work(tx)

    def close(self) -> None:
        """Dispose the engine when this client created it."""
        if self.owns_engine:
            self.engine.dispose()
            logger.debug(f'Disposed engine for {self.dialect}')


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> Query:
    """Connect to a database using SQLAlchemy for connection management

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        Query client bound to the engine for these options
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    engine = get_engine_for_options(options)
    owns_engine = get_strategy(options.drivername).is_private_database(options)
    return Query(engine, owns_engine=owns_engine)
