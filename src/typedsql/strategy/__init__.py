"""
Dialect strategies, looked up by dialect name or from a bound engine/handle.

Importing this package registers the PostgreSQL and SQLite strategies.
"""
from functools import lru_cache
from typing import Any

from typedsql.strategy.base import _STRATEGY_REGISTRY, DatabaseStrategy
from typedsql.strategy.base import register_strategy
from typedsql.strategy.postgres import PostgresStrategy
from typedsql.strategy.sqlite import SQLiteStrategy

__all__ = [
    'DatabaseStrategy',
    'PostgresStrategy',
    'SQLiteStrategy',
    'register_strategy',
    'supported_dialects',
    'get_strategy',
    'get_db_strategy',
]


def supported_dialects() -> list[str]:
    """Names of the registered dialects, sorted."""
    return sorted(_STRATEGY_REGISTRY)


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> DatabaseStrategy:
    """Return the shared strategy instance for a dialect name.

    Raises
        ValueError: If no strategy is registered for the dialect
    """
    if dialect not in _STRATEGY_REGISTRY:
        raise ValueError(f'Unsupported dialect: {dialect}. Available: {supported_dialects()}')
    return _STRATEGY_REGISTRY[dialect]()


def get_db_strategy(bind: Any) -> DatabaseStrategy:
    """Return the strategy for a SQLAlchemy engine or connection."""
    return get_strategy(bind.dialect.name)
