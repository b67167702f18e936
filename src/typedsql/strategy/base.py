"""
Base strategy interface for dialect-specific behavior.

Each concrete strategy describes how to reach one kind of database through
SQLAlchemy: the connection URL, engine arguments, per-connection setup, and
how a statement is asked to hand back its generated keys. Clients work with
any dialect through this interface.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from typedsql.sql import add_returning_clause

if TYPE_CHECKING:
    from typedsql.options import DatabaseOptions

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DatabaseStrategy(ABC):
    """Base class for dialect-specific operations.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'sqlite')."""

    @abstractmethod
    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for this dialect.

        Args:
            options: DatabaseOptions containing connection parameters

        Returns
            sqlalchemy.URL for create_engine
        """

    @abstractmethod
    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for this dialect.

        Args:
            options: DatabaseOptions containing connection parameters

        Returns
            Dictionary of keyword arguments for create_engine
        """

    @abstractmethod
    def configure_connection(self, dbapi_connection: Any) -> None:
        """Prepare a freshly opened DBAPI connection.

        Args:
            dbapi_connection: The raw DBAPI connection (not wrapped)
        """

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.

        Returns
            List of field names that must have non-None/non-zero values
        """

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Args:
            options: DatabaseOptions to validate

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')

    def generated_keys_sql(self, sql: str, columns: list[str] | None = None) -> str:
        """Rewrite an INSERT/UPDATE so that it returns its generated keys.

        Default implementation appends a RETURNING clause, which both
        PostgreSQL and SQLite (3.35+) support.

        Args:
            sql: Statement text
            columns: Key columns to return, all columns when omitted

        Returns
            Statement text with a RETURNING clause
        """
        return add_returning_clause(sql, columns)

    def is_private_database(self, options: 'DatabaseOptions') -> bool:
        """Whether the database only exists for the engine that opened it.

        Such engines are never shared through the engine registry.
        """
        return False
