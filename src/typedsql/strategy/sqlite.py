"""
SQLite-specific strategy implementation.

This module implements the DatabaseStrategy interface for SQLite. It handles:
- Declared-type detection so DATE/DATETIME columns come back as Python values
- JSON adapters for dict and list parameters
- A single shared connection for in-memory databases, which otherwise
  vanish when their connection closes
"""
import datetime
import json
import logging
import sqlite3
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from sqlalchemy.pool import StaticPool
from typedsql.strategy.base import DatabaseStrategy, register_strategy
from typedsql.types import adapt_date_iso, adapt_datetime_iso
from typedsql.types import convert_date, convert_datetime

if TYPE_CHECKING:
    from typedsql.options import DatabaseOptions

logger = logging.getLogger(__name__)

MEMORY_DATABASES = {'', ':memory:'}


def is_memory_database(options: 'DatabaseOptions') -> bool:
    """Check whether the options point at an in-memory SQLite database."""
    return (options.database or '') in MEMORY_DATABASES


@register_strategy('sqlite')
class SQLiteStrategy(DatabaseStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.database)

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite.

        In-memory databases share one connection across threads through a
        StaticPool; this overrides any pooling choice in the options.
        """
        connect_args: dict[str, Any] = {
            'detect_types': sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES
        }
        if not is_memory_database(options):
            return {'connect_args': connect_args}

        connect_args['check_same_thread'] = False
        return {'connect_args': connect_args, 'poolclass': StaticPool}

    def configure_connection(self, dbapi_connection: Any) -> None:
        """Register SQLite adapters and converters.

        Adapters (Python -> SQLite) store dict and list parameters as JSON and
        dates as ISO 8601 text;
        converters (SQLite -> Python) parse DATE and DATETIME columns.
        """
        sqlite3.register_adapter(dict, json.dumps)
        sqlite3.register_adapter(list, json.dumps)
        sqlite3.register_adapter(datetime.date, adapt_date_iso)
        sqlite3.register_adapter(datetime.datetime, adapt_datetime_iso)

        sqlite3.register_converter('date', convert_date)
        sqlite3.register_converter('datetime', convert_datetime)
        logger.debug('Registered SQLite adapters and converters')

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for SQLite connections."""
        return ['database']

    def is_private_database(self, options: 'DatabaseOptions') -> bool:
        """In-memory databases die with their engine."""
        return is_memory_database(options)
