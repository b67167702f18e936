"""
PostgreSQL-specific strategy implementation.

Connections go through the psycopg (v3) driver. psycopg already returns
numeric, date/time, array and JSON columns as Python values, so no extra
converters are registered.
"""
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from typedsql.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from typedsql.options import DatabaseOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        if options.appname:
            query['application_name'] = options.appname

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port,
            database=options.database,
            query=query,
        )

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        return {}

    def configure_connection(self, dbapi_connection: Any) -> None:
        """PostgreSQL connections need no per-connection setup."""
        logger.debug('Configured PostgreSQL connection')

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database', 'port']
