"""
Engine creation and management with SQLAlchemy.

SQLAlchemy is used exclusively for connection management and pooling. This
module provides:
1. Engine creation from DatabaseOptions through the dialect strategies
2. A thread-safe engine registry so equal options share one engine
3. Per-connection configuration hooked onto the engine's connect event
"""
import atexit
import logging
import threading
from collections.abc import Callable
from typing import Any

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from typedsql.options import DatabaseOptions
from typedsql.strategy import get_db_strategy, get_strategy, supported_dialects

__all__ = [
    'create_url_from_options',
    'get_engine_for_options',
    'dispose_all_engines',
    'configure_engine',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[tuple, Engine] = {}
_engine_registry_lock = threading.RLock()


def create_url_from_options(options: DatabaseOptions) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    return get_strategy(options.drivername).build_connection_url(options)


def configure_engine(engine: Engine) -> Engine:
    """Run the dialect's connection setup on every new DBAPI connection.

    Engines for dialects without a registered strategy are left untouched.
    """
    if engine.dialect.name not in supported_dialects():
        logger.debug(f'No strategy for dialect {engine.dialect.name}, skipping setup')
        return engine

    strategy = get_db_strategy(engine)

    def on_connect(dbapi_connection: Any, connection_record: Any) -> None:
        strategy.configure_connection(dbapi_connection)

    sa.event.listen(engine, 'connect', on_connect)
    return engine


def _engine_key(options: DatabaseOptions) -> tuple:
    url = create_url_from_options(options).render_as_string(hide_password=False)
    return (url, options.echo, options.use_pool, options.pool_max_connections,
            options.pool_max_idle_time, options.pool_wait_timeout)


def get_engine_for_options(options: DatabaseOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine,
                           **kwargs: Any) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.

    Engines are cached by options, except for in-memory SQLite databases:
    every such engine is a separate database.
    """
    strategy = get_strategy(options.drivername)
    shared = not strategy.is_private_database(options)
    key = _engine_key(options)

    with _engine_registry_lock:
        if shared and key in _engine_registry:
            logger.debug(f'Using existing engine for {options.drivername}')
            return _engine_registry[key]

        engine_kwargs: dict[str, Any] = {'echo': options.echo}

        if not options.use_pool:
            engine_kwargs['poolclass'] = NullPool
        else:
            engine_kwargs['pool_size'] = options.pool_max_connections
            engine_kwargs['pool_recycle'] = options.pool_max_idle_time
            engine_kwargs['pool_timeout'] = options.pool_wait_timeout
            engine_kwargs['max_overflow'] = 10
            engine_kwargs['pool_pre_ping'] = True
            engine_kwargs['pool_reset_on_return'] = 'rollback'

        dialect_kwargs = strategy.get_engine_kwargs(options)
        if 'poolclass' in dialect_kwargs:
            for name in ('pool_size', 'pool_recycle', 'pool_timeout', 'max_overflow',
                         'pool_pre_ping', 'pool_reset_on_return'):
                engine_kwargs.pop(name, None)
        engine_kwargs.update(dialect_kwargs)
        engine_kwargs.update(kwargs)

        engine = configure_engine(engine_factory(create_url_from_options(options), **engine_kwargs))

        if shared:
            _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.drivername}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in list(_engine_registry.values()):
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)
