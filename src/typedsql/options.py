"""
Connection options.

`DatabaseOptions` is what `connect()` builds from a dict, keyword arguments
or a config section. The dialect strategy named by `drivername` decides
which of the connection fields are required.
"""
from dataclasses import dataclass

from typedsql.strategy import get_strategy

from libb import ConfigOptions, scriptname

__all__ = ['DatabaseOptions']


@dataclass
class DatabaseOptions(ConfigOptions):
    """Options for one database.

    >>> opts = DatabaseOptions(drivername='sqlite', database=':memory:', appname='report')
    >>> opts.appname, opts.use_pool
    ('report', False)

    `appname` is reported to PostgreSQL as the application name and
    defaults to the running script. Pool settings only apply when
    `use_pool` is set, and never to in-memory SQLite databases, which keep
    a single connection.
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    echo: bool = False
    use_pool: bool = False
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        strategy = get_strategy(self.drivername)
        strategy.validate_options(self)
        if not self.appname:
            self.appname = scriptname() or 'python_console'


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
