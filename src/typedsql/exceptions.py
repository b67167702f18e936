"""
Database-specific exception classes.
"""
import sqlite3

import psycopg
import sqlalchemy as sa


class DatabaseError(Exception):
    """Base class for all typedsql errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining database connection.
    """


class QueryError(DatabaseError):
    """Error in query syntax or execution.
    """


class IntegrityViolationError(DatabaseError):
    """Database constraint violation error.
    """


class ValidationError(DatabaseError):
    """Error in input validation.
    """


class TypeConversionError(DatabaseError):
    """Error converting types between Python and database.
    """


class RowDecodeError(TypeConversionError):
    """A row (or single value) cannot be decoded into the requested type.
    """


class KeyMappingError(TypeConversionError):
    """A generated key exists but cannot be mapped to the requested type.
    """

    def __init__(self, key: str, target: object) -> None:
        self.key = key
        self.target = target
        super().__init__(f"Key '{key}' cannot be mapped to {_type_name(target)}")


class KeyNotFoundError(TypeConversionError, LookupError):
    """The statement produced no generated key with the requested name.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"There is no auto-generated key '{key}' associated with this table")


def _type_name(target: object) -> str:
    return getattr(target, '__name__', None) or repr(target)


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    ConnectionFailure,
    )

IntegrityError = (
    psycopg.IntegrityError,
    sqlite3.IntegrityError,
    IntegrityViolationError,
    )

ProgrammingError = (
    psycopg.ProgrammingError,
    psycopg.DatabaseError,
    sqlite3.ProgrammingError,
    sqlite3.DatabaseError,
    QueryError,
    )

OperationalError = (
    psycopg.OperationalError,
    sqlite3.OperationalError,
    )

UniqueViolation = (
    psycopg.errors.UniqueViolation,
    sqlite3.IntegrityError,
    IntegrityViolationError,
    )

# Everything SQLAlchemy raises for a statement, including failures detected
# before the driver is called (unbound parameters, rows requested from a
# statement that returns none). DBAPIError is a StatementError.
StatementFailure = (
    sa.exc.StatementError,
    sa.exc.InvalidRequestError,
    )


def translate_error(exc: BaseException) -> DatabaseError:
    """Map a driver or SQLAlchemy error onto the typedsql taxonomy.

    The original exception is chained as ``__cause__`` so callers can still
    reach the driver error. Errors that are already a `DatabaseError` are
    returned unchanged.

    >>> err = translate_error(sqlite3.IntegrityError('UNIQUE constraint failed'))
    >>> type(err).__name__
    'IntegrityViolationError'
    >>> translate_error(QueryError('bad')).args
    ('bad',)
    >>> type(translate_error(sa.exc.ResourceClosedError('This result object does not return rows.'))).__name__
    'QueryError'
    """
    if isinstance(exc, DatabaseError):
        return exc

    orig = exc.orig if isinstance(exc, sa.exc.StatementError) and exc.orig is not None else exc

    if isinstance(exc, sa.exc.IntegrityError) or isinstance(orig, IntegrityError):
        err: DatabaseError = IntegrityViolationError(str(orig))
    elif isinstance(exc, sa.exc.InterfaceError | sa.exc.OperationalError) \
            or isinstance(orig, DbConnectionError):
        err = ConnectionFailure(str(orig))
    else:
        err = QueryError(str(orig))

    err.__cause__ = exc
    return err


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
