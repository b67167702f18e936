"""
Unit tests for the error taxonomy and driver error translation.
"""
import sqlite3

import psycopg
import pytest
import sqlalchemy as sa
from typedsql.exceptions import ConnectionFailure, DatabaseError, IntegrityError
from typedsql.exceptions import IntegrityViolationError, KeyMappingError
from typedsql.exceptions import KeyNotFoundError, QueryError, RowDecodeError
from typedsql.exceptions import TypeConversionError, UniqueViolation
from typedsql.exceptions import ValidationError, translate_error


def _wrap(error_cls, orig):
    return error_cls('INSERT INTO test_table (test) VALUES (?)', ('x',), orig)


def test_integrity_errors():
    """Constraint violations become IntegrityViolationError"""
    exc = _wrap(sa.exc.IntegrityError, sqlite3.IntegrityError('UNIQUE constraint failed: test_table.id'))
    err = translate_error(exc)
    assert isinstance(err, IntegrityViolationError)
    assert 'UNIQUE constraint failed' in str(err)
    assert err.__cause__ is exc


def test_operational_errors():
    """Operational and interface failures become ConnectionFailure"""
    err = translate_error(_wrap(sa.exc.OperationalError, sqlite3.OperationalError('unable to open database file')))
    assert isinstance(err, ConnectionFailure)

    err = translate_error(_wrap(sa.exc.InterfaceError, sqlite3.InterfaceError('closed')))
    assert isinstance(err, ConnectionFailure)


def test_other_errors_are_query_errors():
    """Everything else the driver reports becomes QueryError"""
    err = translate_error(_wrap(sa.exc.ProgrammingError, sqlite3.ProgrammingError('bad binding')))
    assert isinstance(err, QueryError)

    err = translate_error(_wrap(sa.exc.DataError, psycopg.DataError('invalid input syntax')))
    assert isinstance(err, QueryError)


def test_statement_errors_are_query_errors():
    """Errors SQLAlchemy raises before the driver is called become QueryError"""
    missing = sa.exc.InvalidRequestError("A value is required for bind parameter 'id'")
    exc = sa.exc.StatementError(str(missing), 'SELECT * FROM t WHERE id = :id', {}, missing)
    err = translate_error(exc)
    assert isinstance(err, QueryError)
    assert "bind parameter 'id'" in str(err)
    assert err.__cause__ is exc

    err = translate_error(sa.exc.ResourceClosedError('This result object does not return rows.'))
    assert isinstance(err, QueryError)


def test_raw_driver_errors():
    """Unwrapped driver errors are translated too"""
    assert isinstance(translate_error(psycopg.errors.UniqueViolation('duplicate key')), IntegrityViolationError)
    assert isinstance(translate_error(psycopg.OperationalError('connection refused')), ConnectionFailure)


def test_database_errors_pass_through():
    """Errors that already belong to the taxonomy are returned unchanged"""
    original = QueryError('bad')
    assert translate_error(original) is original


def test_hierarchy():
    """Every error derives from DatabaseError"""
    for cls in (ConnectionFailure, QueryError, IntegrityViolationError, ValidationError,
                TypeConversionError, RowDecodeError, KeyMappingError, KeyNotFoundError):
        assert issubclass(cls, DatabaseError)
    assert issubclass(RowDecodeError, TypeConversionError)
    assert issubclass(KeyNotFoundError, LookupError)


def test_key_error_messages():
    """Generated-key errors name the key"""
    err = KeyMappingError('id', str)
    assert str(err) == "Key 'id' cannot be mapped to str"
    assert err.key == 'id'

    err = KeyNotFoundError('missing')
    assert str(err) == "There is no auto-generated key 'missing' associated with this table"
    with pytest.raises(LookupError):
        raise err


def test_driver_error_groups():
    """Driver error groups can be used in except clauses"""
    with pytest.raises(IntegrityError):
        raise sqlite3.IntegrityError('constraint')
    with pytest.raises(UniqueViolation):
        raise psycopg.errors.UniqueViolation('duplicate key')


if __name__ == '__main__':
    __import__('pytest').main([__file__])
