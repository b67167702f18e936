"""
Integration tests for SQLite transactions.
"""
import pytest
import typedsql as db
from pydantic import BaseModel
from typedsql.exceptions import IntegrityViolationError


class Person(BaseModel):
    name: str
    value: int


def _names(q):
    return [p.name for p in q.query(Person, 'SELECT name, value FROM test_table ORDER BY id').unwrap()]


@pytest.mark.sqlite
def test_transaction_commits(sqlite_file_conn):
    """Test statements in a transaction are committed together"""
    with sqlite_file_conn.transaction() as tx:
        tx.execute('INSERT INTO test_table (name, value) VALUES (:n, :v)', {'n': 'Dana', 'v': 40}).unwrap()
        tx.execute('UPDATE test_table SET value = :v WHERE name = :n', {'n': 'Alice', 'v': 11}).unwrap()

        # visible inside the transaction
        assert tx.query_only(Person, 'SELECT name, value FROM test_table WHERE name = :n',
                             {'n': 'Dana'}).unwrap() == Person(name='Dana', value=40)

    assert _names(sqlite_file_conn) == ['Alice', 'Bob', 'Charlie', 'Dana']
    alice = sqlite_file_conn.query_only(Person, "SELECT name, value FROM test_table WHERE name = 'Alice'")
    assert alice.unwrap().value == 11


@pytest.mark.sqlite
def test_transaction_rolls_back_on_error(sqlite_file_conn):
    """Test an exception inside the block discards every statement"""
    with pytest.raises(ValueError), sqlite_file_conn.transaction() as tx:
        tx.execute('INSERT INTO test_table (name, value) VALUES (:n, :v)', {'n': 'Dana', 'v': 40}).unwrap()
        raise ValueError('abandon')

    assert _names(sqlite_file_conn) == ['Alice', 'Bob', 'Charlie']


@pytest.mark.sqlite
def test_transaction_rolls_back_on_unwrapped_failure(sqlite_file_conn):
    """Test unwrapping a failed statement abandons the transaction"""
    with pytest.raises(IntegrityViolationError), sqlite_file_conn.transaction() as tx:
        tx.execute('INSERT INTO test_table (name, value) VALUES (:n, :v)', {'n': 'Dana', 'v': 40}).unwrap()
        tx.execute('INSERT INTO test_table (name, value) VALUES (:n, :v)', {'n': 'Alice', 'v': 1}).unwrap()

    assert 'Dana' not in _names(sqlite_file_conn)


@pytest.mark.sqlite
def test_transaction_generated_keys(sqlite_conn):
    """Test generated keys inside a transaction"""
    with sqlite_conn.transaction() as tx:
        first = tx.execute_get_key(int, 'INSERT INTO test_table (test) VALUES (:t)', 'id', {'t': 'a'}).unwrap()
        second = tx.execute_get_key(int, 'INSERT INTO test_table (test) VALUES (:t)', 'id', {'t': 'b'}).unwrap()
    assert (first, second) == (1, 2)
    assert len(sqlite_conn.query_rows('SELECT * FROM test_table').unwrap()) == 2


@pytest.mark.sqlite
def test_nested_transaction_rejected(sqlite_conn):
    """Test a transaction cannot be entered twice"""
    tx = sqlite_conn.transaction()
    with tx, pytest.raises(RuntimeError, match='Nested transactions'):
        tx.__enter__()


@pytest.mark.sqlite
def test_transaction_outside_block(sqlite_conn):
    """Test a transaction only runs statements while active"""
    tx = sqlite_conn.transaction()
    assert not tx.active
    with pytest.raises(RuntimeError, match='not active'):
        tx.execute('SELECT 1')


@pytest.mark.sqlite
def test_run_in_transaction(sqlite_file_conn):
    """Test the functional form commits and returns the work's value"""
    def work(tx):
        tx.execute('DELETE FROM test_table WHERE name = :n', {'n': 'Bob'}).unwrap()
        return tx.query(Person, 'SELECT name, value FROM test_table').unwrap()

    people = sqlite_file_conn.run_in_transaction(work)
    assert [p.name for p in people] == ['Alice', 'Charlie']
    assert _names(sqlite_file_conn) == ['Alice', 'Charlie']


@pytest.mark.sqlite
def test_run_in_transaction_rolls_back(sqlite_file_conn):
    """Test the functional form rolls back when the work raises"""
    def work(tx):
        tx.execute('DELETE FROM test_table').unwrap()
        raise RuntimeError('abandon')

    with pytest.raises(RuntimeError, match='abandon'):
        sqlite_file_conn.run_in_transaction(work)
    assert _names(sqlite_file_conn) == ['Alice', 'Bob', 'Charlie']


@pytest.mark.sqlite
def test_module_functions_in_transaction(sqlite_file_conn):
    """Test module functions accept a transaction"""
    with sqlite_file_conn.transaction() as tx:
        db.insert(tx, 'INSERT INTO test_table (name, value) VALUES (:n, :v)', {'n': 'Eve', 'v': 50}).unwrap()
        assert db.query_first(tx, Person, 'SELECT name, value FROM test_table ORDER BY value DESC').unwrap() == \
            Person(name='Eve', value=50)
    assert _names(sqlite_file_conn)[-1] == 'Eve'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
