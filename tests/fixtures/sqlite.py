import pytest
import typedsql as db


@pytest.fixture
def sqlite_conn():
    """Create an in-memory SQLite database for testing"""
    q = db.connect({
        'drivername': 'sqlite',
        'database': ':memory:'
    })

    # Create test schema
    create_table = """
    CREATE TABLE test_table (
        id INTEGER PRIMARY KEY,
        test TEXT NOT NULL
    )
    """
    db.execute(q, create_table).unwrap()

    yield q
    q.close()


@pytest.fixture
def insert_rows(sqlite_conn):
    """Factory inserting `count` rows named test1..testN into test_table."""
    def insert(count: int) -> None:
        for i in range(1, count + 1):
            sqlite_conn.execute('INSERT INTO test_table (test) VALUES (:test)',
                                {'test': f'test{i}'}).unwrap()
    return insert
