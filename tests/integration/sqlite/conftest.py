"""
Fixtures for SQLite-specific integration tests.
"""
import pytest
import typedsql as db


@pytest.fixture
def sqlite_file_conn(tmp_path):
    """File-based SQLite connection fixture for testing persistence across connections."""
    db_file = tmp_path / 'test_sqlite.db'

    q = db.connect({
        'drivername': 'sqlite',
        'database': str(db_file)
    })

    # Create test schema
    create_table = """
    CREATE TABLE test_table (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        value INTEGER NOT NULL
    )
    """
    db.execute(q, create_table).unwrap()

    # Insert test data
    insert_data = """
    INSERT INTO test_table (name, value) VALUES
    ('Alice', 10),
    ('Bob', 20),
    ('Charlie', 30)
    """
    db.execute(q, insert_data).unwrap()

    yield q

    q.close()
