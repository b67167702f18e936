"""
SQL statement preparation and statement logging.

Statements use SQLAlchemy's named-parameter syntax (``:name``); parameter
substitution itself is left to SQLAlchemy and the driver. This module only
handles the text around it:

- `prepare_statement()` - Wrap SQL text for execution
- `has_returning_clause()` - Detect an existing RETURNING clause
- `add_returning_clause()` - Append RETURNING for generated keys
- `quote_identifier()` - Quote column names
- `dumpsql` - Log statement, parameters and timing around execution
"""
import logging
import re
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import sqlalchemy as sa

logger = logging.getLogger(__name__)

T = TypeVar('T')

_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"")
_RETURNING = re.compile(r'\bRETURNING\b', re.IGNORECASE)


def strip_statement(sql: str) -> str:
    """Remove surrounding whitespace and trailing semicolons.

    >>> strip_statement('  INSERT INTO t VALUES (1);  ')
    'INSERT INTO t VALUES (1)'
    """
    return sql.strip().rstrip(';').rstrip()


def has_returning_clause(sql: str) -> bool:
    """Check whether the statement already has a RETURNING clause.

    String literals are ignored so that a value containing the word does
    not count.

    >>> has_returning_clause('insert into t (a) values (1) returning id')
    True
    >>> has_returning_clause("insert into t (a) values ('returning')")
    False
    """
    return bool(_RETURNING.search(_STRING_LITERAL.sub("''", sql)))


def quote_identifier(identifier: str) -> str:
    """Quote a column name with standard double-quote escaping.

    >>> quote_identifier('id')
    '"id"'
    >>> quote_identifier('my"col')
    '"my""col"'
    """
    return '"' + identifier.replace('"', '""') + '"'


def add_returning_clause(sql: str, columns: list[str] | None = None) -> str:
    """Append a RETURNING clause unless the statement has one.

    >>> add_returning_clause('INSERT INTO t (a) VALUES (:a);')
    'INSERT INTO t (a) VALUES (:a) RETURNING *'
    >>> add_returning_clause('INSERT INTO t (a) VALUES (:a)', ['id'])
    'INSERT INTO t (a) VALUES (:a) RETURNING "id"'
    """
    if has_returning_clause(sql):
        return sql
    target = ', '.join(quote_identifier(c) for c in columns) if columns else '*'
    return f'{strip_statement(sql)} RETURNING {target}'


def prepare_statement(sql: str) -> sa.TextClause:
    """Wrap SQL text as an executable SQLAlchemy clause."""
    return sa.text(strip_statement(sql))


def dumpsql(func: Callable[..., T]) -> Callable[..., T]:
    """Decorator for logging SQL statements, parameters and elapsed time.

    The wrapped function takes the handle first, then the SQL text and the
    parameter mapping.
    """
    @wraps(func)
    def wrapper(handle: Any, sql: str, params: dict[str, Any] | None = None,
                *args: Any, **kwargs: Any) -> T:
        start = time.time()
        logger.debug(f'SQL:\n{sql}\nparams: {params}')
        try:
            return func(handle, sql, params, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{sql}\nparams: {params}')
            raise
        finally:
            logger.debug(f'Query time: {time.time() - start:.4f}s')
    return wrapper


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
