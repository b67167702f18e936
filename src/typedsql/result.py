"""
Explicit success/failure values returned by query and statement operations.

Operations never raise for database-level failures; they return either
`Success` wrapping the value or `Failure` wrapping the error:

>>> res = Success(3)
>>> res.map(lambda n: n * 2)
Success(value=6)
>>> Failure(QueryOnlyError.NOT_EXACTLY_ONE).unwrap_or(None) is None
True
"""
import enum
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar, Union

T = TypeVar('T')
E = TypeVar('E')
U = TypeVar('U')

__all__ = ['Success', 'Failure', 'Result', 'QueryOnlyError', 'UnwrapError']


class UnwrapError(RuntimeError):
    """Raised when unwrapping the wrong side of a result."""


class QueryOnlyError(enum.Enum):
    """Why a query expecting exactly one row did not produce it.
    """
    FETCH_FAILED = 'underlying fetch failed'
    NOT_EXACTLY_ONE = 'row count was not exactly one'

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def unwrap_failure(self) -> NoReturn:
        raise UnwrapError(f'Called unwrap_failure on {self!r}')

    def map(self, fn: Callable[[T], U]) -> 'Success[U]':
        return Success(fn(self.value))

    def map_failure(self, fn: Callable[[Any], Any]) -> 'Success[T]':
        return self

    def bind(self, fn: Callable[[T], 'Result[U, Any]']) -> 'Result[U, Any]':
        return fn(self.value)


@dataclass(frozen=True, slots=True)
class Failure(Generic[E]):
    error: E

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Raise the wrapped error when it is an exception, otherwise `UnwrapError`.

        Raising from inside a transaction block is how a caller turns a
        failure into a rollback.
        """
        if isinstance(self.error, BaseException):
            raise self.error
        raise UnwrapError(f'Called unwrap on {self!r}')

    def unwrap_or(self, default: U) -> U:
        return default

    def unwrap_failure(self) -> E:
        return self.error

    def map(self, fn: Callable[[Any], Any]) -> 'Failure[E]':
        return self

    def map_failure(self, fn: Callable[[E], U]) -> 'Failure[U]':
        return Failure(fn(self.error))

    def bind(self, fn: Callable[[Any], Any]) -> 'Failure[E]':
        return self


Result = Union[Success[T], Failure[E]]


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
