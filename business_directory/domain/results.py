"""
Repository Results
==================

Repositories never raise for expected failures. Every call returns one of:

- ``Success(value)``
- ``RecordNotFound()``   (fetch operations only)
- ``DatabaseError(error)``

Callers branch on the variant with ``isinstance`` and finish with
``assert_never`` so a new variant cannot slip through unhandled.
"""

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class RecordNotFound:
    pass


@dataclass(frozen=True)
class DatabaseError:
    """A storage-layer failure. ``error`` is the original exception."""
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


CreateResult = Union[Success[T], DatabaseError]
FetchResult = Union[Success[T], RecordNotFound, DatabaseError]


def assert_never(value: object) -> NoReturn:
    """Fail on a result variant that no branch handled."""
    raise AssertionError(f"Unhandled result variant: {value!r}")
