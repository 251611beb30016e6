"""Result types for railway-oriented programming.

Operations that can fail return ``Success`` or ``Failure`` instead of raising.
Failures carry ``DomainError`` values so every failure path is explicit at the
call site.

Usage:
    result = await store.commit_batch(account_id, decisions)
    match result:
        case Success(value=commit):
            run.created_count = commit.created
        case Failure(error=error):
            run.fail(error)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


type Result[T, E] = Success[T] | Failure[E]
