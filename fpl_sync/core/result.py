"""
Result type for expected failures.

Every I/O boundary (cache, repository, FPL adapter) returns ``Ok(value)`` or
``Err(error)`` instead of raising. Exceptions are reserved for programmer
errors such as calling ``unwrap()`` on an ``Err``.

Example:
    result = repository.find_all(scope).map(lambda rows: rows[:10])
    if result.is_err():
        return Err(to_domain_error(result.error))
"""
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")
F = TypeVar("F")


class UnwrapError(RuntimeError):
    """Raised when a Result is unwrapped on the wrong side."""


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    @property
    def error(self) -> None:
        return None

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        return Ok(fn(self.value))

    def map_error(self, fn: Callable[[Any], F]) -> "Ok[T]":
        return self

    def and_then(self, fn: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        return fn(self.value)

    async def and_then_async(
        self, fn: Callable[[T], Awaitable["Result[U, E]"]]
    ) -> "Result[U, E]":
        return await fn(self.value)

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> Any:
        raise UnwrapError(f"Called unwrap_err() on Ok: {self.value!r}")


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    @property
    def value(self) -> None:
        return None

    def map(self, fn: Callable[[Any], U]) -> "Err[E]":
        return self

    def map_error(self, fn: Callable[[E], F]) -> "Err[F]":
        return Err(fn(self.error))

    def and_then(self, fn: Callable[[Any], "Result[U, E]"]) -> "Err[E]":
        return self

    async def and_then_async(self, fn: Callable[[Any], Awaitable["Result[U, E]"]]) -> "Err[E]":
        return self

    def unwrap(self) -> Any:
        raise UnwrapError(f"Called unwrap() on Err: {self.error!r}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error


Result = Union[Ok[T], Err[E]]


def collect(results: Iterable["Result[T, E]"]) -> "Result[list[T], E]":
    """Turn a sequence of results into a result of a list; the first Err wins."""
    values: list[T] = []
    for result in results:
        if result.is_err():
            return result
        values.append(result.value)
    return Ok(values)
