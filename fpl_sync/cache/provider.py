"""
Fallback source consulted by ``EntityCache`` on a miss.

Repositories implement this synchronously; derived views implement it with
coroutines. ``EntityCache`` accepts either.
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Generic, TypeVar, Union

from fpl_sync.cache.keys import Scope
from fpl_sync.core.errors import AppError
from fpl_sync.core.result import Result

T = TypeVar("T")

MaybeAwaitable = Union[Awaitable[Result[Any, AppError]], Result[Any, AppError]]


class DataProvider(ABC, Generic[T]):

    @abstractmethod
    def get_one(self, scope: Scope, id: Union[int, str]) -> MaybeAwaitable:
        """Return ``Ok(record)``, ``Ok(None)`` when absent, or ``Err``."""

    @abstractmethod
    def get_all(self, scope: Scope) -> MaybeAwaitable:
        """Return ``Ok(records)`` for the whole scope, or ``Err``."""
