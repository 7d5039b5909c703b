# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Helpers referenced by generated fixtures modules and materialized values."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any, Generic, NoReturn, TypeVar

from specimen.markers.declarations import singleton_instance

_T = TypeVar("_T")

# ###############
# Public Interface
# ###############


class Ready(Generic[_T]):
    """An awaitable that completes immediately with a fixed value.

    Unlike a coroutine it may be awaited any number of times and never warns
    when left unawaited.
    """

    def __init__(self, value: _T) -> None:
        self.value = value

    def __await__(self) -> Generator[Any, None, _T]:
        yield from ()
        return self.value

    def __repr__(self) -> str:
        return f"ready({self.value!r})"


class Stream(Generic[_T]):
    """An async iterator over a fixed sequence of values."""

    def __init__(self, *values: _T) -> None:
        self.values = values
        self._position = 0

    def __aiter__(self) -> Stream[_T]:
        return self

    async def __anext__(self) -> _T:
        if self._position >= len(self.values):
            raise StopAsyncIteration
        value = self.values[self._position]
        self._position += 1
        return value

    def __repr__(self) -> str:
        return f"stream_of({', '.join(repr(v) for v in self.values)})"


def ready(value: _T) -> Ready[_T]:
    return Ready(value)


def stream_of(*values: _T) -> Stream[_T]:
    return Stream(*values)


def noop(*args: Any, **kwargs: Any) -> None:
    """Stub for callables that return nothing."""
    return None


def unreachable(*args: Any, **kwargs: Any) -> NoReturn:
    """Stub for callables that must return a value.

    Raises:
        NotImplementedError: Always.
    """
    raise NotImplementedError("generated callable stub has no implementation")


def singleton_of(cls: type[_T]) -> _T:
    """Return the one instance of a ``@singleton`` class."""
    return singleton_instance(cls)


def values_of(source: type) -> list[Any]:
    """Instantiate a ``@provides`` source and collect its values.

    The source's ``values`` may be a list or any iterable, a property
    returning one, or a method returning one.
    """
    values = source().values
    if callable(values):
        values = values()
    return list(values)
