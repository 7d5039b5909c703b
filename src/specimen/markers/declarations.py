# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Class decorators that declare how a type takes part in generation.

Declarations are stored in the decorated class's own ``__dict__`` so that
they are never inherited: a subclass of a ``@generatable`` class is not
itself generatable unless it is decorated too.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

# ###############
# Public Interface
# ###############

DEFAULT_POOL_SIZE = 5
DEFAULT_LIST_COUNT = 5

_T = TypeVar("_T", bound=type)


@dataclass(frozen=True)
class GeneratableSpec:
    """Declaration attached by :func:`generatable`.

    Attributes:
        count: Number of instances in the type's shared pool.
    """

    count: int


@dataclass(frozen=True)
class GeneratableListSpec:
    """Declaration attached by :func:`generatable_list`.

    Attributes:
        count: Number of random sub-lists to produce.
    """

    count: int


def generatable(cls: _T | None = None, *, count: int = DEFAULT_POOL_SIZE) -> Any:
    """Mark a record type as independently generatable.

    Every reference to a generatable type draws from one shared pool of
    ``count`` pre-built instances. May be used bare or with arguments::

        @generatable
        @dataclass
        class Address: ...

        @generatable(count=20)
        @dataclass
        class Person: ...

    Raises:
        TypeError: If the decorated object is not a class.
    """

    def _apply(target: _T) -> _T:
        _require_class(target, "generatable")
        setattr(target, _GENERATABLE_ATTR, GeneratableSpec(count=count))
        return target

    if cls is not None:
        return _apply(cls)
    return _apply


def generatable_list(cls: _T | None = None, *, count: int = DEFAULT_LIST_COUNT) -> Any:
    """Additionally request random sub-lists drawn from a generatable type's pool.

    Raises:
        TypeError: If the decorated object is not a class.
    """

    def _apply(target: _T) -> _T:
        _require_class(target, "generatable_list")
        setattr(target, _GENERATABLE_LIST_ATTR, GeneratableListSpec(count=count))
        return target

    if cls is not None:
        return _apply(cls)
    return _apply


def sealed(cls: _T) -> _T:
    """Mark a base class as a closed hierarchy.

    Values for fields typed with a sealed base are drawn from its concrete
    leaf subclasses. Abstract or sealed intermediate classes are flattened.
    """
    _require_class(cls, "sealed")
    setattr(cls, _SEALED_ATTR, True)
    return cls


def singleton(cls: _T) -> _T:
    """Mark a class as a stateless singleton and create its one instance.

    Raises:
        TypeError: If the class cannot be instantiated without arguments.
    """
    _require_class(cls, "singleton")
    try:
        instance = cls()
    except TypeError as exc:
        raise TypeError(f"@singleton class '{cls.__qualname__}' must be constructible without arguments") from exc
    setattr(cls, _SINGLETON_ATTR, instance)
    return cls


def provides(target: Any) -> Callable[[_T], _T]:
    """Declare a class as the user-supplied source of values for *target*.

    The source class must be constructible without arguments and expose a
    ``values`` attribute, property or method yielding instances of *target*.
    Sources take precedence over every built-in generation strategy.
    """

    def _apply(source: _T) -> _T:
        _require_class(source, "provides")
        setattr(source, _PROVIDES_ATTR, target)
        return source

    return _apply


def generatable_spec(cls: object) -> GeneratableSpec | None:
    """Return the ``@generatable`` declaration of *cls*, if any."""
    return _own_attribute(cls, _GENERATABLE_ATTR)


def generatable_list_spec(cls: object) -> GeneratableListSpec | None:
    """Return the ``@generatable_list`` declaration of *cls*, if any."""
    return _own_attribute(cls, _GENERATABLE_LIST_ATTR)


def is_sealed(cls: object) -> bool:
    return _own_attribute(cls, _SEALED_ATTR) is True


def is_singleton(cls: object) -> bool:
    return _own_attribute(cls, _SINGLETON_ATTR) is not None


def singleton_instance(cls: object) -> Any:
    """Return the instance created by ``@singleton``.

    Raises:
        TypeError: If *cls* is not a ``@singleton`` class.
    """
    instance = _own_attribute(cls, _SINGLETON_ATTR)
    if instance is None:
        raise TypeError(f"'{getattr(cls, '__qualname__', cls)}' is not a @singleton class")
    return instance


def provided_type(source: object) -> Any | None:
    """Return the type a ``@provides`` source supplies values for, if any."""
    return _own_attribute(source, _PROVIDES_ATTR)


# ################
# Implementation
# ################

_GENERATABLE_ATTR = "__specimen_generatable__"
_GENERATABLE_LIST_ATTR = "__specimen_generatable_list__"
_SEALED_ATTR = "__specimen_sealed__"
_SINGLETON_ATTR = "__specimen_singleton__"
_PROVIDES_ATTR = "__specimen_provides__"


def _require_class(target: object, decorator: str) -> None:
    if not isinstance(target, type):
        raise TypeError(f"@{decorator} can only be applied to classes, got {target!r}")


def _own_attribute(cls: object, name: str) -> Any:
    """Look up a declaration on the class itself, ignoring base classes."""
    if not isinstance(cls, type):
        return None
    return vars(cls).get(name)
