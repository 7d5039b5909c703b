# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type query surface over Python's runtime typing information.

Shape derivation never inspects annotations directly; it asks a
:class:`TypeQuery`. :class:`RuntimeTypeQuery` answers those questions for
dataclasses, pydantic models, ``NamedTuple`` classes and plain classes with
an annotated ``__init__``.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Annotated, Any, Literal, Protocol

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from specimen.markers.declarations import is_sealed

# ###############
# Public Interface
# ###############

CollectionKind = Literal["list", "set", "map"]
WrapperKind = Literal["awaitable", "stream"]


class IntrospectionError(Exception):
    """Raised when a type's field annotations cannot be resolved."""


@dataclass(frozen=True)
class FieldDecl:
    """A constructor field as declared on a record type.

    Attributes:
        name: Keyword the field is passed as when constructing the record.
        annotation: The declared annotation, with ``Annotated`` extras kept.
        has_default: True if the constructor supplies a value when omitted.
    """

    name: str
    annotation: Any
    has_default: bool


@dataclass(frozen=True)
class ResolvedType:
    """A declared annotation split into its core type, nullability and metadata.

    Attributes:
        target: The core type with ``Annotated`` and ``None`` removed.
        nullable: True if ``None`` was a member of the declared union.
        metadata: ``Annotated`` extras collected from every layer, outermost first.
    """

    target: Any
    nullable: bool
    metadata: tuple[Any, ...] = ()


@dataclass(frozen=True)
class CallableSignature:
    arity: int
    variadic: bool
    returns_void: bool


class TypeQuery(Protocol):
    """The questions shape derivation asks about declared types."""

    def type_id(self, tp: Any) -> str: ...

    def type_name(self, tp: Any) -> str: ...

    def resolve(self, annotation: Any) -> ResolvedType: ...

    def fields_of(self, tp: Any) -> list[FieldDecl]: ...

    def generic_arguments(self, tp: Any) -> tuple[Any, ...]: ...

    def concrete_subtypes(self, tp: Any) -> list[type]: ...

    def has_zero_arg_constructor(self, tp: Any) -> bool: ...

    def wrapper_kind(self, tp: Any) -> WrapperKind | None: ...

    def collection_kind(self, tp: Any) -> CollectionKind | None: ...

    def collection_container(self, tp: Any) -> Any | None: ...

    def pair_arguments(self, tp: Any) -> tuple[Any, Any] | None: ...

    def callable_signature(self, tp: Any) -> CallableSignature | None: ...

    def union_members(self, tp: Any) -> tuple[Any, ...] | None: ...

    def enum_cases(self, tp: Any) -> list[Any] | None: ...

    def is_hashable(self, tp: Any) -> bool: ...


class RuntimeTypeQuery:
    """:class:`TypeQuery` implementation backed by ``typing`` introspection."""

    def type_id(self, tp: Any) -> str:
        """Return a stable ``module:qualname`` identity for a class-like object.

        Parameterized generics fall back to their readable name.
        """
        module = getattr(tp, "__module__", None)
        qualname = getattr(tp, "__qualname__", None)
        if isinstance(module, str) and isinstance(qualname, str) and typing.get_origin(tp) is None:
            return f"{module}:{qualname}"
        return self.type_name(tp)

    def type_name(self, tp: Any) -> str:
        """Return a short human-readable name for diagnostics."""
        if tp is types.NoneType:
            return "None"
        if isinstance(tp, type) and typing.get_origin(tp) is None:
            return tp.__qualname__
        if isinstance(tp, typing.NewType):
            return tp.__name__
        return repr(tp).replace("typing.", "")

    def resolve(self, annotation: Any) -> ResolvedType:
        """Peel ``Annotated`` layers and ``None`` union members off *annotation*."""
        metadata: list[Any] = []
        nullable = False
        target = annotation
        while True:
            if typing.get_origin(target) is typing.Annotated:
                base, *extras = typing.get_args(target)
                metadata.extend(extras)
                target = base
                continue
            if _is_union(target):
                members = typing.get_args(target)
                remaining = tuple(m for m in members if m is not types.NoneType)
                if len(remaining) < len(members):
                    nullable = True
                    if len(remaining) == 1:
                        target = remaining[0]
                        continue
                    target = typing.Union[remaining]  # noqa: UP007
            break
        if target is None:
            target = types.NoneType
        return ResolvedType(target=target, nullable=nullable, metadata=tuple(metadata))

    def fields_of(self, tp: Any) -> list[FieldDecl]:
        """Return the constructor fields of a record type in declaration order.

        Raises:
            IntrospectionError: If an annotation refers to a name that cannot be resolved.
        """
        if dataclasses.is_dataclass(tp):
            hints = _type_hints(tp, tp)
            return [
                FieldDecl(
                    name=f.name,
                    annotation=hints.get(f.name, Any),
                    has_default=f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING,
                )
                for f in dataclasses.fields(tp)
                if f.init
            ]
        if isinstance(tp, type) and issubclass(tp, BaseModel):
            # pydantic has already resolved annotations and moved Annotated extras into metadata.
            return [
                FieldDecl(name=name, annotation=_pydantic_annotation(info), has_default=not info.is_required())
                for name, info in tp.model_fields.items()
            ]
        if _is_named_tuple(tp):
            hints = _type_hints(tp, tp)
            return [
                FieldDecl(name=name, annotation=hints.get(name, Any), has_default=name in tp._field_defaults)
                for name in tp._fields
            ]
        return self._init_fields(tp)

    def generic_arguments(self, tp: Any) -> tuple[Any, ...]:
        """Return the type arguments of *tp*.

        For an unparameterized subclass of a generic collection, such as
        ``class Tags(list[str])``, the arguments of the parameterized base are
        returned.
        """
        if typing.get_origin(tp) is not None:
            return typing.get_args(tp)
        if not isinstance(tp, type):
            return ()
        for klass in tp.__mro__:
            for base in vars(klass).get("__orig_bases__", ()):
                if typing.get_origin(base) is not None and typing.get_args(base):
                    return typing.get_args(base)
        return ()

    def concrete_subtypes(self, tp: Any) -> list[type]:
        """Return the concrete leaf subclasses of a closed hierarchy.

        Abstract and sealed intermediate classes are flattened into their own
        subclasses. Each leaf is listed once, in discovery order.
        """
        leaves: list[type] = []

        def _visit(cls: type) -> None:
            for sub in cls.__subclasses__():
                if inspect.isabstract(sub) or is_sealed(sub):
                    _visit(sub)
                elif sub not in leaves:
                    leaves.append(sub)

        if isinstance(tp, type):
            _visit(tp)
        return leaves

    def has_zero_arg_constructor(self, tp: Any) -> bool:
        if tp is Any or not isinstance(tp, type) or typing.get_origin(tp) is not None or inspect.isabstract(tp):
            return False
        try:
            signature = inspect.signature(tp)
        except (TypeError, ValueError):
            return False
        return all(
            p.default is not inspect.Parameter.empty or p.kind in _VARIADIC_KINDS
            for p in signature.parameters.values()
        )

    def wrapper_kind(self, tp: Any) -> WrapperKind | None:
        origin = typing.get_origin(tp)
        if origin is None or len(typing.get_args(tp)) != 1:
            return None
        if origin is collections.abc.Awaitable:
            return "awaitable"
        if origin in (collections.abc.AsyncIterator, collections.abc.AsyncIterable):
            return "stream"
        return None

    def collection_kind(self, tp: Any) -> CollectionKind | None:
        """Classify *tp* as a list, set or map by its structural supertype."""
        origin = typing.get_origin(tp) or tp
        if origin is Any or not isinstance(origin, type) or issubclass(origin, _TEXT_TYPES):
            return None
        if issubclass(origin, collections.abc.Mapping):
            return "map"
        if issubclass(origin, collections.abc.Set):
            return "set"
        if issubclass(origin, collections.abc.Sequence):
            if issubclass(origin, tuple):
                args = typing.get_args(tp)
                return "list" if len(args) == 2 and args[1] is Ellipsis else None
            return "list"
        return None

    def collection_container(self, tp: Any) -> Any | None:
        """Return the concrete collection class to build, or None for the built-in default."""
        origin = typing.get_origin(tp) or tp
        if origin in (list, set, dict) or inspect.isabstract(origin):
            return None
        return origin

    def pair_arguments(self, tp: Any) -> tuple[Any, Any] | None:
        if typing.get_origin(tp) is not tuple:
            return None
        args = typing.get_args(tp)
        if len(args) != 2 or args[1] is Ellipsis:
            return None
        return args[0], args[1]

    def callable_signature(self, tp: Any) -> CallableSignature | None:
        if tp is collections.abc.Callable or tp is typing.Callable:
            return CallableSignature(arity=0, variadic=True, returns_void=False)
        if typing.get_origin(tp) is not collections.abc.Callable:
            return None
        params, returns = typing.get_args(tp)
        returns_void = returns is None or returns is types.NoneType
        if isinstance(params, list):
            return CallableSignature(arity=len(params), variadic=False, returns_void=returns_void)
        return CallableSignature(arity=0, variadic=True, returns_void=returns_void)

    def union_members(self, tp: Any) -> tuple[Any, ...] | None:
        return typing.get_args(tp) if _is_union(tp) else None

    def enum_cases(self, tp: Any) -> list[Any] | None:
        """Return enum member names, or literal values for a ``Literal`` type."""
        if typing.get_origin(tp) is Literal:
            return list(typing.get_args(tp))
        if isinstance(tp, type) and issubclass(tp, enum.Enum):
            return [member.name for member in tp]
        return None

    def is_hashable(self, tp: Any) -> bool:
        """Return False when instances of *tp* cannot be set elements or map keys.

        Unions, tuples and closed hierarchies are hashable only when every
        member, element or concrete subclass is. Types whose instances are
        unknown, such as ``Any`` or a ``Literal``, count as hashable.
        """
        target = self.resolve(tp).target
        members = self.union_members(target)
        if members is not None:
            return all(self.is_hashable(member) for member in members)
        origin = typing.get_origin(target) or target
        if not isinstance(origin, type):
            return True
        if origin.__hash__ is None:
            return False
        if origin is tuple:
            return all(self.is_hashable(arg) for arg in typing.get_args(target) if arg is not Ellipsis)
        if is_sealed(origin) or inspect.isabstract(origin):
            return all(sub.__hash__ is not None for sub in self.concrete_subtypes(origin))
        return True

    def _init_fields(self, tp: Any) -> list[FieldDecl]:
        """Fields of a plain class, read from the signature of its ``__init__``."""
        if not isinstance(tp, type):
            return []
        try:
            signature = inspect.signature(tp)
        except (TypeError, ValueError):
            return []
        if not signature.parameters:
            return []
        hints = _type_hints(tp.__init__, tp)
        return [
            FieldDecl(
                name=name,
                annotation=hints.get(name, Any),
                has_default=param.default is not inspect.Parameter.empty,
            )
            for name, param in signature.parameters.items()
            if param.kind not in _VARIADIC_KINDS
        ]


# ################
# Implementation
# ################

_TEXT_TYPES = (str, bytes, bytearray, memoryview)
_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def _is_union(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    return origin is typing.Union or origin is types.UnionType


def _is_named_tuple(tp: Any) -> bool:
    return isinstance(tp, type) and issubclass(tp, tuple) and hasattr(tp, "_fields")


def _type_hints(obj: Any, owner: type) -> dict[str, Any]:
    """Evaluate annotations of *obj*, allowing references to *owner* by name."""
    try:
        return typing.get_type_hints(obj, localns={owner.__name__: owner}, include_extras=True)
    except (NameError, TypeError) as exc:
        raise IntrospectionError(f"Cannot resolve annotations of '{owner.__qualname__}': {exc}") from exc


def _pydantic_annotation(info: FieldInfo) -> Any:
    if not info.metadata:
        return info.annotation
    return Annotated[(info.annotation, *info.metadata)]
