# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Shape derivation: classify declared types into the closed set of shapes.

Dispatch on a core type (after ``None`` and ``Annotated`` layers are peeled)
follows a fixed order, and the first matching rule wins:

1.  A user override for this exact type produces a :class:`Backed` shape
    pointing at the external provider.
2.  ``bool``, ``int``/``Int32``, ``float``/``Float32``, ``Char`` and ``str``
    produce primitive shapes with resolved constraints.
3.  ``Awaitable[T]``, ``AsyncIterator[T]`` and ``AsyncIterable[T]`` produce
    a :class:`WrapperShape`.
4.  Mappings, sets and sequences (by structural supertype) produce collection
    shapes, each level with its own size constraint.
5.  ``tuple[A, B]`` produces a :class:`PairShape`.
6.  ``Callable[[...], R]`` produces a :class:`FunctionShape`.
7.  ``@sealed`` hierarchies and unions produce a :class:`SumShape`.
8.  ``Enum`` subclasses and ``Literal`` choices produce an :class:`EnumShape`.
9.  ``@singleton`` classes produce a :class:`SingletonShape`.
10. ``@generatable`` classes produce a :class:`Backed` shape and register a
    provider. The type's record is derived once, on first encounter.
11. Classes constructible without arguments produce a
    :class:`ConstructibleShape`.
12. Anything else is :class:`OpaqueNullable` when nullable, otherwise an
    :class:`UnsupportedTypeError` is reported.

Failures are collected rather than raised: every field of every record is
attempted, and all problems are returned together.
"""

from __future__ import annotations

import logging
import typing
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from specimen.engine.constraints import (
    constraint_problem,
    resolve_collection_size,
    resolve_range,
    resolve_text_size,
)
from specimen.engine.errors import (
    Diagnostic,
    EmptyHierarchyError,
    InvalidConstraintError,
    InvalidVariantError,
    UnsupportedTypeError,
)
from specimen.engine.overrides import OverrideRef, OverrideTable
from specimen.introspect.query import IntrospectionError, RuntimeTypeQuery, TypeQuery
from specimen.markers.constraints import Char, Float32, Int32
from specimen.markers.declarations import generatable_spec, is_sealed, is_singleton
from specimen.model.records import Field, Provider, Record
from specimen.model.shapes import (
    Backed,
    BooleanShape,
    CharShape,
    Constraint,
    ConstructibleShape,
    EnumShape,
    FloatingShape,
    FunctionShape,
    IntegerShape,
    ListShape,
    MapShape,
    OpaqueNullable,
    OptionalShape,
    PairShape,
    SetShape,
    Shape,
    SingletonShape,
    SumShape,
    TextShape,
    Unsupported,
    WrapperShape,
    is_supported,
)

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


@dataclass
class ShapeGraph:
    """Everything derived for one root type.

    Attributes:
        root: Type id of the root record.
        record: The root record.
        records: Every derived record, keyed by type id.
        providers: Every provider discovered, keyed by provider id, in discovery order.
        types: The Python object behind every type id the graph mentions.
        errors: Every diagnostic reported during derivation.
    """

    root: str
    record: Record
    records: dict[str, Record] = field(default_factory=dict)
    providers: dict[str, Provider] = field(default_factory=dict)
    types: dict[str, Any] = field(default_factory=dict)
    errors: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Return True if derivation reported any problem."""
        return len(self.errors) > 0


def derive_shape(
    annotation: Any,
    metadata: Iterable[Any] = (),
    *,
    location: str = "<annotation>",
    overrides: OverrideTable | None = None,
    query: TypeQuery | None = None,
) -> tuple[Shape, list[Diagnostic]]:
    """Derive the shape of a single declared annotation.

    Args:
        annotation: The declared type, optionally ``Annotated`` and/or nullable.
        metadata: Extra constraint markers, as if attached with ``Annotated``.
        location: Where the annotation was declared, used in diagnostics.
        overrides: User overrides consulted before any built-in rule.
        query: Type query implementation. Defaults to :class:`RuntimeTypeQuery`.

    Returns:
        The derived shape and every diagnostic reported while deriving it,
        including those of records reached through generatable types.
    """
    deriver = _ShapeDeriver(query or RuntimeTypeQuery(), overrides or OverrideTable())
    shape = deriver.derive(annotation, tuple(metadata), location)
    deriver.finish()
    return shape, deriver.errors


def derive_graph(
    root: Any,
    *,
    overrides: OverrideTable | None = None,
    query: TypeQuery | None = None,
    pooled_root: bool = False,
) -> ShapeGraph:
    """Derive the record of *root* and of every type it transitively references.

    Args:
        root: The record type to generate.
        overrides: User overrides consulted before any built-in rule.
        query: Type query implementation. Defaults to :class:`RuntimeTypeQuery`.
        pooled_root: Also register *root* itself as a provider, as needed to
            draw sub-lists from its pool.

    Returns:
        The derived :class:`ShapeGraph`. Check :attr:`ShapeGraph.has_errors`
        before synthesizing from it.
    """
    deriver = _ShapeDeriver(query or RuntimeTypeQuery(), overrides or OverrideTable())
    record = deriver.record_for(root)
    if pooled_root:
        deriver.pool(root)
    deriver.finish()
    graph = ShapeGraph(
        root=record.type_id,
        record=record,
        records=deriver.records,
        providers=deriver.providers,
        types=deriver.types,
        errors=deriver.errors,
    )
    logger.info(
        "Derived %s: %d record(s), %d provider(s), %d problem(s)",
        graph.root,
        len(graph.records),
        len(graph.providers),
        len(graph.errors),
    )
    return graph


# ################
# Implementation
# ################


class _ShapeDeriver:
    """Applies the ordered dispatch rules and memoizes records and hierarchies."""

    def __init__(self, query: TypeQuery, overrides: OverrideTable) -> None:
        self._query = query
        self._overrides = overrides
        self._records: dict[str, Record | None] = {}
        self._failed_records: set[str] = set()
        self._hierarchies: dict[str, Shape] = {}
        self._variant_links: list[tuple[str, str, str]] = []
        self._seen: set[Diagnostic] = set()
        self.providers: dict[str, Provider] = {}
        self.types: dict[str, Any] = {}
        self.errors: list[Diagnostic] = []

    @property
    def records(self) -> dict[str, Record]:
        return {type_id: record for type_id, record in self._records.items() if record is not None}

    def derive(self, annotation: Any, metadata: tuple[Any, ...], location: str) -> Shape:
        resolved = self._query.resolve(annotation)
        metadata = metadata + resolved.metadata
        if resolved.nullable:
            return OptionalShape(inner=self._derive_core(resolved.target, metadata, location, nullable=True))
        return self._derive_core(resolved.target, metadata, location, nullable=False)

    def record_for(self, tp: Any) -> Record:
        """Derive the record of *tp*, reserving it first so that cycles terminate."""
        type_id = self._remember(tp)
        existing = self._records.get(type_id)
        if existing is not None:
            return existing
        if type_id in self._records:
            # Reached again while its own fields are being derived.
            return Record(type_id=type_id)
        self._records[type_id] = None
        logger.debug("Deriving record %s", type_id)

        try:
            decls = self._query.fields_of(tp)
        except IntrospectionError as exc:
            logger.debug("%s", exc)
            self._report(UnsupportedTypeError(type=self._query.type_name(tp), location=type_id))
            self._failed_records.add(type_id)
            decls = []

        fields: list[Field] = []
        for decl in decls:
            if decl.has_default:
                nullable = self._query.resolve(decl.annotation).nullable
                fields.append(Field(name=decl.name, shape=None, is_nullable=nullable, has_default=True))
                continue
            shape = self.derive(decl.annotation, (), f"{type_id}.{decl.name}")
            fields.append(Field(name=decl.name, shape=shape, is_nullable=isinstance(shape, OptionalShape)))
            if not is_supported(shape):
                self._failed_records.add(type_id)

        record = Record(type_id=type_id, fields=fields)
        self._records[type_id] = record
        return record

    def pool(self, tp: Any) -> Backed:
        """Register *tp* as a generatable provider and derive its record once."""
        type_id = self._remember(tp)
        if type_id not in self.providers:
            spec = generatable_spec(tp)
            pool_size = spec.count if spec is not None else 0
            self.providers[type_id] = Provider(provider_id=type_id, type_id=type_id, pool_size=pool_size)
            logger.debug("Registered provider %s (pool size %d)", type_id, pool_size)
            self.record_for(tp)
        return Backed(provider_id=type_id)

    def finish(self) -> None:
        """Report hierarchy variants whose records turned out to be invalid."""
        for hierarchy, variant, provider_id in self._variant_links:
            if provider_id in self._failed_records:
                self._report(InvalidVariantError(type=hierarchy, variant=variant))

    def _derive_core(self, tp: Any, metadata: tuple[Any, ...], location: str, nullable: bool) -> Shape:
        query = self._query

        # 1. User override.
        ref = self._overrides.lookup(tp)
        if ref is not None:
            return self._external(tp, ref)

        # 2. Built-in primitive.
        primitive = self._primitive(tp, metadata, location)
        if primitive is not None:
            return primitive

        # 3. Single-argument wrapper.
        wrapper = query.wrapper_kind(tp)
        if wrapper is not None:
            (inner,) = query.generic_arguments(tp)
            return WrapperShape(wrapper=wrapper, inner=self.derive(inner, (), f"{location}[{wrapper}]"))

        # 4. List, set and map family.
        kind = query.collection_kind(tp)
        if kind is not None:
            return self._collection(tp, kind, metadata, location)

        # 5. Two-element tuple.
        pair = query.pair_arguments(tp)
        if pair is not None:
            left, right = pair
            return PairShape(
                left=self.derive(left, (), f"{location}[left]"),
                right=self.derive(right, (), f"{location}[right]"),
            )

        # 6. Callable.
        signature = query.callable_signature(tp)
        if signature is not None:
            return FunctionShape(
                arity=signature.arity,
                returns_void=signature.returns_void,
                variadic=signature.variadic,
            )

        # 7. Closed hierarchy or union.
        if isinstance(tp, type) and is_sealed(tp):
            return self._hierarchy(tp)
        members = query.union_members(tp)
        if members is not None:
            return self._union(tp, members, location)

        # 8. Enumerated finite type.
        cases = query.enum_cases(tp)
        if cases is not None:
            return self._enum(tp, cases)

        # 9. Stateless singleton.
        if is_singleton(tp):
            return SingletonShape(type_id=self._remember(tp), name=tp.__qualname__)

        # 10. Independently generatable type.
        if generatable_spec(tp) is not None:
            return self.pool(tp)

        # 11. Constructible without arguments.
        if query.has_zero_arg_constructor(tp):
            return ConstructibleShape(type_id=self._remember(tp))

        # 12. Fallthrough.
        if nullable:
            return OpaqueNullable()
        self._report(UnsupportedTypeError(type=query.type_name(tp), location=location))
        return Unsupported()

    def _primitive(self, tp: Any, metadata: tuple[Any, ...], location: str) -> Shape | None:
        if tp is bool:
            return BooleanShape()
        if tp is Int32 or tp is int:
            width = 32 if tp is Int32 else 64
            constraint = resolve_range(metadata, "integer", width)
            if not self._check_constraint(constraint, tp, location):
                return Unsupported()
            return IntegerShape(width=width, range=constraint)
        if tp is Float32 or tp is float:
            width = 32 if tp is Float32 else 64
            constraint = resolve_range(metadata, "floating", width)
            if not self._check_constraint(constraint, tp, location):
                return Unsupported()
            return FloatingShape(width=width, range=constraint)
        if tp is Char:
            return CharShape()
        if tp is str:
            constraint = resolve_text_size(metadata)
            if not self._check_constraint(constraint, tp, location):
                return Unsupported()
            return TextShape(size=constraint)
        return None

    def _collection(self, tp: Any, kind: str, metadata: tuple[Any, ...], location: str) -> Shape:
        query = self._query
        size = resolve_collection_size(metadata)
        if not self._check_constraint(size, tp, location):
            return Unsupported()
        container_type = query.collection_container(tp)
        container = None if container_type is None else self._remember(container_type)
        args = query.generic_arguments(tp)

        if kind == "map":
            key, value = args if len(args) == 2 else (args[0] if args else Any, Any)
            if not self._check_hashable(key, f"{location}[key]"):
                return Unsupported()
            return MapShape(
                size=size,
                key=self.derive(key, (), f"{location}[key]"),
                value=self.derive(value, (), f"{location}[value]"),
                container=container,
            )
        element_type = args[0] if args else Any
        if kind == "set" and not self._check_hashable(element_type, f"{location}[element]"):
            return Unsupported()
        element = self.derive(element_type, (), f"{location}[element]")
        if kind == "set":
            return SetShape(size=size, element=element, container=container)
        return ListShape(size=size, element=element, container=container)

    def _check_hashable(self, tp: Any, location: str) -> bool:
        """Report set elements and map keys whose instances cannot be hashed."""
        if self._query.is_hashable(tp):
            return True
        self._report(UnsupportedTypeError(type=self._query.type_name(tp), location=location))
        return False

    def _hierarchy(self, tp: type) -> Shape:
        """Derive a sealed hierarchy from its concrete leaves, once per base class."""
        type_id = self._remember(tp)
        if type_id in self._hierarchies:
            return self._hierarchies[type_id]

        name = self._query.type_name(tp)
        leaves = self._query.concrete_subtypes(tp)
        if not leaves:
            self._report(EmptyHierarchyError(type=name))
            self._hierarchies[type_id] = Unsupported()
            return self._hierarchies[type_id]

        variants: list[Shape] = []
        failed = False
        for leaf in leaves:
            leaf_name = self._query.type_name(leaf)
            variant = self._derive_core(leaf, (), self._query.type_id(leaf), nullable=False)
            if isinstance(variant, Backed):
                self._variant_links.append((name, leaf_name, variant.provider_id))
            elif not isinstance(variant, SingletonShape | EnumShape):
                self._report(InvalidVariantError(type=name, variant=leaf_name))
                failed = True
            variants.append(variant)

        shape: Shape = Unsupported() if failed else SumShape(type_id=type_id, variants=variants)
        self._hierarchies[type_id] = shape
        return shape

    def _union(self, tp: Any, members: tuple[Any, ...], location: str) -> Shape:
        name = self._query.type_name(tp)
        variants: list[Shape] = []
        failed = False
        for index, member in enumerate(members):
            variant = self.derive(member, (), f"{location}[variant {index}]")
            if not is_supported(variant):
                self._report(InvalidVariantError(type=name, variant=self._query.type_name(member)))
                failed = True
            variants.append(variant)
        return Unsupported() if failed else SumShape(variants=variants)

    def _enum(self, tp: Any, cases: list[Any]) -> Shape:
        if not cases:
            self._report(EmptyHierarchyError(type=self._query.type_name(tp)))
            return Unsupported()
        if typing.get_origin(tp) is typing.Literal:
            return EnumShape(cases=cases)
        return EnumShape(type_id=self._remember(tp), cases=cases)

    def _external(self, tp: Any, ref: OverrideRef) -> Backed:
        provider_id = self._remember(tp)
        if provider_id not in self.providers:
            source_id = self._remember(ref.source)
            # The pool size is known once the source has been read.
            self.providers[provider_id] = Provider(
                provider_id=provider_id,
                type_id=provider_id,
                pool_size=0,
                external=True,
                source_id=source_id,
            )
            logger.debug("Registered external provider %s from %s", provider_id, source_id)
        return Backed(provider_id=provider_id)

    def _check_constraint(self, constraint: Constraint, tp: Any, location: str) -> bool:
        problem = constraint_problem(constraint)
        if problem is None:
            return True
        self._report(InvalidConstraintError(type=self._query.type_name(tp), location=location, detail=problem))
        return False

    def _remember(self, tp: Any) -> str:
        type_id = self._query.type_id(tp)
        self.types.setdefault(type_id, tp)
        return type_id

    def _report(self, diagnostic: Diagnostic) -> None:
        if diagnostic not in self._seen:
            self._seen.add(diagnostic)
            self.errors.append(diagnostic)
