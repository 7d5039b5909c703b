# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Construction expressions produced by synthesis.

A value describes how to build one concrete object without building it.
Renderers turn values into Python source or JSON, and
:mod:`specimen.engine.materialize` turns them into live objects.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel
from pydantic import Field as _Field

# ###############
# Public Interface
# ###############


class LiteralValue(BaseModel):
    """A boolean, number, character or string literal."""

    kind: Literal["literal"] = "literal"
    value: bool | int | float | str


class NullValue(BaseModel):
    kind: Literal["null"] = "null"


class ListValue(BaseModel):
    kind: Literal["list"] = "list"
    items: list[Value]
    container: str | None = None


class SetValue(BaseModel):
    kind: Literal["set"] = "set"
    items: list[Value]
    container: str | None = None


class MapEntry(BaseModel):
    key: Value
    value: Value


class MapValue(BaseModel):
    kind: Literal["map"] = "map"
    entries: list[MapEntry]
    container: str | None = None


class PairValue(BaseModel):
    kind: Literal["pair"] = "pair"
    left: Value
    right: Value


class WrapValue(BaseModel):
    """An inner value re-wrapped in an awaitable cell or a one-item async stream."""

    kind: Literal["wrap"] = "wrap"
    wrapper: Literal["awaitable", "stream"]
    inner: Value


class StubValue(BaseModel):
    """A callable that ignores its arguments.

    A non-void stub raises ``NotImplementedError`` when called.
    """

    kind: Literal["stub"] = "stub"
    arity: int
    returns_void: bool


class EnumValue(BaseModel):
    """One enum member by name, or one literal value when ``type_id`` is None."""

    kind: Literal["enum"] = "enum"
    type_id: str | None = None
    case: bool | int | float | str


class SingletonValue(BaseModel):
    kind: Literal["singleton"] = "singleton"
    type_id: str


class PoolValue(BaseModel):
    """The element at ``index`` in a provider's pool."""

    kind: Literal["pool"] = "pool"
    provider_id: str
    index: int


class ExternalValue(BaseModel):
    """The element at ``index`` among the values yielded by a user source."""

    kind: Literal["external"] = "external"
    source_id: str
    index: int


class SourceValue(BaseModel):
    """Every value yielded by a user source, as a list."""

    kind: Literal["source"] = "source"
    source_id: str


class NoArgValue(BaseModel):
    kind: Literal["no_arg"] = "no_arg"
    type_id: str


class FieldValue(BaseModel):
    name: str
    value: Value


class ConstructValue(BaseModel):
    """A call of a record type with keyword arguments, in field order."""

    kind: Literal["construct"] = "construct"
    type_id: str
    fields: list[FieldValue]

    def field(self, name: str) -> Value:
        """Return the value assigned to field *name*.

        Raises:
            KeyError: If the field was not assigned.
        """
        for field_value in self.fields:
            if field_value.name == name:
                return field_value.value
        raise KeyError(name)

    def field_names(self) -> list[str]:
        return [field_value.name for field_value in self.fields]


Value = Annotated[
    LiteralValue
    | NullValue
    | ListValue
    | SetValue
    | MapValue
    | PairValue
    | WrapValue
    | StubValue
    | EnumValue
    | SingletonValue
    | PoolValue
    | ExternalValue
    | SourceValue
    | NoArgValue
    | ConstructValue,
    _Field(discriminator="kind"),
]


# Resolve forward references for values that nest other values.
ListValue.model_rebuild()
SetValue.model_rebuild()
MapEntry.model_rebuild()
MapValue.model_rebuild()
PairValue.model_rebuild()
WrapValue.model_rebuild()
FieldValue.model_rebuild()
ConstructValue.model_rebuild()
