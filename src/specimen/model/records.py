# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Records, providers and construction plans."""

from __future__ import annotations

from pydantic import BaseModel

from specimen.model.shapes import Shape
from specimen.model.values import Value

# ###############
# Public Interface
# ###############


class Field(BaseModel):
    """One constructor field of a record.

    Fields with a default are never derived or synthesized, so their
    ``shape`` is None.
    """

    name: str
    shape: Shape | None = None
    is_nullable: bool = False
    has_default: bool = False


class Record(BaseModel):
    """The derived shape of a user-defined aggregate type."""

    type_id: str
    fields: list[Field] = []

    @property
    def generated_fields(self) -> list[Field]:
        """Fields that receive a synthesized value, in declaration order."""
        return [f for f in self.fields if not f.has_default]

    def field(self, name: str) -> Field:
        """Return the field called *name*.

        Raises:
            KeyError: If the record has no such field.
        """
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)


class Provider(BaseModel):
    """A shared, fixed-size pool of instances of one type.

    Attributes:
        provider_id: Registry key referenced by ``Backed`` shapes.
        type_id: The pooled type.
        pool_size: Declared number of instances.
        external: True when values come from a user ``@provides`` source.
        source_id: The user source class for external providers.
        pool: The materialized instances. Empty until materialization.
    """

    provider_id: str
    type_id: str
    pool_size: int
    external: bool = False
    source_id: str | None = None
    pool: list[Value] = []


class PlanBinding(BaseModel):
    """A named supporting value a renderer must define before the pool."""

    name: str
    value: Value


class ConstructionPlan(BaseModel):
    """Everything a renderer needs to emit the instances of one type.

    Attributes:
        type_id: The generated root type.
        pool: The root instances, in order.
        fields: Supporting bindings, one per provider pool in dependency order.
    """

    type_id: str
    pool: list[Value] = []
    fields: list[PlanBinding] = []


# Resolve forward references for models that use Shape or Value.
Field.model_rebuild()
Provider.model_rebuild()
PlanBinding.model_rebuild()
ConstructionPlan.model_rebuild()
