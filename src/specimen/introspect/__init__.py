# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Type query surface used by shape derivation."""

from specimen.introspect.query import (
    CallableSignature,
    CollectionKind,
    FieldDecl,
    IntrospectionError,
    ResolvedType,
    RuntimeTypeQuery,
    TypeQuery,
    WrapperKind,
)

__all__ = [
    "CallableSignature",
    "CollectionKind",
    "FieldDecl",
    "IntrospectionError",
    "ResolvedType",
    "RuntimeTypeQuery",
    "TypeQuery",
    "WrapperKind",
]
