# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Render an instance set as an importable Python fixtures module.

The module defines one private list per provider pool, in dependency order,
followed by a public list of the root instances::

    from myapp.models import Address, Person

    _address_pool = [
        Address(
            street='Lorem ipsum dolor',
        ),
    ]

    values = [
        Person(
            name='Sit amet',
            address=_address_pool[0],
        ),
    ]
"""

from __future__ import annotations

import keyword
import math
import re

from specimen.engine.build import InstanceSet
from specimen.model.values import (
    ConstructValue,
    EnumValue,
    ExternalValue,
    ListValue,
    LiteralValue,
    MapValue,
    NoArgValue,
    NullValue,
    PairValue,
    PoolValue,
    SetValue,
    SingletonValue,
    SourceValue,
    StubValue,
    Value,
    WrapValue,
)

# ###############
# Public Interface
# ###############

RUNTIME_MODULE = "specimen.runtime"


class RenderError(Exception):
    """Raised when a value refers to a type that cannot be imported by name."""


def render_module(instance_set: InstanceSet, *, name: str = "values") -> str:
    """Render *instance_set* as Python source.

    Args:
        instance_set: The instance set to render.
        name: Name of the module-level list holding the root instances.

    Returns:
        The source text of a module that rebuilds the instances when imported.

    Raises:
        RenderError: If a type is defined in a function body, or *name* is not
            a valid identifier.
    """
    if not name.isidentifier() or keyword.iskeyword(name):
        raise RenderError(f"'{name}' is not a valid Python identifier")
    return _ModuleRenderer(instance_set).render(name)


def binding_name(provider_id: str) -> str:
    """Return the module-level name of a provider's pool, e.g. ``_address_pool``."""
    qualname = provider_id.split(":", 1)[-1]
    return f"_{_snake_case(qualname)}_pool"


# ################
# Implementation
# ################

_INLINE_WIDTH = 100
_INDENT = "    "


class _ModuleRenderer:
    def __init__(self, instance_set: InstanceSet) -> None:
        self._set = instance_set
        # (module, top-level name) -> local name
        self._imports: dict[tuple[str, str], str] = {}
        self._taken: set[str] = set()
        self._runtime: set[str] = set()
        self._bindings: dict[str, str] = {}

    def render(self, name: str) -> str:
        for provider in self._set.providers:
            self._bindings[provider.provider_id] = self._claim(binding_name(provider.provider_id))
        self._taken.add(name)

        blocks: list[str] = []
        for binding, value in ((self._bindings[b.name], b.value) for b in self._set.plan().fields):
            blocks.append(f"{binding} = {self._expr(value, 0)}\n")
        blocks.append(f"{name} = {self._list(self._set.values, 0)}\n")

        root_name = self._set.root.split(":", 1)[-1]
        header = f'"""Synthetic {root_name} values generated by specimen. Do not edit."""\n'
        return "\n\n".join([header + self._import_block(), *blocks])

    def _import_block(self) -> str:
        lines: list[str] = []
        by_module: dict[str, list[str]] = {}
        for (module, top), local in sorted(self._imports.items()):
            by_module.setdefault(module, []).append(top if top == local else f"{top} as {local}")
        if self._runtime:
            by_module.setdefault(RUNTIME_MODULE, []).extend(sorted(self._runtime))
        for module in sorted(by_module):
            lines.append(f"from {module} import {', '.join(by_module[module])}")
        return "\n" + "\n".join(lines) + "\n" if lines else ""

    def _reference(self, type_id: str) -> str:
        """Return an expression naming the type *type_id*, importing it on first use."""
        module, sep, qualname = type_id.partition(":")
        if not sep or "<locals>" in qualname:
            raise RenderError(f"Type '{type_id}' is not importable by name")
        top, _, rest = qualname.partition(".")
        if module == "builtins":
            return qualname
        key = (module, top)
        if key not in self._imports:
            self._imports[key] = self._claim(top)
        local = self._imports[key]
        return f"{local}.{rest}" if rest else local

    def _helper(self, name: str) -> str:
        self._runtime.add(name)
        self._taken.add(name)
        return name

    def _claim(self, name: str) -> str:
        candidate = name
        suffix = 2
        while candidate in self._taken:
            candidate = f"{name}_{suffix}"
            suffix += 1
        self._taken.add(candidate)
        return candidate

    def _expr(self, value: Value, indent: int) -> str:
        if isinstance(value, LiteralValue):
            if isinstance(value.value, float) and not math.isfinite(value.value):
                return f"float('{value.value!r}')"
            return repr(value.value)
        if isinstance(value, NullValue):
            return "None"
        if isinstance(value, ListValue):
            body = self._list(value.items, indent)
            return body if value.container is None else f"{self._reference(value.container)}({body})"
        if isinstance(value, SetValue):
            if not value.items:
                return "set()" if value.container is None else f"{self._reference(value.container)}()"
            body = self._sequence(value.items, indent, "{", "}")
            return body if value.container is None else f"{self._reference(value.container)}({body})"
        if isinstance(value, MapValue):
            pairs = [f"{self._expr(e.key, indent + 4)}: {self._expr(e.value, indent + 4)}" for e in value.entries]
            body = self._wrap(pairs, indent, "{", "}")
            return body if value.container is None else f"{self._reference(value.container)}({body})"
        if isinstance(value, PairValue):
            return f"({self._expr(value.left, indent)}, {self._expr(value.right, indent)})"
        if isinstance(value, WrapValue):
            helper = self._helper("ready" if value.wrapper == "awaitable" else "stream_of")
            return f"{helper}({self._expr(value.inner, indent)})"
        if isinstance(value, StubValue):
            return self._helper("noop" if value.returns_void else "unreachable")
        if isinstance(value, EnumValue):
            if value.type_id is None:
                return repr(value.case)
            return f"{self._reference(value.type_id)}.{value.case}"
        if isinstance(value, SingletonValue):
            return f"{self._helper('singleton_of')}({self._reference(value.type_id)})"
        if isinstance(value, PoolValue):
            return f"{self._bindings[value.provider_id]}[{value.index}]"
        if isinstance(value, ExternalValue):
            return f"{self._helper('values_of')}({self._reference(value.source_id)})[{value.index}]"
        if isinstance(value, SourceValue):
            return f"{self._helper('values_of')}({self._reference(value.source_id)})"
        if isinstance(value, NoArgValue):
            return f"{self._reference(value.type_id)}()"
        assert isinstance(value, ConstructValue)
        return self._construct(value, indent)

    def _construct(self, value: ConstructValue, indent: int) -> str:
        callee = self._reference(value.type_id)
        if not value.fields:
            return f"{callee}()"
        pad = " " * indent
        lines = [f"{pad}{_INDENT}{f.name}={self._expr(f.value, indent + 4)},\n" for f in value.fields]
        return f"{callee}(\n{''.join(lines)}{pad})"

    def _list(self, items: list[Value], indent: int) -> str:
        return self._sequence(items, indent, "[", "]")

    def _sequence(self, items: list[Value], indent: int, opening: str, closing: str) -> str:
        return self._wrap([self._expr(item, indent + 4) for item in items], indent, opening, closing)

    def _wrap(self, parts: list[str], indent: int, opening: str, closing: str) -> str:
        inline = f"{opening}{', '.join(parts)}{closing}"
        if not parts or ("\n" not in inline and len(inline) + indent <= _INLINE_WIDTH):
            return inline
        pad = " " * indent
        body = "".join(f"{pad}{_INDENT}{part},\n" for part in parts)
        return f"{opening}\n{body}{pad}{closing}"


def _snake_case(qualname: str) -> str:
    name = qualname.replace(".", "_")
    name = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", name)
    return name.lower()
