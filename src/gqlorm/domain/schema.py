"""Unified, source-agnostic schema graph.

Both introspection results and SDL documents normalize into these frozen
values. ``SchemaGraph.types`` preserves declaration order, which every later
stage relies on for deterministic output.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import ClassVar

from gqlorm.domain.types import TypeKind

BUILTIN_SCALARS: frozenset[str] = frozenset({"ID", "String", "Int", "Float", "Boolean"})

DEFAULT_ROOT_TYPES: frozenset[str] = frozenset({"Query", "Mutation", "Subscription"})


@dataclass(frozen=True)
class FieldDef:
    """One field on an object or interface type."""

    name: str
    type_name: str
    nullable: bool = True
    is_list: bool = False
    description: str | None = None


@dataclass(frozen=True)
class ObjectType:
    name: str
    fields: tuple[FieldDef, ...] = ()
    interfaces: tuple[str, ...] = ()
    description: str | None = None

    kind: ClassVar[TypeKind] = TypeKind.OBJECT

    def field(self, name: str) -> FieldDef | None:
        return next((f for f in self.fields if f.name == name), None)


@dataclass(frozen=True)
class InterfaceType:
    name: str
    fields: tuple[FieldDef, ...] = ()
    description: str | None = None

    kind: ClassVar[TypeKind] = TypeKind.INTERFACE


@dataclass(frozen=True)
class UnionType:
    name: str
    members: tuple[str, ...] = ()
    description: str | None = None

    kind: ClassVar[TypeKind] = TypeKind.UNION


@dataclass(frozen=True)
class EnumType:
    name: str
    values: tuple[str, ...] = ()
    description: str | None = None

    kind: ClassVar[TypeKind] = TypeKind.ENUM


@dataclass(frozen=True)
class ScalarType:
    name: str
    description: str | None = None

    kind: ClassVar[TypeKind] = TypeKind.SCALAR


type TypeDef = ObjectType | InterfaceType | UnionType | EnumType | ScalarType


@dataclass(frozen=True)
class SchemaGraph:
    """Named types keyed by (case-sensitive) name, in declaration order."""

    types: dict[str, TypeDef] = field(default_factory=dict)
    root_types: frozenset[str] = DEFAULT_ROOT_TYPES

    def get(self, name: str) -> TypeDef | None:
        return self.types.get(name)

    def is_scalar(self, name: str) -> bool:
        return name in BUILTIN_SCALARS or isinstance(self.types.get(name), ScalarType)

    def objects(self) -> Iterator[ObjectType]:
        """Yield object types in declaration order, root operation types excluded."""
        for type_def in self.types.values():
            if isinstance(type_def, ObjectType) and type_def.name not in self.root_types:
                yield type_def

    def enums(self) -> Iterator[EnumType]:
        for type_def in self.types.values():
            if isinstance(type_def, EnumType):
                yield type_def

    def count(self, kind: TypeKind) -> int:
        return sum(1 for t in self.types.values() if t.kind is kind)
