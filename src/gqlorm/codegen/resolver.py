"""Type Resolver: GraphQL scalars and enums to target and SQL types.

Three layers, in increasing precedence:

1. the built-in table (:data:`~gqlorm.codegen.typemap.DEFAULT_SCALAR_TYPES`),
   optionally overlaid by the selected emitter's own defaults
2. ``type_mappings``: a scalar-wide (or enum-wide) override
3. ``field_overrides``: a ``"Type.field"`` override

Override values are ``"<target type>"`` or ``"<target type>|<SQL TYPE>"``.
A custom scalar that reaches none of the layers is fatal.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gqlorm.codegen.typemap import (
    DEFAULT_SCALAR_TYPES,
    ENUM_STORAGE,
    LIST_FALLBACK,
    EnumStorage,
    ScalarMapping,
)
from gqlorm.domain.errors import ConfigConflictError, UnmappedScalarError
from gqlorm.domain.naming import to_snake_case
from gqlorm.domain.schema import BUILTIN_SCALARS, EnumType, ScalarType
from gqlorm.domain.types import DatabaseType, TypeOrigin

if TYPE_CHECKING:
    from gqlorm.domain.schema import FieldDef, ObjectType, SchemaGraph

_FALLBACK_SQL_TYPE = "TEXT"


@dataclass(frozen=True)
class ResolvedType:
    """Concrete persistence types chosen for one scalar, enum, or field."""

    target_type: str
    sql_type: str
    origin: TypeOrigin = TypeOrigin.DEFAULT
    enum_name: str | None = None
    enum_storage: EnumStorage | None = None
    is_list: bool = False


def parse_override(key: str, value: str) -> tuple[str, str | None]:
    """Split an override value into ``(target_type, sql_type or None)``."""
    target, _, sql = value.partition("|")
    target = target.strip()
    sql = sql.strip()
    if not target:
        msg = f"Type override for {key!r} has an empty target type: {value!r}"
        raise ConfigConflictError(msg, subject=key)
    return target, sql or None


def split_field_path(path: str) -> tuple[str, str]:
    """Split ``"Type.field"`` into its parts."""
    owner, dot, field_name = path.partition(".")
    if not dot or not owner or not field_name or "." in field_name:
        msg = f"Field override key {path!r} must have the form 'Type.field'"
        raise ConfigConflictError(msg, subject=path)
    return owner, field_name


class TypeResolver:
    """Resolve scalars, enums, and whole fields for one dialect."""

    def __init__(
        self,
        dialect: DatabaseType,
        *,
        type_mappings: Mapping[str, str] | None = None,
        field_overrides: Mapping[str, str] | None = None,
        defaults: Mapping[tuple[str, DatabaseType], ScalarMapping] | None = None,
    ) -> None:
        self.dialect = dialect
        self._type_mappings = {k: parse_override(k, v) for k, v in (type_mappings or {}).items()}
        self._field_overrides: dict[str, tuple[str, str | None]] = {}
        for path, value in (field_overrides or {}).items():
            split_field_path(path)
            self._field_overrides[path] = parse_override(path, value)
        self._defaults = defaults or {}

    def default_for(self, scalar: str) -> ScalarMapping | None:
        key = (scalar, self.dialect)
        return self._defaults.get(key) or DEFAULT_SCALAR_TYPES.get(key)

    def resolve_scalar(
        self,
        scalar: str,
        *,
        owner: str | None = None,
        field: str | None = None,
    ) -> ResolvedType:
        """Resolve a scalar, honoring field and scalar overrides."""
        path = f"{owner}.{field}" if owner and field else None
        default = self.default_for(scalar)
        default_sql = default.sql_type if default else _FALLBACK_SQL_TYPE

        if path is not None and path in self._field_overrides:
            target, sql = self._field_overrides[path]
            return ResolvedType(target, sql or default_sql, TypeOrigin.FIELD_OVERRIDE)
        if scalar in self._type_mappings:
            target, sql = self._type_mappings[scalar]
            return ResolvedType(target, sql or default_sql, TypeOrigin.SCALAR_OVERRIDE)
        if default is not None:
            return ResolvedType(default.target_type, default.sql_type, TypeOrigin.DEFAULT)
        raise UnmappedScalarError(scalar, field_path=path)

    def resolve_enum(
        self,
        enum: EnumType,
        *,
        owner: str | None = None,
        field: str | None = None,
    ) -> ResolvedType:
        """Resolve an enum to its dialect storage, unless overridden."""
        path = f"{owner}.{field}" if owner and field else None
        storage = ENUM_STORAGE[self.dialect]
        if storage is EnumStorage.NATIVE_TYPE:
            native_sql = to_snake_case(enum.name)
        elif storage is EnumStorage.INLINE_ENUM:
            native_sql = "ENUM({})".format(", ".join(f"'{v}'" for v in enum.values))
        else:
            native_sql = _FALLBACK_SQL_TYPE

        if path is not None and path in self._field_overrides:
            target, sql = self._field_overrides[path]
            return ResolvedType(target, sql or _FALLBACK_SQL_TYPE, TypeOrigin.FIELD_OVERRIDE)
        if enum.name in self._type_mappings:
            target, sql = self._type_mappings[enum.name]
            return ResolvedType(target, sql or _FALLBACK_SQL_TYPE, TypeOrigin.SCALAR_OVERRIDE)
        return ResolvedType(
            enum.name,
            native_sql,
            TypeOrigin.ENUM,
            enum_name=enum.name,
            enum_storage=storage,
        )

    def resolve_field(
        self, owner: ObjectType, field: FieldDef, graph: SchemaGraph
    ) -> ResolvedType | None:
        """Resolve a field to a column type.

        Returns None for object, interface, and union references, which are
        navigation fields rather than columns.
        """
        type_def = graph.get(field.type_name)
        if field.type_name in BUILTIN_SCALARS or isinstance(type_def, ScalarType):
            resolved = self.resolve_scalar(field.type_name, owner=owner.name, field=field.name)
        elif isinstance(type_def, EnumType):
            resolved = self.resolve_enum(type_def, owner=owner.name, field=field.name)
        else:
            return None

        if not field.is_list or resolved.origin is TypeOrigin.FIELD_OVERRIDE:
            return resolved
        return self._as_list(resolved)

    def _as_list(self, resolved: ResolvedType) -> ResolvedType:
        fallback = LIST_FALLBACK.get(self.dialect)
        if fallback is None:
            return ResolvedType(
                f"Vec<{resolved.target_type}>",
                f"{resolved.sql_type}[]",
                resolved.origin,
                enum_name=resolved.enum_name,
                enum_storage=resolved.enum_storage,
                is_list=True,
            )
        # Serialized storage; an explicit type mapping still names the element type.
        target = fallback.target_type
        if resolved.origin is TypeOrigin.SCALAR_OVERRIDE:
            target = f"Vec<{resolved.target_type}>"
        return ResolvedType(target, fallback.sql_type, resolved.origin, is_list=True)
