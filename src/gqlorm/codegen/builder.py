"""Schema Model Builder: introspection results and SDL into one SchemaGraph.

Both entry points collect raw definitions first and share a single
validation pass, so the two sources fail the same way on the same defects.
No partial graph is ever returned: any defect raises :class:`SchemaError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, cast

from graphql import GraphQLSyntaxError, parse
from graphql.language import (
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    FieldDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    TypeNode,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
)

from gqlorm.domain.errors import SchemaError
from gqlorm.domain.schema import (
    BUILTIN_SCALARS,
    DEFAULT_ROOT_TYPES,
    EnumType,
    FieldDef,
    InterfaceType,
    ObjectType,
    ScalarType,
    SchemaGraph,
    TypeDef,
    UnionType,
)
from gqlorm.domain.types import TypeKind

logger = logging.getLogger(__name__)

_INPUT_OBJECT = "INPUT_OBJECT"
_WRAPPER_KINDS = frozenset({"NON_NULL", "LIST"})
_KIND_NAMES = frozenset(k.value for k in TypeKind) | {_INPUT_OBJECT}


@dataclass
class _Collected:
    """Raw definitions gathered from either source, prior to validation."""

    types: dict[str, TypeDef] = field(default_factory=dict)
    inputs: set[str] = field(default_factory=set)
    roots: frozenset[str] = DEFAULT_ROOT_TYPES
    # (owner, field, type name, kind claimed by the reference); introspection only
    claimed_kinds: list[tuple[str, str, str, str]] = field(default_factory=list)

    def add(self, type_def: TypeDef) -> None:
        if type_def.name in self.types or type_def.name in self.inputs:
            msg = f"Type {type_def.name!r} is defined more than once"
            raise SchemaError(msg, subject=type_def.name)
        self.types[type_def.name] = type_def


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build_schema_graph(
    *,
    introspection: Any | None = None,
    document: DocumentNode | None = None,
) -> SchemaGraph:
    """Build a graph from exactly one source form."""
    if (introspection is None) == (document is None):
        msg = "Exactly one schema source (introspection result or SDL document) is required"
        raise SchemaError(msg)
    if document is None:
        return build_from_introspection(introspection)
    return build_from_document(document)


def parse_sdl(text: str, *, source_name: str = "schema.graphql") -> DocumentNode:
    """Parse SDL text, converting syntax errors to :class:`SchemaError`."""
    try:
        return parse(text)
    except GraphQLSyntaxError as exc:
        msg = f"Invalid SDL in {source_name}: {exc.message}"
        location = exc.locations[0] if exc.locations else None
        subject = f"{source_name}:{location.line}:{location.column}" if location else source_name
        raise SchemaError(msg, subject=subject) from exc


def build_from_introspection(value: Any) -> SchemaGraph:
    """Normalize an introspection response (or its ``__schema`` object)."""
    schema = _unwrap_introspection(value)
    raw_types = schema.get("types")
    if not isinstance(raw_types, list):
        msg = "Introspection result has no 'types' list"
        raise SchemaError(msg)

    collected = _Collected(roots=_introspection_roots(schema))
    declared: dict[str, str] = {}
    for raw in raw_types:
        name, kind = _named_kind(raw)
        if name.startswith("__"):
            continue
        declared[name] = kind

    for raw in raw_types:
        name, kind = _named_kind(raw)
        if name.startswith("__") or name in BUILTIN_SCALARS:
            continue
        description = raw.get("description")
        if kind == _INPUT_OBJECT:
            collected.inputs.add(name)
        elif kind == TypeKind.OBJECT:
            collected.add(
                ObjectType(
                    name=name,
                    fields=_introspection_fields(name, raw.get("fields"), collected),
                    interfaces=tuple(_ref_name(i) for i in raw.get("interfaces") or ()),
                    description=description,
                )
            )
        elif kind == TypeKind.INTERFACE:
            collected.add(
                InterfaceType(
                    name=name,
                    fields=_introspection_fields(name, raw.get("fields"), collected),
                    description=description,
                )
            )
        elif kind == TypeKind.UNION:
            members = tuple(_ref_name(t) for t in raw.get("possibleTypes") or ())
            collected.add(UnionType(name=name, members=members, description=description))
        elif kind == TypeKind.ENUM:
            values = tuple(v["name"] for v in raw.get("enumValues") or ())
            collected.add(EnumType(name=name, values=values, description=description))
        else:
            collected.add(ScalarType(name=name, description=description))

    for owner, field_name, type_name, claimed in collected.claimed_kinds:
        actual = declared.get(type_name)
        if actual is not None and actual != claimed:
            msg = (
                f"Field {owner}.{field_name} references {type_name!r} as {claimed}, "
                f"but it is declared as {actual}"
            )
            raise SchemaError(msg, subject=f"{owner}.{field_name}")

    return _finish(collected)


def build_from_document(document: DocumentNode) -> SchemaGraph:
    """Normalize a parsed SDL document. Directives are ignored."""
    collected = _Collected()
    extensions: list[Any] = []

    for definition in document.definitions:
        if isinstance(definition, ObjectTypeDefinitionNode):
            collected.add(
                ObjectType(
                    name=definition.name.value,
                    fields=_ast_fields(definition.fields),
                    interfaces=tuple(i.name.value for i in definition.interfaces or ()),
                    description=_ast_description(definition),
                )
            )
        elif isinstance(definition, InterfaceTypeDefinitionNode):
            collected.add(
                InterfaceType(
                    name=definition.name.value,
                    fields=_ast_fields(definition.fields),
                    description=_ast_description(definition),
                )
            )
        elif isinstance(definition, UnionTypeDefinitionNode):
            collected.add(
                UnionType(
                    name=definition.name.value,
                    members=tuple(t.name.value for t in definition.types or ()),
                    description=_ast_description(definition),
                )
            )
        elif isinstance(definition, EnumTypeDefinitionNode):
            collected.add(
                EnumType(
                    name=definition.name.value,
                    values=tuple(v.name.value for v in definition.values or ()),
                    description=_ast_description(definition),
                )
            )
        elif isinstance(definition, ScalarTypeDefinitionNode):
            name = definition.name.value
            if name in BUILTIN_SCALARS:
                continue
            collected.add(ScalarType(name=name, description=_ast_description(definition)))
        elif isinstance(definition, InputObjectTypeDefinitionNode):
            collected.inputs.add(definition.name.value)
        elif isinstance(definition, SchemaDefinitionNode):
            collected.roots = frozenset(op.type.name.value for op in definition.operation_types)
        elif isinstance(
            definition,
            (
                ObjectTypeExtensionNode,
                InterfaceTypeExtensionNode,
                UnionTypeExtensionNode,
                EnumTypeExtensionNode,
            ),
        ):
            extensions.append(definition)
        elif isinstance(definition, InputObjectTypeExtensionNode):
            continue
        else:
            logger.debug("Ignoring SDL definition %s", definition.kind)

    for extension in extensions:
        _apply_extension(collected, extension)

    return _finish(collected)


# ---------------------------------------------------------------------------
# Introspection helpers
# ---------------------------------------------------------------------------


def _unwrap_introspection(value: Any) -> dict[str, Any]:
    if not isinstance(value, dict):
        msg = "Introspection result must be a JSON object"
        raise SchemaError(msg)
    if value.get("errors"):
        messages = "; ".join(str(e.get("message", e)) for e in value["errors"])
        msg = f"Introspection response reported errors: {messages}"
        raise SchemaError(msg)
    if "data" in value:
        value = value["data"] or {}
    if "__schema" in value:
        value = value["__schema"]
    if not isinstance(value, dict):
        msg = "Introspection result has no '__schema' object"
        raise SchemaError(msg)
    return value


def _introspection_roots(schema: dict[str, Any]) -> frozenset[str]:
    roots = {
        ref["name"]
        for key in ("queryType", "mutationType", "subscriptionType")
        if isinstance(ref := schema.get(key), dict) and ref.get("name")
    }
    return frozenset(roots) if roots else DEFAULT_ROOT_TYPES


def _named_kind(raw: Any) -> tuple[str, str]:
    if not isinstance(raw, dict) or not raw.get("name"):
        msg = f"Introspection type entry without a name: {raw!r}"
        raise SchemaError(msg)
    name = raw["name"]
    kind = raw.get("kind")
    if kind not in _KIND_NAMES:
        msg = f"Type {name!r} has unsupported kind {kind!r}"
        raise SchemaError(msg, subject=name)
    return name, kind


def _ref_name(ref: Any) -> str:
    if not isinstance(ref, dict) or not ref.get("name"):
        msg = f"Malformed type reference: {ref!r}"
        raise SchemaError(msg)
    return ref["name"]


def _introspection_fields(
    owner: str, raw_fields: Any, collected: _Collected
) -> tuple[FieldDef, ...]:
    fields: list[FieldDef] = []
    for raw in raw_fields or ():
        name = raw.get("name")
        type_ref = raw.get("type")
        if not name or not isinstance(type_ref, dict):
            msg = f"Malformed field on {owner}: {raw!r}"
            raise SchemaError(msg, subject=owner)
        type_name, kind, nullable, is_list = _decode_type_ref(owner, name, type_ref)
        collected.claimed_kinds.append((owner, name, type_name, kind))
        fields.append(
            FieldDef(
                name=name,
                type_name=type_name,
                nullable=nullable,
                is_list=is_list,
                description=raw.get("description"),
            )
        )
    return tuple(fields)


def _decode_type_ref(
    owner: str, field_name: str, ref: dict[str, Any]
) -> tuple[str, str, bool, bool]:
    """Walk the NON_NULL/LIST wrapper chain down to the named type."""
    nullable = True
    is_list = False
    depth = 0
    current: Any = ref
    while isinstance(current, dict) and current.get("kind") in _WRAPPER_KINDS:
        if current["kind"] == "NON_NULL":
            if depth == 0:
                nullable = False
        else:
            is_list = True
        depth += 1
        current = current.get("ofType")
    if not isinstance(current, dict) or not current.get("name"):
        msg = f"Field {owner}.{field_name} has an unterminated type reference"
        raise SchemaError(msg, subject=f"{owner}.{field_name}")
    kind = current.get("kind")
    if kind not in _KIND_NAMES:
        msg = f"Field {owner}.{field_name} references unknown kind {kind!r}"
        raise SchemaError(msg, subject=f"{owner}.{field_name}")
    return current["name"], kind, nullable, is_list


# ---------------------------------------------------------------------------
# SDL helpers
# ---------------------------------------------------------------------------


def _ast_description(node: Any) -> str | None:
    description = getattr(node, "description", None)
    return description.value if description is not None else None


def _ast_type(node: TypeNode) -> tuple[str, bool, bool]:
    nullable = True
    is_list = False
    if isinstance(node, NonNullTypeNode):
        nullable = False
        node = node.type
    if isinstance(node, ListTypeNode):
        is_list = True
        node = node.type
        while not isinstance(node, NamedTypeNode):
            node = node.type  # type: ignore[attr-defined]
    return cast(NamedTypeNode, node).name.value, nullable, is_list


def _ast_fields(nodes: tuple[FieldDefinitionNode, ...] | None) -> tuple[FieldDef, ...]:
    fields: list[FieldDef] = []
    for node in nodes or ():
        type_name, nullable, is_list = _ast_type(node.type)
        fields.append(
            FieldDef(
                name=node.name.value,
                type_name=type_name,
                nullable=nullable,
                is_list=is_list,
                description=_ast_description(node),
            )
        )
    return tuple(fields)


def _apply_extension(collected: _Collected, node: Any) -> None:
    name = node.name.value
    existing = collected.types.get(name)
    if existing is None:
        msg = f"Cannot extend undefined type {name!r}"
        raise SchemaError(msg, subject=name)

    if isinstance(node, ObjectTypeExtensionNode) and isinstance(existing, ObjectType):
        extended: TypeDef = replace(
            existing,
            fields=existing.fields + _ast_fields(node.fields),
            interfaces=existing.interfaces + tuple(i.name.value for i in node.interfaces or ()),
        )
    elif isinstance(node, InterfaceTypeExtensionNode) and isinstance(existing, InterfaceType):
        extended = replace(existing, fields=existing.fields + _ast_fields(node.fields))
    elif isinstance(node, UnionTypeExtensionNode) and isinstance(existing, UnionType):
        extended = replace(
            existing, members=existing.members + tuple(t.name.value for t in node.types or ())
        )
    elif isinstance(node, EnumTypeExtensionNode) and isinstance(existing, EnumType):
        extended = replace(
            existing, values=existing.values + tuple(v.name.value for v in node.values or ())
        )
    else:
        msg = f"Extension of {name!r} does not match its {existing.kind} definition"
        raise SchemaError(msg, subject=name)
    collected.types[name] = extended


# ---------------------------------------------------------------------------
# Shared validation
# ---------------------------------------------------------------------------


def _finish(collected: _Collected) -> SchemaGraph:
    types = collected.types
    for type_def in types.values():
        if isinstance(type_def, (ObjectType, InterfaceType)):
            _validate_fields(type_def, types, collected.inputs)
        if isinstance(type_def, ObjectType):
            for iface in type_def.interfaces:
                if not isinstance(types.get(iface), InterfaceType):
                    msg = f"Type {type_def.name} implements {iface!r}, which is not an interface"
                    raise SchemaError(msg, subject=type_def.name)
        if isinstance(type_def, UnionType):
            for member in type_def.members:
                if not isinstance(types.get(member), ObjectType):
                    msg = f"Union {type_def.name} member {member!r} is not an object type"
                    raise SchemaError(msg, subject=type_def.name)

    graph = SchemaGraph(types=dict(types), root_types=collected.roots)
    logger.debug(
        "Built schema graph: %d objects, %d enums, %d scalars",
        graph.count(TypeKind.OBJECT),
        graph.count(TypeKind.ENUM),
        graph.count(TypeKind.SCALAR),
    )
    return graph


def _validate_fields(
    owner: ObjectType | InterfaceType, types: dict[str, TypeDef], inputs: set[str]
) -> None:
    seen: set[str] = set()
    for fd in owner.fields:
        path = f"{owner.name}.{fd.name}"
        if fd.name in seen:
            msg = f"Field {path} is declared more than once"
            raise SchemaError(msg, subject=path)
        seen.add(fd.name)
        if fd.type_name in BUILTIN_SCALARS or fd.type_name in types:
            continue
        if fd.type_name in inputs:
            msg = f"Field {path} references input type {fd.type_name!r}"
        else:
            msg = f"Field {path} references undefined type {fd.type_name!r}"
        raise SchemaError(msg, subject=path)
