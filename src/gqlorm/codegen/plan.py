"""The generation plan shared by every emitter.

A plan is the fully resolved, fully ordered description of what to emit:
tables in creation order with their columns, foreign keys, relationship
accessors and the enums they use. Emitters only render it; they never
consult the schema graph or configuration directly.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace

from gqlorm.codegen.ordering import DependencyOrder
from gqlorm.codegen.relationships import RelationshipEdge, RelationshipSet, foreign_key_noun
from gqlorm.codegen.resolver import ResolvedType, TypeResolver
from gqlorm.codegen.typemap import EnumStorage
from gqlorm.domain.naming import (
    apply_convention,
    pluralize,
    rust_ident,
    table_name,
    to_pascal_case,
    to_snake_case,
)
from gqlorm.domain.errors import SchemaError
from gqlorm.domain.schema import EnumType, FieldDef, ObjectType, SchemaGraph
from gqlorm.domain.types import Cardinality, DatabaseType, NamingConvention, TypeOrigin

PRIMARY_KEY_FIELD = "id"

type ResolvedColumns = Mapping[str, Sequence[tuple[FieldDef, ResolvedType]]]


@dataclass(frozen=True)
class ColumnPlan:
    field_name: str
    column: str
    rust_name: str
    resolved: ResolvedType
    nullable: bool = True
    primary_key: bool = False
    synthetic: bool = False
    foreign_key: bool = False

    @property
    def sql_type(self) -> str:
        return self.resolved.sql_type

    @property
    def rust_type(self) -> str:
        """Rust field type, wrapped in ``Option`` when nullable."""
        if self.nullable:
            return f"Option<{self.resolved.target_type}>"
        return self.resolved.target_type


@dataclass(frozen=True)
class ForeignKeyPlan:
    """A foreign key constraint owned by ``owner_table``."""

    owner_entity: str
    owner_table: str
    column: str
    target_entity: str
    target_table: str
    target_column: str
    nullable: bool = True
    deferred: bool = False

    @property
    def constraint_name(self) -> str:
        return f"fk_{self.owner_table}_{self.column}".lower()

    @property
    def index_name(self) -> str:
        return f"idx_{self.owner_table}_{self.column}".lower()


@dataclass(frozen=True)
class RelationPlan:
    """One relationship accessor seen from the owning entity.

    ``fk_column``/``fk_rust`` always name the foreign key column on the
    belongs-to side, whichever side this accessor sits on.
    """

    accessor: str
    cardinality: Cardinality
    target_entity: str
    target_table: str
    target_module: str
    fk_column: str
    fk_rust: str
    fk_nullable: bool
    self_referential: bool = False
    unique_pair: bool = True

    @property
    def variant(self) -> str:
        return to_pascal_case(self.accessor.removeprefix("r#"))

    @property
    def belongs_to(self) -> bool:
        return self.cardinality is Cardinality.BELONGS_TO


@dataclass(frozen=True)
class EntityPlan:
    name: str
    table: str
    module: str
    sequence: int
    columns: tuple[ColumnPlan, ...]
    foreign_keys: tuple[ForeignKeyPlan, ...] = ()
    relations: tuple[RelationPlan, ...] = ()
    description: str | None = None

    @property
    def primary_key(self) -> ColumnPlan:
        return next(c for c in self.columns if c.primary_key)

    @property
    def insertable_columns(self) -> tuple[ColumnPlan, ...]:
        """Columns set on insert: everything except a generated key."""
        return tuple(c for c in self.columns if not c.synthetic)

    def column_for(self, field_name: str) -> ColumnPlan | None:
        return next((c for c in self.columns if c.field_name == field_name), None)

    def enum_names(self) -> list[str]:
        seen: list[str] = []
        for col in self.columns:
            name = col.resolved.enum_name
            if name and name not in seen:
                seen.append(name)
        return seen


@dataclass(frozen=True)
class EnumPlan:
    name: str
    sql_name: str
    storage: EnumStorage
    variants: tuple[tuple[str, str], ...]
    owner_table: str | None = None
    description: str | None = None

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(value for _, value in self.variants)


@dataclass(frozen=True)
class GenerationPlan:
    orm: str
    dialect: DatabaseType
    table_naming: NamingConvention
    entities: tuple[EntityPlan, ...]
    enums: tuple[EnumPlan, ...] = ()
    generate_migrations: bool = True
    generate_entities: bool = True
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def entity(self, name: str) -> EntityPlan:
        return next(e for e in self.entities if e.name == name)

    @property
    def foreign_keys(self) -> tuple[ForeignKeyPlan, ...]:
        return tuple(fk for e in self.entities for fk in e.foreign_keys)

    @property
    def deferred(self) -> tuple[ForeignKeyPlan, ...]:
        return tuple(fk for fk in self.foreign_keys if fk.deferred)


def resolve_columns(
    entities: Sequence[ObjectType], graph: SchemaGraph, resolver: TypeResolver
) -> dict[str, list[tuple[FieldDef, ResolvedType]]]:
    """Resolve every column of every entity up front.

    Raises the first :class:`~gqlorm.domain.errors.UnmappedScalarError`
    before anything is emitted. Navigation fields are dropped.
    """
    resolved: dict[str, list[tuple[FieldDef, ResolvedType]]] = {}
    for entity in entities:
        columns: list[tuple[FieldDef, ResolvedType]] = []
        for fd in entity.fields:
            result = resolver.resolve_field(entity, fd, graph)
            if result is not None:
                columns.append((fd, result))
        resolved[entity.name] = columns
    return resolved


def _variant_name(value: str) -> str:
    variant = to_pascal_case(value) or value
    if variant[:1].isdigit():
        variant = f"V{variant}"
    return variant


class _PlanBuilder:
    def __init__(
        self,
        graph: SchemaGraph,
        entities: Sequence[ObjectType],
        columns: ResolvedColumns,
        relationships: RelationshipSet,
        order: DependencyOrder,
        *,
        dialect: DatabaseType,
        table_naming: NamingConvention,
        resolver: TypeResolver,
    ) -> None:
        self.graph = graph
        self.entities = {e.name: e for e in entities}
        self.columns = columns
        self.relationships = relationships
        self.order = order
        self.dialect = dialect
        self.naming = table_naming
        self.resolver = resolver
        self.tables = {name: table_name(name, table_naming) for name in self.entities}
        self.pk_columns = {
            name: apply_convention(PRIMARY_KEY_FIELD, table_naming) for name in self.entities
        }
        belongs = relationships.belongs_to()
        self.pair_counts = Counter((e.from_entity, e.to_entity) for e in belongs)

    def column_name(self, field_name: str) -> str:
        return apply_convention(field_name, self.naming)

    def build_columns(self, entity: ObjectType) -> tuple[ColumnPlan, ...]:
        plans: list[ColumnPlan] = []
        resolved = self.columns.get(entity.name, ())
        if not any(fd.name == PRIMARY_KEY_FIELD for fd, _ in resolved):
            plans.append(
                ColumnPlan(
                    field_name=PRIMARY_KEY_FIELD,
                    column=self.pk_columns[entity.name],
                    rust_name=PRIMARY_KEY_FIELD,
                    resolved=self.resolver.resolve_scalar("ID"),
                    nullable=False,
                    primary_key=True,
                    synthetic=True,
                )
            )
        for fd, rtype in resolved:
            is_pk = fd.name == PRIMARY_KEY_FIELD
            plans.append(
                ColumnPlan(
                    field_name=fd.name,
                    column=self.column_name(fd.name),
                    rust_name=rust_ident(fd.name),
                    resolved=rtype,
                    nullable=fd.nullable and not is_pk,
                    primary_key=is_pk,
                    foreign_key=self.relationships.foreign_key(entity.name, fd.name) is not None,
                )
            )
        seen: dict[str, str] = {}
        for col in plans:
            if col.column in seen:
                msg = (
                    f"Fields {entity.name}.{seen[col.column]} and {entity.name}.{col.field_name} "
                    f"both map to column {col.column!r}"
                )
                raise SchemaError(msg, subject=f"{entity.name}.{col.field_name}")
            seen[col.column] = col.field_name
        return tuple(plans)

    def build_foreign_keys(
        self, entity: ObjectType, columns: tuple[ColumnPlan, ...]
    ) -> tuple[ForeignKeyPlan, ...]:
        fks: list[ForeignKeyPlan] = []
        for edge in self.relationships.outgoing(entity.name, Cardinality.BELONGS_TO):
            column = next(c for c in columns if c.field_name == edge.foreign_key_field)
            fks.append(
                ForeignKeyPlan(
                    owner_entity=entity.name,
                    owner_table=self.tables[entity.name],
                    column=column.column,
                    target_entity=edge.to_entity,
                    target_table=self.tables[edge.to_entity],
                    target_column=self.pk_columns[edge.to_entity],
                    nullable=column.nullable,
                    deferred=self.order.is_deferred(edge),
                )
            )
        return tuple(fks)

    def _fk_field(self, edge: RelationshipEdge) -> FieldDef:
        owner = edge.to_entity if edge.cardinality is Cardinality.HAS_MANY else edge.from_entity
        fd = self.entities[owner].field(edge.foreign_key_field)
        if fd is None:
            msg = f"{owner}.{edge.foreign_key_field} is not a field"
            raise SchemaError(msg, subject=f"{owner}.{edge.foreign_key_field}")
        return fd

    def build_relations(self, entity: ObjectType) -> tuple[RelationPlan, ...]:
        relations: list[RelationPlan] = []
        for edge in self.relationships.edges:
            if edge.from_entity != entity.name:
                continue
            noun = foreign_key_noun(edge.foreign_key_field) or edge.to_entity
            fk = self._fk_field(edge)
            if edge.cardinality is Cardinality.BELONGS_TO:
                pair = (edge.from_entity, edge.to_entity)
                accessor = rust_ident(noun)
            else:
                pair = (edge.to_entity, edge.from_entity)
                plural = pluralize(to_snake_case(edge.to_entity))
                accessor = (
                    rust_ident(f"{to_snake_case(noun)}_{plural}")
                    if self.pair_counts[pair] > 1
                    else rust_ident(plural)
                )
            relations.append(
                RelationPlan(
                    accessor=accessor,
                    cardinality=edge.cardinality,
                    target_entity=edge.to_entity,
                    target_table=self.tables[edge.to_entity],
                    target_module=rust_ident(edge.to_entity),
                    fk_column=self.column_name(fk.name),
                    fk_rust=rust_ident(fk.name),
                    fk_nullable=fk.nullable,
                    self_referential=edge.is_self_referential,
                    unique_pair=self.pair_counts[pair] == 1,
                )
            )
        return tuple(_dedupe_accessors(relations))

    def build_enums(self, plans: Sequence[EntityPlan]) -> tuple[EnumPlan, ...]:
        owners: dict[str, str] = {}
        for plan in plans:
            for name in plan.enum_names():
                owners.setdefault(name, plan.table)
        enums: list[EnumPlan] = []
        for enum in self.graph.enums():
            if enum.name not in owners:
                continue
            enums.append(self._enum_plan(enum, owners[enum.name]))
        return tuple(enums)

    def _enum_plan(self, enum: EnumType, owner_table: str) -> EnumPlan:
        resolved = self.resolver.resolve_enum(enum)
        return EnumPlan(
            name=enum.name,
            sql_name=to_snake_case(enum.name),
            storage=resolved.enum_storage or EnumStorage.TEXT,
            variants=tuple((_variant_name(v), v) for v in enum.values),
            owner_table=owner_table,
            description=enum.description,
        )


def _dedupe_accessors(relations: list[RelationPlan]) -> list[RelationPlan]:
    counts = Counter(r.accessor for r in relations)
    if all(n == 1 for n in counts.values()):
        return relations
    out: list[RelationPlan] = []
    for rel in relations:
        if counts[rel.accessor] > 1:
            suffix = "parent" if rel.belongs_to else "children"
            rel = replace(rel, accessor=f"{rel.accessor.removeprefix('r#')}_{suffix}")
        out.append(rel)
    return out


def build_plan(
    graph: SchemaGraph,
    entities: Sequence[ObjectType],
    columns: ResolvedColumns,
    relationships: RelationshipSet,
    order: DependencyOrder,
    *,
    orm: str,
    resolver: TypeResolver,
    table_naming: NamingConvention = NamingConvention.SNAKE_CASE,
    generate_migrations: bool = True,
    generate_entities: bool = True,
    warnings: Sequence[str] = (),
) -> GenerationPlan:
    """Assemble a :class:`GenerationPlan` with entities in creation order."""
    builder = _PlanBuilder(
        graph,
        entities,
        columns,
        relationships,
        order,
        dialect=resolver.dialect,
        table_naming=table_naming,
        resolver=resolver,
    )
    by_name = {e.name: e for e in entities}
    plans: list[EntityPlan] = []
    for sequence, name in enumerate(order.order, start=1):
        entity = by_name[name]
        cols = builder.build_columns(entity)
        plans.append(
            EntityPlan(
                name=entity.name,
                table=builder.tables[entity.name],
                module=rust_ident(entity.name),
                sequence=sequence,
                columns=cols,
                foreign_keys=builder.build_foreign_keys(entity, cols),
                relations=builder.build_relations(entity),
                description=entity.description,
            )
        )
    return GenerationPlan(
        orm=orm,
        dialect=resolver.dialect,
        table_naming=table_naming,
        entities=tuple(plans),
        enums=builder.build_enums(plans),
        generate_migrations=generate_migrations,
        generate_entities=generate_entities,
        warnings=tuple(warnings),
    )


def is_enum_column(column: ColumnPlan) -> bool:
    return column.resolved.origin is TypeOrigin.ENUM and column.resolved.enum_name is not None
