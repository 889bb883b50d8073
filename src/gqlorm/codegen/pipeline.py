"""The generation pipeline: config check, build, resolve, infer, order, emit.

Stages run in that order and each may stop the run; nothing is returned
until every stage has succeeded, so callers never see a partial file set.
Stages are exposed individually so the service layer can time them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from graphql.language import DocumentNode

from gqlorm.codegen.builder import build_schema_graph
from gqlorm.codegen.emitters import Emitter, EmitterRegistry, get_emitter
from gqlorm.codegen.ordering import DependencyOrder, order_entities
from gqlorm.codegen.plan import GenerationPlan, ResolvedColumns, build_plan, resolve_columns
from gqlorm.codegen.relationships import RelationshipSet, infer_relationships
from gqlorm.codegen.resolver import TypeResolver, split_field_path
from gqlorm.config.models import CodegenConfig
from gqlorm.domain.errors import ConfigConflictError
from gqlorm.domain.files import GeneratedFile, GenerationResult, GenerationSummary
from gqlorm.domain.schema import ObjectType, SchemaGraph

logger = logging.getLogger(__name__)


class Pipeline:
    """One generation run for a fixed configuration.

    Construction validates the configuration and raises
    :class:`ConfigConflictError` before any schema is read.
    """

    def __init__(
        self,
        config: CodegenConfig,
        *,
        emitter: Emitter | None = None,
        project_root: Path | None = None,
        registry: EmitterRegistry | None = None,
    ) -> None:
        self.config = config
        self.emitter = emitter or get_emitter(
            config.orm, project_root=project_root, registry=registry
        )
        if config.db not in self.emitter.supported_dialects:
            msg = f"ORM {self.emitter.name!r} does not support the {config.db} dialect"
            raise ConfigConflictError(msg, subject=str(config.db))
        config.check_type_filters()
        self.resolver = TypeResolver(
            config.db,
            type_mappings=config.type_mappings,
            field_overrides=config.field_overrides,
            defaults=self.emitter.type_defaults,
        )
        self.warnings: list[str] = []

    # --- stages ---

    def select_entities(self, graph: SchemaGraph) -> list[ObjectType]:
        """Object types to persist, after include/exclude filtering.

        This is the first stage of every run and starts a fresh warning list.
        """
        self.warnings = []
        include = self.config.include_types
        exclude = self.config.exclude_types or frozenset()
        known = {t.name for t in graph.objects()}
        for name in sorted((include or frozenset()) | exclude):
            if name not in known:
                self.warnings.append(f"Type filter names unknown object type {name!r}")

        entities = [
            t
            for t in graph.objects()
            if (include is None or t.name in include) and t.name not in exclude
        ]
        self._check_field_overrides(graph, entities)
        logger.debug("Selected %d of %d object types", len(entities), len(known))
        return entities

    def _check_field_overrides(self, graph: SchemaGraph, entities: list[ObjectType]) -> None:
        names = {e.name for e in entities}
        for path in self.config.field_overrides:
            owner, field_name = split_field_path(path)
            type_def = graph.get(owner)
            if not isinstance(type_def, ObjectType) or type_def.field(field_name) is None:
                self.warnings.append(f"Field override {path!r} does not match any field")
            elif owner not in names:
                self.warnings.append(
                    f"Field override {path!r} targets a type that is not generated"
                )

    def resolve(self, graph: SchemaGraph, entities: list[ObjectType]) -> ResolvedColumns:
        return resolve_columns(entities, graph, self.resolver)

    def infer(self, graph: SchemaGraph, entities: list[ObjectType]) -> RelationshipSet:
        relationships = infer_relationships(graph, entities)
        self.warnings.extend(relationships.warnings)
        return relationships

    def order(self, entities: list[ObjectType], relationships: RelationshipSet) -> DependencyOrder:
        return order_entities([e.name for e in entities], relationships.edges)

    def plan(self, graph: SchemaGraph) -> GenerationPlan:
        """Run every stage up to, not including, emission."""
        entities = self.select_entities(graph)
        columns = self.resolve(graph, entities)
        relationships = self.infer(graph, entities)
        order = self.order(entities, relationships)
        return self.assemble(graph, entities, columns, relationships, order)

    def assemble(
        self,
        graph: SchemaGraph,
        entities: list[ObjectType],
        columns: ResolvedColumns,
        relationships: RelationshipSet,
        order: DependencyOrder,
    ) -> GenerationPlan:
        return build_plan(
            graph,
            entities,
            columns,
            relationships,
            order,
            orm=self.emitter.name,
            resolver=self.resolver,
            table_naming=self.config.table_naming,
            generate_migrations=self.config.generate_migrations,
            generate_entities=self.config.generate_entities,
            warnings=self.warnings,
        )

    def emit(self, plan: GenerationPlan) -> GenerationResult:
        files = tuple(self.emitter.emit(plan))
        return GenerationResult(files=files, summary=summarize(plan, files))

    def run(self, graph: SchemaGraph) -> GenerationResult:
        return self.emit(self.plan(graph))


def summarize(plan: GenerationPlan, files: tuple[GeneratedFile, ...]) -> GenerationSummary:
    migrations = {
        f.relative_path.split("/")[1]
        for f in files
        if f.relative_path.startswith("migrations/") and f.relative_path.count("/") >= 2
    }
    return GenerationSummary(
        entities=len(plan.entities),
        migrations=len(migrations),
        relationships=len(plan.foreign_keys),
        deferred_constraints=len(plan.deferred),
        files=len(files),
        warnings=plan.warnings,
    )


def generate(
    config: CodegenConfig,
    *,
    introspection: Mapping[str, Any] | None = None,
    document: DocumentNode | None = None,
    emitter: Emitter | None = None,
    project_root: Path | None = None,
    registry: EmitterRegistry | None = None,
) -> GenerationResult:
    """Generate every file for one schema source and configuration."""
    pipeline = Pipeline(config, emitter=emitter, project_root=project_root, registry=registry)
    graph = build_schema_graph(introspection=introspection, document=document)
    return pipeline.run(graph)
