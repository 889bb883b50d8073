"""Shared service-layer helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gqlorm.codegen.pipeline import Pipeline
from gqlorm.services.telemetry import trace_span

if TYPE_CHECKING:
    from gqlorm.codegen.plan import GenerationPlan
    from gqlorm.config.models import CodegenConfig, SourceConfig
    from gqlorm.infrastructure.project import Project


def build_plan_traced(
    project: Project,
    codegen: CodegenConfig,
    source: SourceConfig | None = None,
) -> tuple[Pipeline, GenerationPlan]:
    """Validate config, load the schema, and run every stage up to emission.

    Each stage runs inside its own telemetry span. Raises
    :class:`~gqlorm.domain.errors.GenerationError` subclasses.
    """
    pipeline = Pipeline(codegen, project_root=project.root, registry=project.emitters)

    with trace_span("build_schema") as span:
        graph = project.load_schema(source)
        entities = pipeline.select_entities(graph)
        if span:
            span.annotate("types", len(graph.types))
            span.annotate("entities", len(entities))

    with trace_span("resolve"):
        columns = pipeline.resolve(graph, entities)

    with trace_span("infer") as span:
        relationships = pipeline.infer(graph, entities)
        if span:
            span.annotate("edges", len(relationships.belongs_to()))

    with trace_span("order") as span:
        order = pipeline.order(entities, relationships)
        if span:
            span.annotate("cyclic", sorted(order.cyclic))

    plan = pipeline.assemble(graph, entities, columns, relationships, order)
    return pipeline, plan
