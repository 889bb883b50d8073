"""Code generation core: schema graph in, generated files out.

No I/O happens here beyond loading packaged templates; acquiring the schema
and writing files are the infrastructure layer's job.
"""

from __future__ import annotations

from gqlorm.codegen.builder import (
    build_from_document,
    build_from_introspection,
    build_schema_graph,
    parse_sdl,
)
from gqlorm.codegen.ordering import DependencyOrder, order_entities
from gqlorm.codegen.pipeline import Pipeline, generate
from gqlorm.codegen.relationships import RelationshipEdge, RelationshipSet, infer_relationships
from gqlorm.codegen.resolver import ResolvedType, TypeResolver

__all__ = [
    "DependencyOrder",
    "Pipeline",
    "RelationshipEdge",
    "RelationshipSet",
    "ResolvedType",
    "TypeResolver",
    "build_from_document",
    "build_from_introspection",
    "build_schema_graph",
    "generate",
    "infer_relationships",
    "order_entities",
    "parse_sdl",
]
