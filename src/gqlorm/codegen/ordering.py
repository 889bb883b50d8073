"""Dependency Orderer: creation order for tables with foreign keys.

Nodes are entity declaration indices and an edge ``B -> A`` means ``A``
belongs to ``B`` (``B`` must exist first). Strongly connected components are
collapsed with :func:`networkx.condensation` and the resulting DAG is sorted
topologically, ties broken by the lowest declaration index. Members of a
cycle keep declaration order; the foreign keys inside a cycle are reported
as deferred so emitters can add them after every table exists.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import networkx as nx

from gqlorm.codegen.relationships import RelationshipEdge
from gqlorm.domain.types import Cardinality

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyOrder:
    """Entity names in creation order, plus cycle information."""

    order: tuple[str, ...]
    cyclic: frozenset[str] = frozenset()
    deferred_edges: tuple[RelationshipEdge, ...] = ()

    def position(self, entity: str) -> int:
        return self.order.index(entity)

    def is_deferred(self, edge: RelationshipEdge) -> bool:
        return edge in self.deferred_edges


def order_entities(
    entities: Sequence[str],
    edges: Sequence[RelationshipEdge],
) -> DependencyOrder:
    """Order *entities* (names, in declaration order) so referenced tables come first.

    Never fails: cycles are tolerated and surface as ``deferred_edges``.
    """
    index = {name: i for i, name in enumerate(entities)}
    graph = nx.DiGraph()
    graph.add_nodes_from(range(len(entities)))

    belongs_to = [
        e
        for e in edges
        if e.cardinality is Cardinality.BELONGS_TO
        and e.from_entity in index
        and e.to_entity in index
    ]
    for edge in belongs_to:
        graph.add_edge(index[edge.to_entity], index[edge.from_entity])

    components = list(nx.strongly_connected_components(graph))
    dag = nx.condensation(graph, scc=components)

    order: list[int] = []
    component_of: dict[int, int] = {}
    cyclic_nodes: set[int] = set()
    for comp in nx.lexicographical_topological_sort(
        dag, key=lambda c: min(dag.nodes[c]["members"])
    ):
        members = sorted(dag.nodes[comp]["members"])
        order.extend(members)
        for node in members:
            component_of[node] = comp
        if len(members) > 1 or graph.has_edge(members[0], members[0]):
            cyclic_nodes.update(members)

    deferred = tuple(
        e
        for e in belongs_to
        if index[e.from_entity] in cyclic_nodes
        and component_of[index[e.from_entity]] == component_of[index[e.to_entity]]
    )
    if deferred:
        logger.debug(
            "Deferring %d foreign key(s) inside cycles: %s",
            len(deferred),
            ", ".join(f"{e.from_entity}.{e.foreign_key_field}" for e in deferred),
        )

    return DependencyOrder(
        order=tuple(entities[i] for i in order),
        cyclic=frozenset(entities[i] for i in cyclic_nodes),
        deferred_edges=deferred,
    )
