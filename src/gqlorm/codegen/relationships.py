"""Relationship Inferencer: foreign keys from the ``<noun>Id`` naming convention.

A field is a foreign key candidate when its name ends in ``Id`` (any case,
``author_id`` included) and its declared type is the ``ID`` scalar. The target is
found in three steps:

1. the noun against entity names, exactly, then case-insensitively;
2. a sibling navigation field named after the noun (``author: User!`` next to
   ``authorId``) whose type is an entity;
3. person-role nouns (``author``, ``owner`` and the like) against a ``User``
   entity.

A unique match yields a ``BelongsTo`` edge plus its mirrored ``HasMany``.
Anything else stays a plain column and is reported as a warning.

Many-to-many and polymorphic associations are not inferred, and unions and
interfaces never produce edges.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from gqlorm.domain.naming import to_pascal_case
from gqlorm.domain.schema import ObjectType, SchemaGraph
from gqlorm.domain.types import Cardinality

logger = logging.getLogger(__name__)

# Nouns that name a person acting on a record rather than a type.
_PERSON_ROLES = frozenset(
    {
        "assignee",
        "author",
        "creator",
        "editor",
        "member",
        "owner",
        "recipient",
        "reporter",
        "reviewer",
        "sender",
    }
)


@dataclass(frozen=True)
class RelationshipEdge:
    """A directed relationship between two entities."""

    from_entity: str
    to_entity: str
    foreign_key_field: str
    cardinality: Cardinality

    @property
    def is_self_referential(self) -> bool:
        return self.from_entity == self.to_entity


@dataclass(frozen=True)
class RelationshipSet:
    """Every inferred edge, in field declaration order, plus warnings."""

    edges: tuple[RelationshipEdge, ...] = ()
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def belongs_to(self) -> list[RelationshipEdge]:
        return [e for e in self.edges if e.cardinality is Cardinality.BELONGS_TO]

    def has_many(self) -> list[RelationshipEdge]:
        return [e for e in self.edges if e.cardinality is Cardinality.HAS_MANY]

    def outgoing(self, entity: str, cardinality: Cardinality) -> list[RelationshipEdge]:
        return [e for e in self.edges if e.from_entity == entity and e.cardinality is cardinality]

    def foreign_key(self, entity: str, field_name: str) -> RelationshipEdge | None:
        for edge in self.edges:
            if (
                edge.cardinality is Cardinality.BELONGS_TO
                and edge.from_entity == entity
                and edge.foreign_key_field == field_name
            ):
                return edge
        return None


def foreign_key_noun(field_name: str) -> str | None:
    """Return the referenced noun of an ``<noun>Id`` field name, if any."""
    if len(field_name) <= 2 or field_name[-2:].lower() != "id":
        return None
    noun = field_name[:-2].rstrip("_")
    return noun or None


def _match_entity(noun: str, names: Sequence[str]) -> tuple[str | None, list[str]]:
    """Exact match first, then case-insensitive. Returns ``(match, ambiguous)``."""
    exact_candidates = (noun[:1].upper() + noun[1:], to_pascal_case(noun))
    for candidate in exact_candidates:
        if candidate in names:
            return candidate, []

    folded = to_pascal_case(noun).lower()
    loose = [n for n in names if n.lower() == folded or n.lower() == noun.lower()]
    if len(loose) == 1:
        return loose[0], []
    return None, loose


def _navigation_target(owner: ObjectType, noun: str, names: Sequence[str]) -> str | None:
    """Entity type of a single-valued sibling field named *noun*, if any."""
    nav = owner.field(noun)
    if nav is None:
        matches = [f for f in owner.fields if f.name.lower() == noun.lower()]
        nav = matches[0] if len(matches) == 1 else None
    if nav is None or nav.is_list or nav.type_name not in names:
        return None
    return nav.type_name


def _role_target(noun: str, names: Sequence[str]) -> str | None:
    if noun.lower() not in _PERSON_ROLES:
        return None
    target, _ = _match_entity("user", names)
    return target


def _object_type_hint(graph: SchemaGraph, owner: ObjectType, noun: str) -> str | None:
    """The object type an unmatched field points at, when it exists but is filtered out."""
    nav = owner.field(noun)
    if nav is not None and not nav.is_list and isinstance(graph.get(nav.type_name), ObjectType):
        return nav.type_name
    name = to_pascal_case(noun)
    if isinstance(graph.get(name), ObjectType):
        return name
    role = graph.get(name) is None and noun.lower() in _PERSON_ROLES
    if role and isinstance(graph.get("User"), ObjectType):
        return "User"
    return None


def infer_relationships(graph: SchemaGraph, entities: Sequence[ObjectType]) -> RelationshipSet:
    """Infer BelongsTo/HasMany edges between *entities*.

    Object types in *graph* that are not entities (filtered out by
    include/exclude configuration) are never targets.
    """
    names = [e.name for e in entities]
    edges: list[RelationshipEdge] = []
    mirrored: list[RelationshipEdge] = []
    warnings: list[str] = []

    for entity in entities:
        for fd in entity.fields:
            noun = foreign_key_noun(fd.name)
            if noun is None or fd.type_name != "ID" or fd.is_list:
                continue
            target, ambiguous = _match_entity(noun, names)
            if target is None and not ambiguous:
                target = _navigation_target(entity, noun, names)
                if target is None and graph.get(to_pascal_case(noun)) is None:
                    target = _role_target(noun, names)
            path = f"{entity.name}.{fd.name}"
            if target is None:
                skipped = _object_type_hint(graph, entity, noun)
                if ambiguous:
                    warnings.append(
                        f"{path} matches several entities ({', '.join(ambiguous)}); "
                        "treated as a plain column"
                    )
                elif skipped is not None:
                    warnings.append(
                        f"{path} references {skipped!r}, which is not "
                        "generated; treated as a plain column"
                    )
                else:
                    warnings.append(
                        f"{path} looks like a foreign key but no entity named "
                        f"{to_pascal_case(noun)!r} exists; treated as a plain column"
                    )
                continue
            edges.append(RelationshipEdge(entity.name, target, fd.name, Cardinality.BELONGS_TO))
            mirrored.append(RelationshipEdge(target, entity.name, fd.name, Cardinality.HAS_MANY))
            logger.debug("Inferred %s belongs to %s via %s", entity.name, target, fd.name)

    pairs = Counter((e.from_entity, e.to_entity) for e in edges)
    for (source, target), count in pairs.items():
        if count > 1:
            warnings.append(
                f"{source} has {count} foreign keys to {target}; "
                "relationship accessors are named after each foreign key"
            )

    return RelationshipSet(edges=tuple(edges + mirrored), warnings=tuple(warnings))
