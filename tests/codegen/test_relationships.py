"""Tests for foreign key and relationship inference."""

from __future__ import annotations

import pytest

from gqlorm.codegen.builder import build_schema_graph, parse_sdl
from gqlorm.codegen.relationships import (
    RelationshipSet,
    foreign_key_noun,
    infer_relationships,
)
from gqlorm.domain.schema import SchemaGraph
from gqlorm.domain.types import Cardinality


def _infer(sdl: str, *, only: set[str] | None = None) -> RelationshipSet:
    graph = build_schema_graph(document=parse_sdl(sdl))
    entities = [t for t in graph.objects() if only is None or t.name in only]
    return infer_relationships(graph, entities)


class TestForeignKeyNoun:
    @pytest.mark.parametrize(
        ("field", "noun"),
        [
            ("authorId", "author"),
            ("author_id", "author"),
            ("userID", "user"),
            ("blogPostId", "blogPost"),
            ("id", None),
            ("name", None),
            ("Id", None),
        ],
    )
    def test_noun(self, field: str, noun: str | None) -> None:
        assert foreign_key_noun(field) == noun


class TestInference:
    def test_belongs_to_and_mirrored_has_many(self, user_post_graph: SchemaGraph) -> None:
        rels = infer_relationships(user_post_graph, list(user_post_graph.objects()))
        assert len(rels.belongs_to()) == 1
        assert len(rels.has_many()) == 1
        belongs = rels.belongs_to()[0]
        mirror = rels.has_many()[0]
        assert (belongs.from_entity, belongs.to_entity, belongs.foreign_key_field) == (
            "Post",
            "User",
            "authorId",
        )
        assert (mirror.from_entity, mirror.to_entity, mirror.foreign_key_field) == (
            "User",
            "Post",
            "authorId",
        )
        assert rels.warnings == ()

    def test_author_resolves_by_field_noun(self) -> None:
        rels = _infer("type Author { id: ID! }\ntype Book { id: ID! authorId: ID! }")
        edge = rels.foreign_key("Book", "authorId")
        assert edge is not None and edge.to_entity == "Author"

    def test_non_id_typed_field_is_plain(self) -> None:
        rels = _infer("type User { id: ID! }\ntype Post { id: ID! userId: String }")
        assert rels.edges == ()
        assert rels.warnings == ()

    def test_case_insensitive_match(self) -> None:
        rels = _infer("type APIKey { id: ID! }\ntype Request { id: ID! apikeyId: ID! }")
        edge = rels.foreign_key("Request", "apikeyId")
        assert edge is not None and edge.to_entity == "APIKey"

    def test_ambiguous_match_is_plain_column(self) -> None:
        rels = _infer(
            "type APIKey { id: ID! }\ntype ApiKEY { id: ID! }\ntype Request { id: ID! apikeyId: ID }"
        )
        assert rels.foreign_key("Request", "apikeyId") is None
        assert any("matches several entities" in w for w in rels.warnings)

    def test_unknown_noun_is_plain_column(self) -> None:
        rels = _infer("type Comment { id: ID! threadId: ID! }")
        assert rels.edges == ()
        assert rels.warnings == (
            "Comment.threadId looks like a foreign key but no entity named 'Thread' "
            "exists; treated as a plain column",
        )

    def test_excluded_entity_is_never_a_target(self) -> None:
        rels = _infer(
            "type User { id: ID! }\ntype Post { id: ID! userId: ID! }",
            only={"Post"},
        )
        assert rels.edges == ()
        assert "which is not generated" in rels.warnings[0]

    def test_self_reference(self) -> None:
        rels = _infer("type Employee { id: ID! employeeId: ID }")
        edge = rels.foreign_key("Employee", "employeeId")
        assert edge is not None and edge.is_self_referential

    def test_duplicate_pair_warns(self) -> None:
        rels = _infer("type User { id: ID! }\ntype Post { id: ID! userId: ID! user_id: ID }")
        assert len(rels.outgoing("Post", Cardinality.BELONGS_TO)) == 2
        assert any("2 foreign keys to User" in w for w in rels.warnings)

    def test_lists_of_ids_are_ignored(self) -> None:
        rels = _infer("type Tag { id: ID! }\ntype Post { id: ID! tagId: [ID!] }")
        assert rels.edges == ()


class TestTargetFallbacks:
    def test_role_noun_resolves_to_user(self) -> None:
        rels = _infer("type User { id: ID! name: String! }\ntype Post { id: ID! title: String! authorId: ID! }")
        edge = rels.foreign_key("Post", "authorId")
        assert edge is not None and edge.to_entity == "User"
        assert len(rels.has_many()) == 1
        assert rels.warnings == ()

    def test_navigation_field_names_the_target(self) -> None:
        rels = _infer("type Person { id: ID! }\ntype Book { id: ID! writerId: ID! writer: Person }")
        edge = rels.foreign_key("Book", "writerId")
        assert edge is not None and edge.to_entity == "Person"

    def test_navigation_field_beats_role_noun(self) -> None:
        rels = _infer(
            "type User { id: ID! }\ntype Team { id: ID! }\ntype Project { id: ID! ownerId: ID! owner: Team! }"
        )
        edge = rels.foreign_key("Project", "ownerId")
        assert edge is not None and edge.to_entity == "Team"

    def test_exact_name_beats_navigation_field(self) -> None:
        rels = _infer(
            "type User { id: ID! }\ntype Author { id: ID! }\ntype Post { id: ID! authorId: ID! author: User }"
        )
        edge = rels.foreign_key("Post", "authorId")
        assert edge is not None and edge.to_entity == "Author"

    def test_list_navigation_field_is_ignored(self) -> None:
        rels = _infer("type Person { id: ID! }\ntype Book { id: ID! writerId: ID! writer: [Person!] }")
        assert rels.edges == ()

    def test_role_noun_without_user_entity_stays_plain(self) -> None:
        rels = _infer("type Account { id: ID! }\ntype Post { id: ID! authorId: ID! }")
        assert rels.edges == ()
        assert "no entity named 'Author'" in rels.warnings[0]

    def test_filtered_navigation_target_is_reported(self) -> None:
        rels = _infer(
            "type Person { id: ID! }\ntype Book { id: ID! writerId: ID! writer: Person }",
            only={"Book"},
        )
        assert rels.edges == ()
        assert rels.warnings == (
            "Book.writerId references 'Person', which is not generated; treated as a plain column",
        )
