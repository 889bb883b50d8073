"""Tests for the Sea-ORM emitter."""

from __future__ import annotations

from collections.abc import Callable

type RunCodegen = Callable[..., dict[str, str]]


class TestEntities:
    def test_files(self, blog_sdl: str, run_codegen: RunCodegen) -> None:
        files = run_codegen(blog_sdl, orm="sea_orm")
        assert sorted(p for p in files if p.startswith("src/")) == [
            "src/entities/article.rs",
            "src/entities/author.rs",
            "src/entities/category.rs",
            "src/entities/mod.rs",
            "src/entities/prelude.rs",
            "src/entities/sea_orm_active_enums.rs",
        ]
        assert "src/schema.rs" not in files

    def test_model(self, user_post_sdl: str, run_codegen: RunCodegen) -> None:
        user = run_codegen(user_post_sdl, orm="SeaOrm")["src/entities/user.rs"]
        assert (
            "#[derive(Clone, Debug, PartialEq, Eq, DeriveEntityModel)]\n"
            '#[sea_orm(table_name = "users")]\n'
            "pub struct Model {\n"
            "    #[sea_orm(primary_key)]\n"
            "    pub id: i32,\n"
            '    #[sea_orm(column_type = "Text")]\n'
            "    pub name: String,\n"
        ) in user
        assert "impl ActiveModelBehavior for ActiveModel {}\n" in user

    def test_relations(self, user_post_sdl: str, run_codegen: RunCodegen) -> None:
        files = run_codegen(user_post_sdl, orm="sea_orm")
        post = files["src/entities/post.rs"]
        user = files["src/entities/user.rs"]
        assert (
            "    #[sea_orm(\n"
            '        belongs_to = "super::user::Entity",\n'
            '        from = "Column::AuthorId",\n'
            '        to = "super::user::Column::Id"\n'
            "    )]\n"
            "    Author,\n"
        ) in post
        assert "impl Related<super::user::Entity> for Entity {" in post
        assert "        Relation::Author.def()\n" in post
        assert '    #[sea_orm(has_many = "super::post::Entity")]\n    Posts,\n' in user
        assert "impl Related<super::post::Entity> for Entity {" in user

    def test_entity_without_relations(self, run_codegen: RunCodegen) -> None:
        note = run_codegen("type Note { id: ID! }", orm="sea_orm")["src/entities/note.rs"]
        assert "pub enum Relation {}\n" in note
        assert "impl Related" not in note

    def test_self_reference_has_no_related_impl(self, run_codegen: RunCodegen) -> None:
        employee = run_codegen("type Employee { id: ID! employeeId: ID }", orm="sea_orm")[
            "src/entities/employee.rs"
        ]
        assert '        belongs_to = "Entity",\n' in employee
        assert '        to = "Column::Id"\n' in employee
        assert "has_many" not in employee
        assert "impl Related" not in employee

    def test_postgres_types(self, blog_sdl: str, run_codegen: RunCodegen) -> None:
        article = run_codegen(blog_sdl, orm="sea_orm", db="postgres")["src/entities/article.rs"]
        assert "use super::sea_orm_active_enums::Status;\n" in article
        assert "    #[sea_orm(primary_key, auto_increment = false)]\n    pub id: Uuid,\n" in article
        assert "    pub status: Status,\n" in article
        assert (
            '    #[sea_orm(column_type = "TimestampWithTimeZone")]\n'
            "    pub published_at: Option<DateTimeUtc>,\n"
        ) in article
        # f64 columns rule out Eq
        assert "#[derive(Clone, Debug, PartialEq, DeriveEntityModel)]\n" in article

    def test_list_columns_have_no_column_type(self, blog_sdl: str, run_codegen: RunCodegen) -> None:
        author = run_codegen(blog_sdl, orm="sea_orm", db="postgres")["src/entities/author.rs"]
        assert "    pub tags: Option<Vec<String>>,\n" in author
        assert '    #[sea_orm(column_type = "Text")]\n    pub tags' not in author


class TestActiveEnums:
    def test_native_enum(self, blog_sdl: str, run_codegen: RunCodegen) -> None:
        enums = run_codegen(blog_sdl, orm="sea_orm", db="postgres")[
            "src/entities/sea_orm_active_enums.rs"
        ]
        assert '#[sea_orm(rs_type = "String", db_type = "Enum", enum_name = "status")]\n' in enums
        assert '    #[sea_orm(string_value = "PUBLISHED")]\n    Published,\n' in enums

    def test_string_enum(self, blog_sdl: str, run_codegen: RunCodegen) -> None:
        enums = run_codegen(blog_sdl, orm="sea_orm", db="mysql")[
            "src/entities/sea_orm_active_enums.rs"
        ]
        assert 'db_type = "String(StringLen::None)"' in enums


class TestModules:
    def test_prelude_and_mod(self, user_post_sdl: str, run_codegen: RunCodegen) -> None:
        files = run_codegen(user_post_sdl, orm="sea_orm")
        assert files["src/entities/prelude.rs"].endswith(
            "pub use super::user::Entity as User;\npub use super::post::Entity as Post;\n"
        )
        mod = files["src/entities/mod.rs"]
        assert "pub mod prelude;\n" in mod
        assert "sea_orm_active_enums" not in mod
        assert "pub mod user;\npub mod post;\n" in mod


class TestMigrations:
    def test_prefixed_migrations(self, user_post_sdl: str, run_codegen: RunCodegen) -> None:
        files = run_codegen(user_post_sdl, orm="sea_orm")
        assert "migrations/m001_create_users/up.sql" in files
        assert "migrations/m002_create_posts/down.sql" in files

    def test_migrations_only(self, user_post_sdl: str, run_codegen: RunCodegen) -> None:
        files = run_codegen(user_post_sdl, orm="sea_orm", generate_entities=False)
        assert files
        assert all(p.startswith("migrations/") for p in files)
