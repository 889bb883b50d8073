"""gqlorm: generate Rust ORM entities and SQL migrations from GraphQL schemas."""

__version__ = "0.3.0"
