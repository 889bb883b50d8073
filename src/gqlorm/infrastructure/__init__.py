"""Infrastructure layer: schema acquisition, templates, filesystem.

This layer depends on stdlib, third-party libs (requests, graphql-core,
Jinja2), the domain layer, and the codegen builder.
It must never import from services, commands, or output.
"""
