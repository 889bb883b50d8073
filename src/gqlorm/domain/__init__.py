"""Domain layer: schema model, naming rules, and error taxonomy.

This layer depends only on the standard library.
It must never import from codegen, services, infrastructure, or commands.
"""
