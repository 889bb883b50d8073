"""Service layer: generation workflows returning ServiceResult.

Services may import from domain, codegen, config, and infrastructure.
They must never import from commands or output.
"""
