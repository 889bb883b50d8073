"""Fatal error taxonomy for a generation run.

Every error carries the pipeline ``stage`` that detected it and the
``subject`` (type, field, scalar, or config key) it is about, so callers can
report a single descriptive message. Non-fatal findings are never raised;
they travel as warnings on the generation summary.
"""

from __future__ import annotations


class GenerationError(Exception):
    """Base class for fatal generation failures."""

    code = "GENERATION_ERROR"
    stage = "generate"

    def __init__(self, message: str, *, subject: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.subject = subject

    def to_detail(self) -> dict[str, str]:
        detail = {"stage": self.stage}
        if self.subject is not None:
            detail["subject"] = self.subject
        return detail


class SchemaError(GenerationError):
    """Malformed or internally inconsistent schema input."""

    code = "SCHEMA_ERROR"
    stage = "schema"


class UnmappedScalarError(GenerationError):
    """A custom scalar has neither a built-in default nor a configured override."""

    code = "UNMAPPED_SCALAR"
    stage = "resolve"

    def __init__(self, scalar: str, *, field_path: str | None = None) -> None:
        where = f" (used by {field_path})" if field_path else ""
        message = (
            f"Scalar {scalar!r}{where} has no type mapping; "
            f"add it to [codegen.type_mappings]"
        )
        super().__init__(message, subject=scalar)
        self.scalar = scalar
        self.field_path = field_path


class ConfigConflictError(GenerationError):
    """Configuration that cannot be honoured, detected before generation starts."""

    code = "CONFIG_CONFLICT"
    stage = "config"


class SchemaSourceError(GenerationError):
    """The schema could not be acquired (network, file, or payload failure)."""

    code = "SCHEMA_SOURCE"
    stage = "fetch"
