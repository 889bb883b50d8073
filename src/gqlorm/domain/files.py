"""Output units of a generation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class GeneratedFile:
    """A file to be persisted, relative to the configured output directory."""

    relative_path: str
    content: str


@dataclass(frozen=True)
class GenerationSummary:
    """Counts reported to the CLI, plus non-fatal warnings."""

    entities: int = 0
    migrations: int = 0
    relationships: int = 0
    deferred_constraints: int = 0
    files: int = 0
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "entities": self.entities,
            "migrations": self.migrations,
            "relationships": self.relationships,
            "deferred_constraints": self.deferred_constraints,
            "files": self.files,
        }


@dataclass(frozen=True)
class GenerationResult:
    files: tuple[GeneratedFile, ...]
    summary: GenerationSummary
