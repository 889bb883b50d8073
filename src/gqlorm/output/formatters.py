"""ServiceResult formatting for the requested output mode.

Humans get Rich output; ``--json`` gets the serialized result; ``--quiet``
gets one status line (or the written paths for generate).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from gqlorm.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from gqlorm.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
