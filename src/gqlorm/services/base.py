"""BaseService: foundation for the gqlorm services.

Every service receives a :class:`Project` at construction time and turns
fatal :class:`GenerationError` failures into failed results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from gqlorm.infrastructure.project import Project


class BaseService:
    """Base for service-layer classes.

    Usage::

        class GenerateService(BaseService):
            @traced
            def generate(self, ...) -> ServiceResult:
                ...
    """

    def __init__(self, project: Project) -> None:
        self._project = project

    def _dispatch_post_generate(
        self,
        payload: dict[str, Any],
        warnings: list[str],
    ) -> None:
        """Run ``post_generate`` plugin hooks. Plugin failures are warnings."""
        pm = self._project.plugins
        before = len(pm.warnings)
        pm.dispatch_post_generate(payload["output_dir"], payload["files"], payload["summary"])
        warnings.extend(pm.warnings[before:])
