"""Pluggy hook specifications for gqlorm.

One setup-time hook lets plugins contribute ORM emitters; one post-run hook
observes what a ``generate`` wrote.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from gqlorm.codegen.emitters import EmitterFactory

hookspec = pluggy.HookspecMarker("gqlorm")
hookimpl = pluggy.HookimplMarker("gqlorm")


class GqlormHookSpec:
    """Hook specifications for the gqlorm plugin system."""

    @hookspec
    def register_emitters(self) -> dict[str, EmitterFactory] | None:
        """Return ``{orm_name: factory}`` for additional ORM backends.

        A factory is called with a ``project_root`` keyword and must return
        an object satisfying :class:`gqlorm.codegen.emitters.Emitter`.
        """

    @hookspec
    def post_generate(
        self,
        output_dir: str,
        files: list[str],
        summary: dict[str, Any],
    ) -> None:
        """Called after generated files were written (never on ``--dry-run``)."""
