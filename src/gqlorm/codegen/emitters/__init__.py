"""ORM backends, looked up by name.

The built-in backends are fixed. Plugins contribute more through the
``register_emitters`` hook into an :class:`EmitterRegistry` owned by one
project, so separate projects in one process never see each other's
emitters. The pipeline only ever talks to the :class:`Emitter` protocol.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from gqlorm.codegen.emitters.base import Emitter, TemplateEmitter
from gqlorm.codegen.emitters.diesel import DieselEmitter
from gqlorm.codegen.emitters.sea_orm import SeaOrmEmitter
from gqlorm.domain.errors import ConfigConflictError

type EmitterFactory = Callable[..., Emitter]

BUILTIN_EMITTERS: Mapping[str, EmitterFactory] = MappingProxyType(
    {
        DieselEmitter.name: DieselEmitter,
        SeaOrmEmitter.name: SeaOrmEmitter,
    }
)


class EmitterRegistry:
    """Emitter factories for one project: the built-ins plus plugin additions."""

    def __init__(self) -> None:
        self._factories: dict[str, EmitterFactory] = dict(BUILTIN_EMITTERS)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._factories))

    def register(self, name: str, factory: EmitterFactory) -> None:
        """Add an emitter factory. Factories accept a ``project_root`` keyword."""
        if name in self._factories:
            msg = f"An emitter named {name!r} is already registered"
            raise ConfigConflictError(msg, subject=name)
        self._factories[name] = factory

    def factory(self, name: str) -> EmitterFactory | None:
        return self._factories.get(name)

    def create(self, name: str, *, project_root: Path | None = None) -> Emitter:
        """Instantiate the emitter registered as *name*."""
        factory = self._factories.get(name)
        if factory is None:
            known = ", ".join(self)
            msg = f"Unsupported ORM {name!r} (available: {known})"
            raise ConfigConflictError(msg, subject=name)
        return factory(project_root=project_root)


def get_emitter(
    name: str,
    *,
    project_root: Path | None = None,
    registry: EmitterRegistry | None = None,
) -> Emitter:
    """Instantiate *name* from *registry*, or from the built-ins alone."""
    return (registry or EmitterRegistry()).create(name, project_root=project_root)


__all__ = [
    "BUILTIN_EMITTERS",
    "DieselEmitter",
    "Emitter",
    "EmitterFactory",
    "EmitterRegistry",
    "SeaOrmEmitter",
    "TemplateEmitter",
    "get_emitter",
]
