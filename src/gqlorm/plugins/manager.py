"""Plugin discovery and loading.

Discovery: ``gqlorm.plugins`` entry points (pip-installed) via pluggy,
plus single-file plugins from ``.gqlorm/plugins/`` in the project.
Capabilities: extra ORM emitters and post-generation hooks.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pluggy

from gqlorm.plugins.hookspecs import GqlormHookSpec

if TYPE_CHECKING:
    from gqlorm.codegen.emitters import EmitterRegistry

PROJECT_NAME = "gqlorm"
ENTRY_POINT_GROUP = "gqlorm.plugins"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, emitter registration, and hook dispatch."""

    def __init__(self, *, disabled: Iterable[str] = ()) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(GqlormHookSpec)
        for name in disabled:
            self._pm.set_blocked(name)
        self._loaded = False
        self.warnings: list[str] = []

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins and single-file plugins from *local_dir*.

        Returns the names of all registered plugins.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_classes()
        if local_dir is not None:
            self._discover_local(local_dir)
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def list_plugin_names(self) -> list[str]:
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def collect_emitters(self) -> dict[str, Any]:
        """Merge every plugin's ``register_emitters`` result.

        Malformed results and failing plugins become warnings.
        """
        from gqlorm.codegen.emitters import BUILTIN_EMITTERS

        collected: dict[str, Any] = {}
        for plugin in self._pm.get_plugins():
            name = self._pm.get_name(plugin) or plugin.__class__.__name__
            hook = getattr(plugin, "register_emitters", None)
            if hook is None:
                continue
            try:
                result = hook()
            except Exception:
                logger.warning("Plugin %s failed in register_emitters", name, exc_info=True)
                self.warnings.append(f"Plugin {name!r} failed to register emitters")
                continue
            if result is None:
                continue
            if not isinstance(result, dict):
                self.warnings.append(f"Plugin {name!r} returned a non-dict from register_emitters")
                continue
            for orm, factory in result.items():
                if orm in BUILTIN_EMITTERS or orm in collected:
                    self.warnings.append(
                        f"Plugin {name!r} tried to replace emitter {orm!r}; ignored"
                    )
                    continue
                if not callable(factory):
                    self.warnings.append(
                        f"Plugin {name!r} registered a non-callable emitter {orm!r}"
                    )
                    continue
                collected[orm] = factory
        return collected

    def register_emitters(self, registry: EmitterRegistry) -> list[str]:
        """Add plugin emitters to *registry*; returns the names added."""
        added = []
        for orm, factory in self.collect_emitters().items():
            if orm in registry:
                self.warnings.append(f"Emitter {orm!r} is already registered; ignored")
                continue
            registry.register(orm, factory)
            added.append(orm)
        return added

    def dispatch_post_generate(
        self, output_dir: Path, files: list[Path], summary: dict[str, Any]
    ) -> None:
        """Call ``post_generate`` on every plugin; failures become warnings."""
        for impl in self._pm.hook.post_generate.get_hookimpls():
            try:
                impl.function(
                    output_dir=str(output_dir),
                    files=[str(f) for f in files],
                    summary=summary,
                )
            except Exception:
                logger.warning("Plugin %s failed in post_generate", impl.plugin_name, exc_info=True)
                self.warnings.append(f"Plugin {impl.plugin_name!r} failed in post_generate")

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Load each ``*.py`` (not ``_``-prefixed) in *local_dir* as a plugin module.

        Classes carrying ``@hookimpl`` methods are instantiated and registered.
        A broken local plugin is logged and skipped.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"gqlorm_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    self.warnings.append(f"Could not load local plugin {py_file.name}")
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                self.warnings.append(f"Failed to load local plugin {py_file.name}")
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name or not self._has_hook_impls(obj):
                    continue
                try:
                    self.register_plugin(obj(), name=f"{module_name}.{obj.__name__}")
                except Exception:
                    logger.warning(
                        "Failed to instantiate %s from %s", obj.__name__, py_file, exc_info=True
                    )
                    self.warnings.append(f"Failed to instantiate plugin {obj.__name__}")

    def _instantiate_classes(self) -> None:
        """Entry points may register a class; hooks need bound instances."""
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin) or not self._has_hook_impls(plugin):
                continue
            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True
                )
                self.warnings.append(f"Failed to instantiate plugin {plugin_name!r}")
                continue
            self._pm.register(instance, name=plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """``HookimplMarker("gqlorm")`` marks methods with a ``gqlorm_impl`` attribute."""
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "gqlorm_impl", None):
                return True
        return False
