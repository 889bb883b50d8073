"""Tests for PluginManager: discovery, emitter registration, and hook dispatch."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from gqlorm.codegen.emitters import DieselEmitter, EmitterRegistry
from gqlorm.codegen.plan import GenerationPlan
from gqlorm.config.models import CodegenConfig
from gqlorm.config.settings import GqlormSettings
from gqlorm.domain.errors import ConfigConflictError
from gqlorm.domain.files import GeneratedFile
from gqlorm.domain.types import DatabaseType
from gqlorm.infrastructure.project import Project
from gqlorm.plugins import PluginManager, hookimpl
from gqlorm.services.generate import GenerateService


class ToyEmitter:
    """Lists the planned tables in a single text file."""

    name = "toy"
    supported_dialects = frozenset({DatabaseType.SQLITE})
    type_defaults: dict[tuple[str, DatabaseType], Any] = {}

    def __init__(self, *, project_root: Path | None = None) -> None:
        self.project_root = project_root

    def emit(self, plan: GenerationPlan) -> list[GeneratedFile]:
        return [GeneratedFile("tables.txt", "\n".join(e.table for e in plan.entities) + "\n")]


class _EmitterPlugin:
    @hookimpl
    def register_emitters(self) -> dict[str, Any]:
        return {"toy": ToyEmitter}


class _ReplacingPlugin:
    @hookimpl
    def register_emitters(self) -> dict[str, Any]:
        return {"diesel": ToyEmitter}


class _BadResultPlugin:
    @hookimpl
    def register_emitters(self) -> Any:
        return ["toy"]


class _NonCallablePlugin:
    @hookimpl
    def register_emitters(self) -> dict[str, Any]:
        return {"toy": "not a factory"}


class _FailingPlugin:
    @hookimpl
    def register_emitters(self) -> dict[str, Any]:
        raise RuntimeError("boom")


class _RecordingPlugin:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    @hookimpl
    def post_generate(self, output_dir: str, files: list[str], summary: dict[str, Any]) -> None:
        self.calls.append({"output_dir": output_dir, "files": files, "summary": summary})


LOCAL_PLUGIN = '''\
from gqlorm.plugins import hookimpl


class LocalPlugin:
    @hookimpl
    def post_generate(self, output_dir, files, summary):
        pass


class NotAPlugin:
    pass
'''

LOCAL_EMITTER_PLUGIN = '''\
from gqlorm.domain.files import GeneratedFile
from gqlorm.domain.types import DatabaseType
from gqlorm.plugins import hookimpl


class ToyEmitter:
    name = "toy"
    supported_dialects = frozenset({DatabaseType.SQLITE})
    type_defaults = {}

    def __init__(self, *, project_root=None):
        pass

    def emit(self, plan):
        return [GeneratedFile("tables.txt", "\\n".join(e.table for e in plan.entities) + "\\n")]


class ToyPlugin:
    @hookimpl
    def register_emitters(self):
        return {"toy": ToyEmitter}
'''


class TestRegistration:
    def test_hook_relay_accessible(self) -> None:
        pm = PluginManager()
        assert hasattr(pm.hook, "register_emitters")
        assert hasattr(pm.hook, "post_generate")

    def test_register_plugin_default_name(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_RecordingPlugin())
        assert "_RecordingPlugin" in pm.list_plugin_names()

    def test_disabled_plugin_is_blocked(self) -> None:
        pm = PluginManager(disabled=["recorder"])
        pm.register_plugin(_RecordingPlugin(), name="recorder")
        assert "recorder" not in pm.list_plugin_names()

    def test_discover_without_local_dir(self) -> None:
        pm = PluginManager()
        pm.discover_and_load()
        assert pm.is_loaded


class TestEmitters:
    def test_register_emitters(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_EmitterPlugin())
        registry = EmitterRegistry()
        assert pm.register_emitters(registry) == ["toy"]
        assert registry.factory("toy") is ToyEmitter
        assert list(registry) == ["diesel", "sea_orm", "toy"]
        assert pm.warnings == []

    def test_builtin_cannot_be_replaced(self) -> None:
        pm = PluginManager()
        pm.register_plugin(_ReplacingPlugin())
        registry = EmitterRegistry()
        assert pm.register_emitters(registry) == []
        assert registry.factory("diesel") is DieselEmitter
        assert pm.warnings == ["Plugin '_ReplacingPlugin' tried to replace emitter 'diesel'; ignored"]

    @pytest.mark.parametrize(
        ("plugin", "warning"),
        [
            (_BadResultPlugin(), "returned a non-dict"),
            (_NonCallablePlugin(), "non-callable emitter 'toy'"),
            (_FailingPlugin(), "failed to register emitters"),
        ],
    )
    def test_malformed_results_become_warnings(self, plugin: object, warning: str) -> None:
        pm = PluginManager()
        pm.register_plugin(plugin)
        registry = EmitterRegistry()
        assert pm.register_emitters(registry) == []
        assert "toy" not in registry
        assert len(pm.warnings) == 1
        assert warning in pm.warnings[0]

    def test_plugin_emitter_drives_generation(self, project: Project, project_root: Path) -> None:
        plugins = project_root / ".gqlorm" / "plugins"
        plugins.mkdir(parents=True)
        (plugins / "toy.py").write_text(LOCAL_EMITTER_PLUGIN, encoding="utf-8")

        result = GenerateService(project).generate(codegen=CodegenConfig(orm="toy"))
        assert result.ok, result.error
        assert result.data["files"] == ["tables.txt"]
        assert (project_root / "generated" / "tables.txt").read_text(encoding="utf-8") == (
            "users\nposts\n"
        )


class TestProjectIsolation:
    def _project_with_toy(self, root: Path) -> Project:
        plugins = root / ".gqlorm" / "plugins"
        plugins.mkdir(parents=True)
        (plugins / "toy.py").write_text(LOCAL_EMITTER_PLUGIN, encoding="utf-8")
        return Project(GqlormSettings.from_cli(project_root=root))

    def test_same_plugin_in_two_projects(self, tmp_path: Path) -> None:
        first = self._project_with_toy(tmp_path / "a")
        second = self._project_with_toy(tmp_path / "b")
        assert "toy" in first.emitters
        assert "toy" in second.emitters
        assert first.plugins.warnings == []
        assert second.plugins.warnings == []

    def test_plugin_emitters_stay_in_their_project(self, tmp_path: Path) -> None:
        with_toy = self._project_with_toy(tmp_path / "a")
        plain_root = tmp_path / "b"
        plain_root.mkdir()
        plain = Project(GqlormSettings.from_cli(project_root=plain_root))
        assert "toy" in with_toy.emitters
        assert "toy" not in plain.emitters
        assert list(plain.emitters) == ["diesel", "sea_orm"]


class TestEmitterRegistry:
    def test_builtins_present(self) -> None:
        registry = EmitterRegistry()
        assert isinstance(registry.create("diesel"), DieselEmitter)

    def test_duplicate_name_rejected(self) -> None:
        registry = EmitterRegistry()
        with pytest.raises(ConfigConflictError, match="already registered"):
            registry.register("diesel", ToyEmitter)

    def test_unknown_name_lists_available(self) -> None:
        with pytest.raises(ConfigConflictError, match=r"available: diesel, sea_orm\)"):
            EmitterRegistry().create("prisma")

    def test_registries_are_independent(self) -> None:
        first = EmitterRegistry()
        first.register("toy", ToyEmitter)
        assert "toy" not in EmitterRegistry()


class TestPostGenerate:
    def test_dispatch(self, tmp_path: Path) -> None:
        pm = PluginManager()
        plugin = _RecordingPlugin()
        pm.register_plugin(plugin)
        pm.dispatch_post_generate(tmp_path, [tmp_path / "a.rs"], {"entities": 1})
        assert plugin.calls == [
            {"output_dir": str(tmp_path), "files": [str(tmp_path / "a.rs")], "summary": {"entities": 1}}
        ]


class TestLocalDiscovery:
    def test_loads_hook_classes_only(self, tmp_path: Path) -> None:
        (tmp_path / "local.py").write_text(LOCAL_PLUGIN, encoding="utf-8")
        (tmp_path / "_private.py").write_text(LOCAL_PLUGIN, encoding="utf-8")
        pm = PluginManager()
        names = pm.discover_and_load(local_dir=tmp_path)
        assert "gqlorm_local_plugin_local.LocalPlugin" in names
        assert not any("NotAPlugin" in n or "_private" in n for n in names)

    def test_broken_file_is_a_warning(self, tmp_path: Path) -> None:
        (tmp_path / "broken.py").write_text("raise ImportError('missing dependency')\n", encoding="utf-8")
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path)
        assert pm.warnings == ["Failed to load local plugin broken.py"]

    def test_missing_dir_is_ignored(self, tmp_path: Path) -> None:
        pm = PluginManager()
        pm.discover_and_load(local_dir=tmp_path / "absent")
        assert pm.warnings == []
