"""IntegrateService: hook gqlorm into an existing GraphQL Code Generator setup.

Adds a ``rust_codegen`` section to ``codegen.yml`` (comments and key order
preserved) and ``codegen:rust`` / ``codegen:all`` scripts to ``package.json``.
"""

from __future__ import annotations

import json
import logging
from io import StringIO
from pathlib import Path
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from gqlorm.config.discovery import YAML_FILENAMES, YAML_SECTION, find_yaml_config
from gqlorm.config.models import DEFAULT_OUTPUT_DIR
from gqlorm.services.result import ServiceError, ServiceResult
from gqlorm.services.telemetry import traced

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"
SCRIPTS = {
    "codegen:rust": "gqlorm generate",
    "codegen:all": "npm run codegen && npm run codegen:rust",
}


def rust_codegen_section(output_dir: Path) -> dict[str, Any]:
    return {
        "orm": "diesel",
        "db": "sqlite",
        "output_dir": (output_dir / "db").as_posix(),
        "generate_migrations": True,
        "generate_entities": True,
    }


class IntegrateService:
    """Wire generation into a JavaScript project's codegen workflow."""

    @staticmethod
    def _error(code: str, message: str, **detail: str) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op="integrate",
            error=ServiceError(code=code, message=message, detail=detail),
        )

    @staticmethod
    def add_section(path: Path, output_dir: Path, *, force: bool) -> bool:
        """Add the ``rust_codegen`` section; False when one exists and *force* is off.

        Raises ``YAMLError`` for a file that does not parse and ``ValueError``
        for one whose top level is not a mapping.
        """
        yaml = YAML()
        yaml.preserve_quotes = True
        data = yaml.load(path.read_text(encoding="utf-8"))
        if data is None:
            data = {}
        if not isinstance(data, dict):
            msg = "expected a mapping at the top level"
            raise ValueError(msg)
        if YAML_SECTION in data and not force:
            return False

        data[YAML_SECTION] = rust_codegen_section(output_dir)
        buffer = StringIO()
        yaml.dump(data, buffer)
        path.write_text(buffer.getvalue(), encoding="utf-8")
        return True

    @staticmethod
    def add_scripts(path: Path) -> list[str]:
        """Add missing scripts to *path*; existing entries are never replaced."""
        package = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(package, dict):
            msg = "expected an object at the top level"
            raise ValueError(msg)
        scripts = package.get("scripts")
        if not isinstance(scripts, dict):
            scripts = package["scripts"] = {}

        added = [name for name in SCRIPTS if name not in scripts]
        if added:
            for name in added:
                scripts[name] = SCRIPTS[name]
            path.write_text(json.dumps(package, indent=2) + "\n", encoding="utf-8")
        return added

    @staticmethod
    @traced
    def integrate(
        root: Path,
        *,
        output_dir: Path = DEFAULT_OUTPUT_DIR,
        force: bool = False,
        add_scripts: bool = True,
    ) -> ServiceResult:
        root = root.resolve()
        warnings: list[str] = []

        codegen_path = find_yaml_config(root)
        if codegen_path is None:
            expected = " or ".join(f"'{name}'" for name in YAML_FILENAMES)
            return IntegrateService._error(
                "NO_CODEGEN_CONFIG",
                f"No GraphQL Code Generator config found; expected {expected} in {root}",
                path=str(root),
            )

        try:
            section_added = IntegrateService.add_section(codegen_path, output_dir, force=force)
        except (YAMLError, ValueError) as exc:
            return IntegrateService._error(
                "INVALID_CODEGEN_CONFIG",
                f"Failed to parse {codegen_path.name}: {exc}",
                path=str(codegen_path),
            )
        if not section_added:
            warnings.append(
                f"{YAML_SECTION} section already exists in {codegen_path.name}; "
                "use --force to overwrite"
            )

        scripts_added: list[str] = []
        if add_scripts:
            package_path = root / PACKAGE_JSON
            if not package_path.is_file():
                warnings.append(f"{PACKAGE_JSON} not found, skipping script addition")
            else:
                try:
                    scripts_added = IntegrateService.add_scripts(package_path)
                except ValueError as exc:
                    return IntegrateService._error(
                        "INVALID_PACKAGE_JSON",
                        f"Failed to parse {PACKAGE_JSON}: {exc}",
                        path=str(package_path),
                    )

        logger.debug("Integrated %s (section=%s, scripts=%s)", root, section_added, scripts_added)
        return ServiceResult(
            ok=True,
            op="integrate",
            data={
                "codegen_config": str(codegen_path),
                "section_added": section_added,
                "scripts_added": scripts_added,
            },
            warnings=warnings,
        )
