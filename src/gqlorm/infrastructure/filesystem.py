"""Writing generated files under the output directory.

Writes are all-or-nothing: every file goes through an
:class:`OutputTransaction`, and when any write fails the files created so far
are removed and overwritten ones restored.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from gqlorm.domain.files import GeneratedFile

logger = logging.getLogger(__name__)


def resolve_output_path(output_dir: Path, relative_path: str) -> Path:
    """Resolve a generated file's path, refusing anything outside *output_dir*."""
    rel = PurePosixPath(relative_path)
    if rel.is_absolute() or ".." in rel.parts:
        msg = f"Generated path escapes the output directory: {relative_path!r}"
        raise ValueError(msg)
    return output_dir.joinpath(*rel.parts)


@dataclass
class _FileOp:
    """A tracked write within an output transaction."""

    path: Path
    backup: str | None  # original content for overwrites, None for creates

    def rollback(self) -> None:
        try:
            if self.backup is not None:
                self.path.write_text(self.backup, encoding="utf-8")
            else:
                self.path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to roll back generated file: %s", self.path)


@dataclass
class OutputTransaction:
    """Tracked writes into one output directory."""

    output_dir: Path
    _file_ops: list[_FileOp] = field(default_factory=list, repr=False)

    def write_file(self, relative_path: str, content: str) -> Path:
        path = resolve_output_path(self.output_dir, relative_path)
        backup: str | None = None
        if path.exists():
            backup = path.read_text(encoding="utf-8")
            if backup == content:
                return path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        self._file_ops.append(_FileOp(path=path, backup=backup))
        return path

    @property
    def written(self) -> list[Path]:
        return [op.path for op in self._file_ops]

    def rollback(self) -> None:
        for op in reversed(self._file_ops):
            op.rollback()
        self._file_ops.clear()


@contextmanager
def output_transaction(output_dir: Path) -> Iterator[OutputTransaction]:
    """Yield a transaction whose writes are undone if the block raises."""
    txn = OutputTransaction(output_dir=output_dir)
    try:
        yield txn
    except BaseException:
        txn.rollback()
        raise


def write_generated_files(output_dir: Path, files: Iterable[GeneratedFile]) -> list[Path]:
    """Write *files* under *output_dir*, returning the paths actually changed.

    Files whose content is already identical on disk are left untouched.
    """
    with output_transaction(output_dir) as txn:
        for generated in files:
            txn.write_file(generated.relative_path, generated.content)
        return txn.written
