"""
backup.py

Responsibility: Write the files returned by the deploy endpoint under the backups dir.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any, Mapping

logger = logging.getLogger(__name__)


class BackupError(RuntimeError):
    pass


def _backup_path(backups_dir: Path, key: str) -> Path:
    rel = PurePosixPath(key.replace("\\", "/"))
    if not key or rel.is_absolute() or ".." in rel.parts:
        raise BackupError(f"Refusing to write backup outside {backups_dir}: {key!r}")
    return backups_dir.joinpath(*rel.parts)


def write_backup(payload: Mapping[str, Any], backups_dir: str | Path) -> list[Path]:
    """
    Write every entry of `payload` to `backups_dir/<key>`, overwriting existing files.

    All keys are validated before anything is written. Returns the written paths.
    """
    root = Path(backups_dir)
    targets: list[tuple[Path, str]] = []
    for key, content in payload.items():
        if not isinstance(content, str):
            raise BackupError(f"Backup entry {key!r} is not text ({type(content).__name__}).")
        targets.append((_backup_path(root, key), content))

    written: list[Path] = []
    for path, content in targets:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        logger.info("File %s saved", path.name)
        written.append(path)
    return written
