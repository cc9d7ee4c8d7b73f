"""
scaffold.py

Responsibility: Scaffold a project (`rsd init`) from the `defaults/` tree shipped
with this package. `package.json` and `rsd.yaml` carry the project name.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined

logger = logging.getLogger(__name__)

DEFAULTS_DIR = Path(__file__).resolve().parent / "defaults"


class RenderError(RuntimeError):
    pass


@dataclass(frozen=True)
class RenderResult:
    rendered_files: int
    copied_files: int


def _is_binary_file(path: Path) -> bool:
    try:
        path.read_text(encoding="utf-8")
        return False
    except UnicodeDecodeError:
        return True


def _iter_default_files(defaults_dir: Path) -> list[Path]:
    files: list[Path] = []
    for root, _dirs, filenames in os.walk(defaults_dir):
        root_path = Path(root)
        for name in filenames:
            files.append(root_path / name)
    files.sort(key=lambda p: p.relative_to(defaults_dir).as_posix())
    return files


def init(
    destination: str | Path | None = None,
    *,
    context: dict[str, Any] | None = None,
    defaults_dir: str | Path = DEFAULTS_DIR,
) -> RenderResult:
    """
    Copy the default project files into `destination` (the cwd by default).

    `project_name` in the render context defaults to the destination directory name.
    """
    src_dir = Path(defaults_dir).resolve()
    dst_dir = Path(destination if destination is not None else os.getcwd()).resolve()

    if not src_dir.is_dir():
        raise RenderError(f"Defaults directory not found: {src_dir}")

    ctx: dict[str, Any] = {"project_name": dst_dir.name}
    ctx.update(context or {})

    env = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True)

    rendered = 0
    copied = 0

    for src_path in _iter_default_files(src_dir):
        rel = src_path.relative_to(src_dir)
        dst_path = dst_dir / rel
        dst_path.parent.mkdir(parents=True, exist_ok=True)

        if _is_binary_file(src_path):
            shutil.copy2(src_path, dst_path)
            copied += 1
            continue

        text = src_path.read_text(encoding="utf-8")
        if ("{{" in text) or ("{%" in text) or ("{#" in text):
            try:
                out = env.from_string(text).render(**ctx)
            except Exception as e:  # noqa: BLE001 - surface as RenderError
                raise RenderError(f"Failed rendering default file: {rel}") from e
            dst_path.write_text(out, encoding="utf-8", newline="\n")
            shutil.copystat(src_path, dst_path)
            rendered += 1
        else:
            shutil.copy2(src_path, dst_path)
            copied += 1
        logger.debug("Wrote %s", rel.as_posix())

    logger.info("Initialized %d file(s) in %s", rendered + copied, dst_dir)
    return RenderResult(rendered_files=rendered, copied_files=copied)
