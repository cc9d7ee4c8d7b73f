"""
compiler.py

Responsibility: Compile every source matched by the configured glob into the build dir (`rsd build`).

The compilation itself is delegated to an external bundler process
(browserify + tsify by default). This module only:
- resets the build directory
- resolves the glob pattern
- maps each source path to its destination path
- runs the bundler and writes its stdout

A failure on one file is logged and recorded; the remaining files are still built.
"""

from __future__ import annotations

import glob
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Callable

from rsd.settings import Settings

logger = logging.getLogger(__name__)

CompileFn = Callable[[str, Settings, Path], str]


class CompileError(RuntimeError):
    pass


@dataclass(frozen=True)
class BuildResult:
    built: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def destination_for(source: str, settings: Settings) -> Path:
    """
    Map a matched source path to its output path.

    The first path segment is replaced by the build dir and the extension by
    `settings.output_extension`: `scripts/a/widget.ts` -> `dest/a/widget.js`.
    """
    parts = PurePosixPath(source.replace(os.sep, "/")).parts
    # A bare filename has no root segment to strip.
    rest = parts[1:] if len(parts) > 1 else parts
    target = settings.build_dir.joinpath(*rest)
    return target.with_suffix(settings.output_extension)


def compile_file(entry: str, settings: Settings, cwd: Path) -> str:
    """
    Run the external bundler with `entry` as entry point and return the bundle text.
    """
    entry_path = str((cwd / entry).resolve())
    cmd = [part.replace("{entry}", entry_path).replace("{project}", settings.tsconfig) for part in settings.bundler_command]
    logger.debug("Running %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), check=True, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise CompileError(f"Bundler executable not found: {cmd[0]}") from e
    except subprocess.CalledProcessError as e:
        raise CompileError(f"Bundler failed for {entry} (exit {e.returncode})\n\n{e.stderr}") from e
    return proc.stdout


def find_sources(pattern: str, cwd: Path) -> list[str]:
    if not pattern:
        raise CompileError("No `sourceRootsPattern` configured; run `rsd init` or edit rsd.yaml.")
    matches = glob.glob(pattern, root_dir=str(cwd), recursive=True)
    return sorted(m for m in matches if (cwd / m).is_file())


def build(
    settings: Settings,
    *,
    cwd: str | Path | None = None,
    compile_fn: CompileFn | None = None,
) -> BuildResult:
    """
    Recreate the build dir and compile every matched source into it.
    """
    root = Path(cwd if cwd is not None else os.getcwd()).resolve()
    compile_fn = compile_fn or compile_file
    build_dir = (root / settings.build_dir).resolve()

    shutil.rmtree(build_dir, ignore_errors=True)

    sources = find_sources(settings.source_roots_pattern, root)
    if not sources:
        logger.warning("No source files match %r", settings.source_roots_pattern)

    result = BuildResult()
    for source in sources:
        target = root / destination_for(source, settings)
        try:
            if not target.resolve().is_relative_to(build_dir):
                raise CompileError(f"Output path escapes the build dir: {target}")
            bundle = compile_fn(source, settings, root)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(bundle, encoding="utf-8")
        except (CompileError, OSError) as e:
            logger.error("Failed to build %s: %s", source, e)
            result.failed.append(source)
            continue
        logger.info("File %s saved", target.name)
        result.built.append(source)

    return result
