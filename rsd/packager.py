"""
packager.py

Responsibility: Collect every file under the build dir into a `Package`
mapping of `/`-separated relative path -> file content.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

Package = dict[str, str]


class PackageError(RuntimeError):
    pass


def pack_project(root: str | Path) -> Package:
    """
    Walk `root` and read every regular file into a `Package`.

    Keys are relative to `root` (its own name excluded); content is decoded as
    UTF-8 with undecodable bytes replaced.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise PackageError(f"Build directory not found: {root_path} (run `rsd build` first)")

    package: Package = {}
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if not path.is_file():
                continue
            key = path.relative_to(root_path).as_posix()
            raw = path.read_bytes()
            try:
                package[key] = raw.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("%s is not valid UTF-8; undecodable bytes were replaced", key)
                package[key] = raw.decode("utf-8", errors="replace")

    logger.debug("Packed %d file(s) from %s", len(package), root_path)
    return package
