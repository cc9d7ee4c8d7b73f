"""
cli.py

Responsibility: CLI entrypoint for rsd.

Commands:
- `init`: copy the default project files into the current directory
- `build`: compile sources matched by `sourceRootsPattern` into `./dest`
- `deploy`: package `./dest`, upload it, and back up whatever the endpoint returns

This module orchestrates behavior and keeps concerns isolated:
- Settings: `settings.py`
- Scaffolding: `scaffold.py`
- Compilation: `compiler.py`
- Packaging / upload / backup: `packager.py`, `client.py`, `backup.py`
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from rsd import __version__
from rsd.backup import BackupError, write_backup
from rsd.client import DeployClient, DeployError
from rsd.compiler import CompileError, build
from rsd.packager import PackageError, pack_project
from rsd.scaffold import init
from rsd.settings import DEFAULT_CONFIG_FILE, Settings, SettingsError, load_settings

logger = logging.getLogger(__name__)

console = Console(stderr=True)


@dataclass(frozen=True)
class DeployResult:
    packaged_files: int
    backup_paths: list[Path] = field(default_factory=list)


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=verbose, show_path=verbose, rich_tracebacks=True)],
        force=True,
    )
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def deploy(settings: Settings) -> DeployResult:
    """
    Package the build dir, upload it, and write a backup of a non-empty response.
    """
    package = pack_project(settings.build_dir)
    client = DeployClient.from_settings(settings)
    response = client.send_package(package)
    logger.info("Deployed")

    backup_paths: list[Path] = []
    if response:
        backup_paths = write_backup(response, settings.backups_dir)
    return DeployResult(packaged_files=len(package), backup_paths=backup_paths)


def _load(args: argparse.Namespace) -> Settings:
    return load_settings(args.config, env_file=args.env_file)


def init_cmd(args: argparse.Namespace) -> int:
    init()
    return 0


def build_cmd(args: argparse.Namespace) -> int:
    result = build(_load(args))
    if result.failed:
        logger.error("%d of %d file(s) failed to build", len(result.failed), len(result.built) + len(result.failed))
        return 1
    return 0


def deploy_cmd(args: argparse.Namespace) -> int:
    settings = _load(args)
    result = deploy(settings)
    if result.backup_paths:
        logger.info("Backed up %d file(s) to %s", len(result.backup_paths), settings.backups_dir)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="rsd", description="Remote scripting development - build and deploy script bundles")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--config", default=DEFAULT_CONFIG_FILE, help=f"Config file (default: {DEFAULT_CONFIG_FILE})")
    p.add_argument("--env-file", default=".env", help="Environment file loaded before RSD_* lookup (default: .env)")
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors")

    sub = p.add_subparsers(dest="command", required=True)

    i = sub.add_parser("init", help="Creates default configuration.")
    i.set_defaults(func=init_cmd)

    b = sub.add_parser("build", help="Builds JavaScript bundles.")
    b.set_defaults(func=build_cmd)

    d = sub.add_parser("deploy", help="Deploys the bundles to a server.")
    d.set_defaults(func=deploy_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    try:
        return int(args.func(args))
    except (SettingsError, CompileError, PackageError, DeployError, BackupError) as e:
        logger.error("%s", e, exc_info=args.verbose)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
