"""Controllers for package CLI commands."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from tempfile import TemporaryDirectory

from task_packager.config import Settings
from task_packager.packaging import (
    SealedPackage,
    build_package,
    read_package,
)
from task_packager.packaging.digest import parse_hex_digest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PackageBuildCommand:
    """CLI input for sealing a package."""

    module: Path
    files: tuple[Path, ...]
    output: Path | None


@dataclass(slots=True)
class PackageInspectCommand:
    """CLI input for package inspection."""

    path: Path
    expected_digest: str | None


@dataclass(slots=True)
class PackageInspectResult:
    """Inspection report to render in CLI."""

    lines: list[str]
    success: bool


class PackagerCliController:
    """Coordinates package build and inspection CLI operations."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    def build(self, command: PackageBuildCommand) -> list[str]:
        settings = self._load_settings()
        if command.output is not None:
            package = build_package(
                command.module,
                command.output,
                files=command.files,
                settings=settings,
                logger=logger,
            )
            kept_path = package.detach()
            return [*_package_lines(package), f"Kept: {kept_path}"]

        with TemporaryDirectory(prefix="task-packager-") as workspace:
            logger.info("Workspace created in '%s'", workspace)
            package_path = Path(workspace) / settings.archive.package_file_name
            with build_package(
                command.module,
                package_path,
                files=command.files,
                settings=settings,
                logger=logger,
            ) as package:
                logger.info("Package digest: '%s'", package.hex_digest)
                return _package_lines(package)

    def inspect(self, command: PackageInspectCommand) -> PackageInspectResult:
        listing = read_package(command.path)
        lines = [
            f"Package: {listing.path}",
            f"Digest: {listing.hex_digest}",
            f"Entries: {', '.join(listing.entry_names)}",
            f"Manifest: id={listing.manifest.id} name={listing.manifest.name}",
        ]
        lines.extend(
            f"  entry-point: id={entry.id} wasm-path={entry.wasm_path}"
            for entry in listing.manifest.entry_points
        )
        lines.extend(
            f"  mount-point: {mount.access}={mount.path}"
            for mount in listing.manifest.mount_points
        )

        if command.expected_digest is None:
            return PackageInspectResult(lines=lines, success=True)
        matches = parse_hex_digest(command.expected_digest) == listing.digest
        lines.append(f"Digest check: {'ok' if matches else 'MISMATCH'}")
        return PackageInspectResult(lines=lines, success=matches)

    def _load_settings(self) -> Settings:
        settings = self._settings or Settings.from_env()
        settings.validate()
        return settings


def _package_lines(package: SealedPackage) -> list[str]:
    return [
        f"Package: {package.path}",
        f"Digest: {package.hex_digest}",
        f"Entries: {', '.join(package.entry_names)}",
    ]
