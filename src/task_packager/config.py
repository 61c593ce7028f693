"""Runtime configuration for package building."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

SUPPORTED_COMPRESSION = ("stored", "deflated")
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(slots=True)
class ManifestSettings:
    """Identifiers written into the generated manifest."""

    task_id: str = "custom"
    task_name: str = "custom"
    workspace_name: str = "workspace"


@dataclass(slots=True)
class ArchiveSettings:
    """Zip container settings."""

    compression: str = "stored"
    package_file_name: str = "package.zip"


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    manifest: ManifestSettings = field(default_factory=ManifestSettings)
    archive: ArchiveSettings = field(default_factory=ArchiveSettings)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment with defaults matching the remote runtime."""

        return cls(
            manifest=ManifestSettings(
                task_id=os.getenv("TASK_PACKAGER_MANIFEST_ID", "custom"),
                task_name=os.getenv("TASK_PACKAGER_MANIFEST_NAME", "custom"),
                workspace_name=os.getenv("TASK_PACKAGER_WORKSPACE_NAME", "workspace"),
            ),
            archive=ArchiveSettings(
                compression=os.getenv("TASK_PACKAGER_COMPRESSION", "stored").strip().lower(),
                package_file_name=os.getenv("TASK_PACKAGER_PACKAGE_FILE_NAME", "package.zip"),
            ),
            log_level=os.getenv("TASK_PACKAGER_LOG_LEVEL", "WARNING").strip().upper(),
        )

    def validate(self) -> None:
        """Raise configuration error if any setting cannot produce a valid package."""

        if not self.manifest.task_id.strip():
            raise ValueError("TASK_PACKAGER_MANIFEST_ID must be a non-empty string.")
        if not self.manifest.task_name.strip():
            raise ValueError("TASK_PACKAGER_MANIFEST_NAME must be a non-empty string.")
        _validate_flat_name(
            "TASK_PACKAGER_WORKSPACE_NAME",
            self.manifest.workspace_name,
        )
        if self.archive.compression not in SUPPORTED_COMPRESSION:
            raise ValueError(
                f"Invalid TASK_PACKAGER_COMPRESSION: {self.archive.compression!r}. "
                f"Expected one of: {', '.join(SUPPORTED_COMPRESSION)}.",
            )
        _validate_flat_name(
            "TASK_PACKAGER_PACKAGE_FILE_NAME",
            self.archive.package_file_name,
        )
        if self.log_level not in SUPPORTED_LOG_LEVELS:
            raise ValueError(
                f"Invalid TASK_PACKAGER_LOG_LEVEL: {self.log_level!r}. "
                f"Expected one of: {', '.join(SUPPORTED_LOG_LEVELS)}.",
            )


def _validate_flat_name(name: str, value: str) -> None:
    normalized = value.strip()
    if not normalized or normalized in {".", ".."}:
        raise ValueError(f"{name} must be a non-empty file name.")
    if "/" in normalized or "\\" in normalized:
        raise ValueError(f"{name} must not contain path separators: {value!r}")
