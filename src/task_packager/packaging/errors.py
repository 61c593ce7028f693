"""Error taxonomy for package building and sealing."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class PackageError(Exception):
    """Base packaging error."""

    message: str
    code: str = "package_error"

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class InvalidInputError(PackageError):
    """Supplied path or entry name cannot be stored in the archive."""

    code: str = "invalid_input"


@dataclass(slots=True)
class DuplicateEntryError(InvalidInputError):
    """Entry name already present in the archive."""

    entry_name: str = ""
    code: str = "duplicate_entry"


@dataclass(slots=True)
class ReservedEntryError(InvalidInputError):
    """Entry name is reserved for the generated manifest."""

    entry_name: str = ""
    code: str = "reserved_entry"


@dataclass(slots=True)
class MissingModuleError(PackageError):
    """Sealing attempted before any module was registered."""

    code: str = "missing_module"


@dataclass(slots=True)
class PackageIOError(PackageError):
    """Filesystem failure while reading sources or writing/removing a package."""

    path: str | None = None
    code: str = "io_error"


@dataclass(slots=True)
class ArchiveFormatError(PackageError):
    """Zip container could not be finalized."""

    code: str = "archive_format"


@dataclass(slots=True)
class BuilderSealedError(PackageError):
    """Builder was used after it had been consumed by seal."""

    code: str = "builder_sealed"


@dataclass(slots=True)
class PackageReleasedError(PackageError):
    """Sealed package was used after its file was released or detached."""

    code: str = "package_released"


@dataclass(slots=True)
class ManifestError(PackageError):
    """Manifest is malformed or inconsistent with the archive entries."""

    code: str = "invalid_manifest"
