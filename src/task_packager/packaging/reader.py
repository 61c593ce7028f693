"""Read-only inspection of sealed package archives."""

from __future__ import annotations

import zipfile
from dataclasses import dataclass
from pathlib import Path

from task_packager.packaging.digest import digest_file
from task_packager.packaging.errors import ManifestError, PackageIOError
from task_packager.packaging.manifest import (
    MANIFEST_FILE_NAME,
    PackageManifest,
    manifest_from_bytes,
)


@dataclass(frozen=True, slots=True)
class PackageListing:
    """Contents of a sealed archive as seen by a remote verifier."""

    path: Path
    entry_names: tuple[str, ...]
    manifest: PackageManifest
    digest: bytes

    @property
    def hex_digest(self) -> str:
        return self.digest.hex()


def read_package(path: Path) -> PackageListing:
    """Open a package, validate its manifest against the entries, and hash it."""

    try:
        with zipfile.ZipFile(path) as archive:
            entry_names = tuple(info.filename for info in archive.infolist())
            _check_manifest_placement(entry_names)
            manifest = manifest_from_bytes(archive.read(MANIFEST_FILE_NAME))
        digest = digest_file(path)
    except zipfile.BadZipFile as error:
        raise ManifestError(f"{path} is not a valid package archive") from error
    except OSError as error:
        raise PackageIOError(f"Cannot read package {path}: {error}", path=str(path)) from error

    missing = [name for name in manifest.wasm_paths if name not in entry_names]
    if missing:
        raise ManifestError(
            f"Manifest references entries missing from the archive: {', '.join(missing)}",
        )
    return PackageListing(
        path=path,
        entry_names=entry_names,
        manifest=manifest,
        digest=digest,
    )


def read_entry(path: Path, name: str) -> bytes:
    """Return the stored bytes of one archive entry."""

    try:
        with zipfile.ZipFile(path) as archive:
            return archive.read(name)
    except KeyError as error:
        raise ManifestError(f"{path} has no entry named {name!r}") from error
    except zipfile.BadZipFile as error:
        raise ManifestError(f"{path} is not a valid package archive") from error
    except OSError as error:
        raise PackageIOError(f"Cannot read package {path}: {error}", path=str(path)) from error


def _check_manifest_placement(entry_names: tuple[str, ...]) -> None:
    count = entry_names.count(MANIFEST_FILE_NAME)
    if count != 1:
        raise ManifestError(
            f"Package must contain exactly one {MANIFEST_FILE_NAME}, found {count}",
        )
    if entry_names[-1] != MANIFEST_FILE_NAME:
        raise ManifestError(f"{MANIFEST_FILE_NAME} must be the last archive entry")
