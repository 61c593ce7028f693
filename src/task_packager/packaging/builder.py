"""One-shot archive builder producing sealed task packages."""

from __future__ import annotations

import io
import logging
import os
import stat
import tempfile
import zipfile
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from task_packager.config import Settings
from task_packager.packaging.digest import compute_digest
from task_packager.packaging.errors import (
    ArchiveFormatError,
    BuilderSealedError,
    DuplicateEntryError,
    InvalidInputError,
    PackageIOError,
    ReservedEntryError,
)
from task_packager.packaging.manifest import (
    MANIFEST_FILE_NAME,
    PackageManifest,
    build_manifest,
    manifest_to_bytes,
)
from task_packager.packaging.sealed import SealedPackage

# Earliest timestamp the zip format can store; keeps archives reproducible.
_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_ENTRY_MODE = stat.S_IFREG | 0o644
_CREATE_SYSTEM_UNIX = 3
_COMPRESSION = {
    "stored": zipfile.ZIP_STORED,
    "deflated": zipfile.ZIP_DEFLATED,
}


class BuilderState(str, Enum):
    """Builder lifecycle states."""

    BUILDING = "building"
    SEALED = "sealed"


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    """One caller-supplied file stored in the archive."""

    name: str
    data: bytes
    is_module: bool = False


class ArchiveBuilder:
    """Accumulates flat-named entries and seals them into a package exactly once."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.settings.validate()
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._entries: list[ArchiveEntry] = []
        self._names: set[str] = set()
        self._state = BuilderState.BUILDING

    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def entries(self) -> tuple[ArchiveEntry, ...]:
        return tuple(self._entries)

    @property
    def entry_names(self) -> tuple[str, ...]:
        return tuple(entry.name for entry in self._entries)

    @property
    def module_names(self) -> tuple[str, ...]:
        return tuple(entry.name for entry in self._entries if entry.is_module)

    @property
    def primary_module_name(self) -> str | None:
        """Stored name of the most recently added module."""

        modules = self.module_names
        return modules[-1] if modules else None

    def add_module(self, path: Path | str) -> str:
        """Store an executable module under its base name and register it as an entry point."""

        return self._add_path(path, is_module=True)

    def add_file(self, path: Path | str) -> str:
        """Store an auxiliary file under its base name."""

        return self._add_path(path, is_module=False)

    def add_bytes(self, name: str, data: bytes, *, module: bool = False) -> str:
        """Store in-memory content under a flat entry name."""

        self._ensure_building()
        self._append(ArchiveEntry(name=name, data=bytes(data), is_module=module))
        return name

    def seal(self, destination: Path | str) -> SealedPackage:
        """Finalize the archive, hash it and persist it to ``destination``.

        The builder is consumed once finalization starts: a failure while
        writing still leaves it unusable and produces no package.
        """

        self._ensure_building()
        destination = Path(destination)
        manifest = build_manifest(self.module_names, self.settings.manifest)

        entries = self._entries
        self._entries = []
        self._names = set()
        self._state = BuilderState.SEALED

        payload = _finalize_archive(
            entries,
            manifest,
            compression=_COMPRESSION[self.settings.archive.compression],
        )
        digest = compute_digest(payload)
        _persist_atomically(payload, destination)

        package = SealedPackage(
            path=destination,
            digest=digest,
            manifest=manifest,
            entry_names=(*(entry.name for entry in entries), MANIFEST_FILE_NAME),
            logger=self._logger,
        )
        self._logger.info("Package sealed at '%s' digest=%s", destination, package.hex_digest)
        return package

    def _add_path(self, path: Path | str, *, is_module: bool) -> str:
        self._ensure_building()
        source = Path(path)
        name = source.name
        if not name or name in {".", ".."}:
            raise InvalidInputError(f"Cannot extract a file name from path: {str(path)!r}")
        self._check_name(name)
        try:
            data = source.read_bytes()
        except OSError as error:
            raise PackageIOError(f"Cannot read {source}: {error}", path=str(source)) from error
        self._append(ArchiveEntry(name=name, data=data, is_module=is_module))
        return name

    def _append(self, entry: ArchiveEntry) -> None:
        self._check_name(entry.name)
        self._entries.append(entry)
        self._names.add(entry.name)
        self._logger.debug(
            "Added %s '%s' (%d bytes)",
            "module" if entry.is_module else "file",
            entry.name,
            len(entry.data),
        )

    def _check_name(self, name: str) -> None:
        if not name or name in {".", ".."} or "/" in name or "\\" in name:
            raise InvalidInputError(f"Invalid archive entry name: {name!r}")
        try:
            name.encode("utf-8")
        except UnicodeEncodeError as error:
            raise InvalidInputError(f"Archive entry name is not valid UTF-8: {name!r}") from error
        if name == MANIFEST_FILE_NAME:
            raise ReservedEntryError(
                f"Entry name {name!r} is reserved for the generated manifest",
                entry_name=name,
            )
        if name in self._names:
            raise DuplicateEntryError(
                f"Archive already contains an entry named {name!r}",
                entry_name=name,
            )

    def _ensure_building(self) -> None:
        if self._state is not BuilderState.BUILDING:
            raise BuilderSealedError("Archive builder was already sealed and cannot be reused")


def build_package(
    module: Path | str,
    destination: Path | str,
    *,
    files: Iterable[Path | str] = (),
    settings: Settings | None = None,
    logger: logging.Logger | None = None,
) -> SealedPackage:
    """Seal ``module`` followed by ``files`` (in the given order) into ``destination``."""

    builder = ArchiveBuilder(settings, logger=logger)
    builder.add_module(module)
    for path in files:
        builder.add_file(path)
    return builder.seal(destination)


def _finalize_archive(
    entries: Iterable[ArchiveEntry],
    manifest: PackageManifest,
    *,
    compression: int,
) -> bytes:
    buffer = io.BytesIO()
    try:
        with zipfile.ZipFile(buffer, mode="w", compression=compression) as archive:
            for entry in entries:
                archive.writestr(_zip_info(entry.name, compression), entry.data)
            archive.writestr(
                _zip_info(MANIFEST_FILE_NAME, compression),
                manifest_to_bytes(manifest),
            )
    except (ValueError, zipfile.BadZipFile, zipfile.LargeZipFile) as error:
        raise ArchiveFormatError(f"Cannot finalize package archive: {error}") from error
    return buffer.getvalue()


def _zip_info(name: str, compression: int) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(filename=name, date_time=_FIXED_DATE_TIME)
    info.compress_type = compression
    info.create_system = _CREATE_SYSTEM_UNIX
    info.external_attr = _ENTRY_MODE << 16
    return info


def _persist_atomically(payload: bytes, destination: Path) -> None:
    tmp_path: Path | None = None
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.",
            suffix=".tmp",
            dir=destination.parent,
        )
        tmp_path = Path(tmp_name)
        with os.fdopen(fd, "wb") as handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, destination)
    except OSError as error:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)
        raise PackageIOError(
            f"Cannot write package to {destination}: {error}",
            path=str(destination),
        ) from error
