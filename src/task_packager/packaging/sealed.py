"""Sealed package: the finalized archive file and its digest."""

from __future__ import annotations

import logging
import weakref
from enum import Enum
from pathlib import Path
from types import TracebackType

from task_packager.packaging.digest import verify_digest
from task_packager.packaging.errors import PackageIOError, PackageReleasedError
from task_packager.packaging.manifest import PackageManifest


class PackageOwnership(str, Enum):
    """Who is responsible for the archive file on disk."""

    OWNED = "owned"
    RELEASED = "released"
    DETACHED = "detached"


class SealedPackage:
    """Immutable handle owning a sealed archive file.

    The file is removed when the ``with`` block exits, or when the handle is
    garbage-collected, unless ``detach()`` hands it over to the caller.
    """

    def __init__(
        self,
        *,
        path: Path,
        digest: bytes,
        manifest: PackageManifest,
        entry_names: tuple[str, ...],
        logger: logging.Logger | None = None,
    ) -> None:
        self._path = path
        self._digest = digest
        self._manifest = manifest
        self._entry_names = entry_names
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._ownership = PackageOwnership.OWNED
        self._finalizer = weakref.finalize(self, _discard_file, path, self._logger)

    def __enter__(self) -> SealedPackage:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if self._finalizer.alive:
            self._ownership = PackageOwnership.RELEASED
            self._finalizer()

    def __repr__(self) -> str:
        return (
            f"SealedPackage(path={str(self._path)!r}, digest={self.hex_digest[:16]}..., "
            f"ownership={self._ownership.value})"
        )

    @property
    def path(self) -> Path:
        return self._path

    @property
    def digest(self) -> bytes:
        return self._digest

    @property
    def hex_digest(self) -> str:
        return self._digest.hex()

    @property
    def manifest(self) -> PackageManifest:
        return self._manifest

    @property
    def entry_names(self) -> tuple[str, ...]:
        return self._entry_names

    @property
    def ownership(self) -> PackageOwnership:
        return self._ownership

    def release(self) -> None:
        """Delete the archive now; unlike scope exit, failures are raised."""

        if self._ownership is PackageOwnership.RELEASED:
            return
        if self._ownership is PackageOwnership.DETACHED:
            raise PackageReleasedError(f"Package at {self._path} was detached and is not owned")
        try:
            self._path.unlink()
        except OSError as error:
            raise PackageIOError(
                f"Cannot remove package {self._path}: {error}",
                path=str(self._path),
            ) from error
        self._finalizer.detach()
        self._ownership = PackageOwnership.RELEASED
        self._logger.debug("Released package '%s'", self._path)

    def detach(self) -> Path:
        """Stop owning the archive so it outlives this handle."""

        self._ensure_available()
        self._finalizer.detach()
        self._ownership = PackageOwnership.DETACHED
        return self._path

    def read_bytes(self) -> bytes:
        self._ensure_available()
        try:
            return self._path.read_bytes()
        except OSError as error:
            raise PackageIOError(
                f"Cannot read package {self._path}: {error}",
                path=str(self._path),
            ) from error

    def verify(self) -> bool:
        """Re-hash the file on disk and compare it with the sealed digest."""

        self._ensure_available()
        try:
            return verify_digest(self._path, self._digest)
        except OSError as error:
            raise PackageIOError(
                f"Cannot read package {self._path}: {error}",
                path=str(self._path),
            ) from error

    def _ensure_available(self) -> None:
        if self._ownership is PackageOwnership.RELEASED:
            raise PackageReleasedError(f"Package at {self._path} was already released")


def _discard_file(path: Path, logger: logging.Logger) -> None:
    try:
        path.unlink()
    except OSError as error:
        logger.warning("Failed to remove package file '%s': %s", path, error)
    else:
        logger.debug("Removed package file '%s'", path)
