"""Deployable task-package builder.

Assembles one executable module and any auxiliary files into a zip archive,
appends a generated ``manifest.json`` describing how to run it, and seals the
result under a SHA3-512 content digest.
"""

from task_packager.packaging.builder import ArchiveBuilder, BuilderState, build_package
from task_packager.packaging.digest import DIGEST_SIZE, compute_digest, digest_file, verify_digest
from task_packager.packaging.errors import (
    ArchiveFormatError,
    BuilderSealedError,
    DuplicateEntryError,
    InvalidInputError,
    ManifestError,
    MissingModuleError,
    PackageError,
    PackageIOError,
    PackageReleasedError,
    ReservedEntryError,
)
from task_packager.packaging.manifest import (
    MANIFEST_FILE_NAME,
    EntryPoint,
    MountPoint,
    PackageManifest,
    build_manifest,
)
from task_packager.packaging.reader import PackageListing, read_package
from task_packager.packaging.sealed import PackageOwnership, SealedPackage

__all__ = [
    "DIGEST_SIZE",
    "MANIFEST_FILE_NAME",
    "ArchiveBuilder",
    "ArchiveFormatError",
    "BuilderSealedError",
    "BuilderState",
    "DuplicateEntryError",
    "EntryPoint",
    "InvalidInputError",
    "ManifestError",
    "MissingModuleError",
    "MountPoint",
    "PackageError",
    "PackageIOError",
    "PackageListing",
    "PackageManifest",
    "PackageOwnership",
    "PackageReleasedError",
    "ReservedEntryError",
    "SealedPackage",
    "build_manifest",
    "build_package",
    "compute_digest",
    "digest_file",
    "read_package",
    "verify_digest",
]
