"""Manifest descriptor derived from the modules stored in a package."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from task_packager.config import ManifestSettings
from task_packager.packaging.errors import ManifestError, MissingModuleError

MANIFEST_FILE_NAME = "manifest.json"
MOUNT_ACCESS_RW = "rw"


@dataclass(frozen=True, slots=True)
class EntryPoint:
    """Runnable module declared by the manifest."""

    id: str
    wasm_path: str


@dataclass(frozen=True, slots=True)
class MountPoint:
    """Directory mounted inside the execution sandbox."""

    path: str
    access: str = MOUNT_ACCESS_RW


@dataclass(frozen=True, slots=True)
class PackageManifest:
    """Descriptor telling the remote runtime how to run the package."""

    id: str
    name: str
    entry_points: tuple[EntryPoint, ...]
    mount_points: tuple[MountPoint, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "entry-points": [
                {"id": entry.id, "wasm-path": entry.wasm_path} for entry in self.entry_points
            ],
            "mount-points": [{mount.access: mount.path} for mount in self.mount_points],
        }

    @property
    def wasm_paths(self) -> tuple[str, ...]:
        return tuple(entry.wasm_path for entry in self.entry_points)


def derive_entry_point_id(file_name: str) -> str:
    """Return the runtime id for a stored module name.

    The id is the text before the first dot, so ``task.debug.wasm`` maps to
    ``task``. Names without a dot, or starting with one, are used unchanged.
    This differs from a file-stem rule that strips only the last extension
    (``task.debug.wasm`` -> ``task.debug``); remote runtimes already key
    entry points on the first segment, so that rule is kept on purpose.
    """

    head, _, _ = file_name.partition(".")
    return head or file_name


def build_manifest(
    module_names: Sequence[str],
    settings: ManifestSettings | None = None,
) -> PackageManifest:
    """Build the manifest for modules stored under ``module_names``."""

    if not module_names:
        raise MissingModuleError("Cannot build manifest: no module was added to the package.")
    settings = settings or ManifestSettings()
    return PackageManifest(
        id=settings.task_id,
        name=settings.task_name,
        entry_points=tuple(
            EntryPoint(id=derive_entry_point_id(name), wasm_path=name) for name in module_names
        ),
        mount_points=(MountPoint(path=settings.workspace_name),),
    )


def manifest_to_bytes(manifest: PackageManifest) -> bytes:
    """Serialize manifest as compact UTF-8 JSON with a stable key order."""

    return json.dumps(manifest.to_payload(), ensure_ascii=False, separators=(",", ":")).encode(
        "utf-8",
    )


def manifest_from_bytes(data: bytes) -> PackageManifest:
    """Deserialize and validate a manifest document."""

    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise ManifestError(f"{MANIFEST_FILE_NAME} is not valid JSON") from error
    if not isinstance(raw, dict):
        raise ManifestError(f"Expected JSON object in {MANIFEST_FILE_NAME}")

    manifest_id = raw.get("id")
    name = raw.get("name")
    if not isinstance(manifest_id, str) or not manifest_id.strip():
        raise ManifestError("manifest.id must be a non-empty string")
    if not isinstance(name, str) or not name.strip():
        raise ManifestError("manifest.name must be a non-empty string")

    return PackageManifest(
        id=manifest_id,
        name=name,
        entry_points=_read_entry_points(raw.get("entry-points")),
        mount_points=_read_mount_points(raw.get("mount-points", [])),
    )


def _read_entry_points(raw_entries: object) -> tuple[EntryPoint, ...]:
    if not isinstance(raw_entries, list) or not raw_entries:
        raise ManifestError("manifest.entry-points must be a non-empty array")
    entries: list[EntryPoint] = []
    for item in raw_entries:
        if not isinstance(item, dict):
            raise ManifestError("manifest.entry-points entry must be an object")
        entry_id = item.get("id")
        wasm_path = item.get("wasm-path")
        if not isinstance(entry_id, str) or not entry_id:
            raise ManifestError("manifest.entry-points.id must be a non-empty string")
        if not isinstance(wasm_path, str) or not wasm_path:
            raise ManifestError("manifest.entry-points.wasm-path must be a non-empty string")
        entries.append(EntryPoint(id=entry_id, wasm_path=wasm_path))
    return tuple(entries)


def _read_mount_points(raw_mounts: object) -> tuple[MountPoint, ...]:
    if not isinstance(raw_mounts, list):
        raise ManifestError("manifest.mount-points must be an array")
    mounts: list[MountPoint] = []
    for item in raw_mounts:
        if not isinstance(item, dict) or len(item) != 1:
            raise ManifestError("manifest.mount-points entry must be a single-key object")
        ((access, path),) = item.items()
        if not isinstance(path, str) or not path:
            raise ManifestError(f"manifest.mount-points.{access} must be a non-empty string")
        mounts.append(MountPoint(path=path, access=access))
    return tuple(mounts)
