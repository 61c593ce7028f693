"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

WASM_BYTES = b"\x00asm\x01\x00\x00\x00"


@pytest.fixture()
def module_file(tmp_path: Path) -> Path:
    path = tmp_path / "src" / "task.wasm"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(WASM_BYTES)
    return path


@pytest.fixture()
def input_file(tmp_path: Path) -> Path:
    path = tmp_path / "src" / "input.txt"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("hello", "utf-8")
    return path


@pytest.fixture()
def clean_env(monkeypatch):
    """Drop TASK_PACKAGER_* overrides inherited from the developer shell."""
    for name in (
        "TASK_PACKAGER_MANIFEST_ID",
        "TASK_PACKAGER_MANIFEST_NAME",
        "TASK_PACKAGER_WORKSPACE_NAME",
        "TASK_PACKAGER_COMPRESSION",
        "TASK_PACKAGER_PACKAGE_FILE_NAME",
        "TASK_PACKAGER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
