from __future__ import annotations

import allure
import pytest

from task_packager.config import ArchiveSettings, ManifestSettings, Settings

pytestmark = [
    allure.epic("Package Builder"),
    allure.feature("Configuration"),
]


def test_from_env_defaults_match_remote_runtime(clean_env) -> None:
    settings = Settings.from_env()

    assert settings.manifest.task_id == "custom"
    assert settings.manifest.task_name == "custom"
    assert settings.manifest.workspace_name == "workspace"
    assert settings.archive.compression == "stored"
    assert settings.archive.package_file_name == "package.zip"
    assert settings.log_level == "WARNING"
    settings.validate()


def test_from_env_reads_overrides(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("TASK_PACKAGER_MANIFEST_ID", "blender")
    monkeypatch.setenv("TASK_PACKAGER_MANIFEST_NAME", "Blender render")
    monkeypatch.setenv("TASK_PACKAGER_WORKSPACE_NAME", "data")
    monkeypatch.setenv("TASK_PACKAGER_COMPRESSION", " Deflated ")
    monkeypatch.setenv("TASK_PACKAGER_PACKAGE_FILE_NAME", "job.zip")
    monkeypatch.setenv("TASK_PACKAGER_LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.manifest == ManifestSettings(
        task_id="blender",
        task_name="Blender render",
        workspace_name="data",
    )
    assert settings.archive == ArchiveSettings(compression="deflated", package_file_name="job.zip")
    assert settings.log_level == "DEBUG"
    settings.validate()


def test_validate_rejects_empty_manifest_id() -> None:
    settings = Settings(manifest=ManifestSettings(task_id="  "))

    with pytest.raises(ValueError, match="TASK_PACKAGER_MANIFEST_ID"):
        settings.validate()


def test_validate_rejects_empty_manifest_name() -> None:
    settings = Settings(manifest=ManifestSettings(task_name=""))

    with pytest.raises(ValueError, match="TASK_PACKAGER_MANIFEST_NAME"):
        settings.validate()


@pytest.mark.parametrize("workspace_name", ["", "..", "a/b", "a\\b"])
def test_validate_rejects_non_flat_workspace_name(workspace_name: str) -> None:
    settings = Settings(manifest=ManifestSettings(workspace_name=workspace_name))

    with pytest.raises(ValueError, match="TASK_PACKAGER_WORKSPACE_NAME"):
        settings.validate()


def test_validate_rejects_unknown_compression() -> None:
    settings = Settings(archive=ArchiveSettings(compression="lzma"))

    with pytest.raises(ValueError, match="TASK_PACKAGER_COMPRESSION"):
        settings.validate()


def test_validate_rejects_nested_package_file_name() -> None:
    settings = Settings(archive=ArchiveSettings(package_file_name="out/package.zip"))

    with pytest.raises(ValueError, match="TASK_PACKAGER_PACKAGE_FILE_NAME"):
        settings.validate()


def test_validate_rejects_unknown_log_level() -> None:
    settings = Settings(log_level="VERBOSE")

    with pytest.raises(ValueError, match="TASK_PACKAGER_LOG_LEVEL"):
        settings.validate()
