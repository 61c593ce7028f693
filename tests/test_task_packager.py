from __future__ import annotations

import re
from pathlib import Path

import allure
from click.testing import CliRunner

from task_packager import __version__
from task_packager.main import task_packager

pytestmark = [
    allure.epic("Package Builder"),
    allure.feature("CLI"),
]


def _line_value(output: str, prefix: str) -> str:
    match = re.search(rf"^{prefix}: (.+)$", output, flags=re.MULTILINE)
    assert match is not None, output
    return match.group(1).strip()


def test_version():
    assert __version__


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(task_packager, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_build_keeps_package_with_output(
    tmp_path: Path,
    module_file: Path,
    input_file: Path,
    clean_env,
) -> None:
    output = tmp_path / "dist" / "package.zip"
    runner = CliRunner()

    result = runner.invoke(
        task_packager,
        ["build", str(module_file), "--file", str(input_file), "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert output.exists()
    assert _line_value(result.output, "Entries") == "task.wasm, input.txt, manifest.json"
    assert len(bytes.fromhex(_line_value(result.output, "Digest"))) == 64


def test_build_without_output_uses_temporary_workspace(
    module_file: Path,
    clean_env,
) -> None:
    runner = CliRunner()

    result = runner.invoke(task_packager, ["build", str(module_file)])

    assert result.exit_code == 0, result.output
    package_path = Path(_line_value(result.output, "Package"))
    assert package_path.name == "package.zip"
    assert not package_path.exists()
    assert not package_path.parent.exists()


def test_build_reports_duplicate_entry(tmp_path: Path, module_file: Path, clean_env) -> None:
    output = tmp_path / "p.zip"
    runner = CliRunner()

    result = runner.invoke(
        task_packager,
        ["build", str(module_file), "--file", str(module_file), "--output", str(output)],
    )

    assert result.exit_code != 0
    assert "already contains an entry named 'task.wasm'" in result.output
    assert not output.exists()


def test_build_rejects_invalid_configuration(module_file: Path, clean_env, monkeypatch) -> None:
    monkeypatch.setenv("TASK_PACKAGER_COMPRESSION", "lzma")
    runner = CliRunner()

    result = runner.invoke(task_packager, ["build", str(module_file)])

    assert result.exit_code != 0
    assert "TASK_PACKAGER_COMPRESSION" in result.output


def test_inspect_verifies_expected_digest(tmp_path: Path, module_file: Path, clean_env) -> None:
    package_path = tmp_path / "package.zip"
    runner = CliRunner()
    built = runner.invoke(
        task_packager,
        ["build", str(module_file), "--output", str(package_path)],
    )
    digest = _line_value(built.output, "Digest")

    ok = runner.invoke(task_packager, ["inspect", str(package_path), "--digest", digest])
    assert ok.exit_code == 0, ok.output
    assert "entry-point: id=task wasm-path=task.wasm" in ok.output
    assert "mount-point: rw=workspace" in ok.output
    assert "Digest check: ok" in ok.output

    wrong = "00" * 64
    mismatch = runner.invoke(task_packager, ["inspect", str(package_path), "--digest", wrong])
    assert mismatch.exit_code != 0
    assert "MISMATCH" in mismatch.output


def test_build_uses_workspace_name_from_environment(
    tmp_path: Path,
    module_file: Path,
    clean_env,
    monkeypatch,
) -> None:
    monkeypatch.setenv("TASK_PACKAGER_WORKSPACE_NAME", "data")
    output = tmp_path / "package.zip"
    runner = CliRunner()

    runner.invoke(task_packager, ["build", str(module_file), "--output", str(output)])
    result = runner.invoke(task_packager, ["inspect", str(output)])

    assert result.exit_code == 0, result.output
    assert "mount-point: rw=data" in result.output
