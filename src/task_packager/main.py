"""CLI entrypoint for task-packager."""

from __future__ import annotations

import logging
from pathlib import Path

import rich_click as click

from task_packager import __version__
from task_packager.config import SUPPORTED_LOG_LEVELS, Settings
from task_packager.controllers import (
    PackageBuildCommand,
    PackageInspectCommand,
    PackagerCliController,
)
from task_packager.packaging.errors import PackageError

click.rich_click.USE_MARKDOWN = True
PACKAGER_CONTROLLER = PackagerCliController()


@click.group()
@click.version_option(version=__version__, prog_name="task-packager")
@click.option(
    "--log-level",
    type=click.Choice(SUPPORTED_LOG_LEVELS, case_sensitive=False),
    default=lambda: Settings.from_env().log_level,
    show_default="TASK_PACKAGER_LOG_LEVEL or WARNING",
    help="Logging verbosity.",
)
def task_packager(log_level: str) -> None:
    """Task package builder CLI."""

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@task_packager.command("build")
@click.argument("module", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--file",
    "files",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Auxiliary file to include. Can be repeated; order is preserved.",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Keep the sealed package at this path instead of a temporary workspace.",
)
def build(module: Path, files: tuple[Path, ...], output: Path | None) -> None:
    """Seal MODULE and auxiliary files into a package and print its digest."""

    try:
        lines = PACKAGER_CONTROLLER.build(
            PackageBuildCommand(module=module, files=files, output=output),
        )
    except (PackageError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


@task_packager.command("inspect")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--digest",
    "expected_digest",
    default=None,
    help="Expected hex SHA3-512 digest; the command fails on mismatch.",
)
def inspect(path: Path, expected_digest: str | None) -> None:
    """List entries and manifest of a sealed package."""

    try:
        result = PACKAGER_CONTROLLER.inspect(
            PackageInspectCommand(path=path, expected_digest=expected_digest),
        )
    except (PackageError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(result.lines)
    if not result.success:
        raise click.ClickException("Package digest does not match.")


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    task_packager()
