"""Commands that inspect the project without building it."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from bldctl.commands._base import BldCommand

if TYPE_CHECKING:
    from bldctl.commands._context import AppContext


@click.command(
    "print-version",
    cls=BldCommand,
    examples="""\
  bldctl print-version
  bldctl -q print-version""",
)
@click.pass_obj
def print_version(app: AppContext) -> None:
    """Print the version a build would produce right now."""
    app.emit(app.planner.print_version())


@click.command(
    cls=BldCommand,
    examples="""\
  bldctl deps
  bldctl deps --paths
  bldctl --json deps""",
)
@click.option("--paths", is_flag=True, help="Show source/resource paths instead of dependencies.")
@click.pass_obj
def deps(app: AppContext, paths: bool) -> None:
    """Resolve and list the project's dependencies.

    Git dependencies are cloned and built as part of resolution.
    """
    app.emit(app.planner.resource_paths() if paths else app.planner.resolve())


@click.command(
    cls=BldCommand,
    examples="""\
  bldctl check
  bldctl check --dev""",
)
@click.option("--dev", "require_dev", is_flag=True, help="Also require the dev qualifier.")
@click.pass_obj
def check(app: AppContext, require_dev: bool) -> None:
    """Check build preconditions without building."""
    app.emit(app.planner.check(require_dev=require_dev))


@click.command(
    cls=BldCommand,
    examples="""\
  bldctl status
  bldctl --json status""",
)
@click.pass_obj
def status(app: AppContext) -> None:
    """Show the working tree state that feeds dev versions."""
    app.emit(app.planner.status())
