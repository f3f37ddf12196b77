"""Subcommand modules for bldctl.

Provides register_commands() which uses deferred imports to keep
``bldctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    # --- Pipelines ---
    from bldctl.commands.build import build, deploy_dev

    cli.add_command(build)
    cli.add_command(deploy_dev)

    # --- Inspection ---
    from bldctl.commands.info import check, deps, print_version, status

    cli.add_command(print_version)
    cli.add_command(deps)
    cli.add_command(check)
    cli.add_command(status)
