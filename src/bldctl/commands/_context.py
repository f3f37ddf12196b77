"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns the lazily-built planner and centralized result
emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from bldctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from bldctl.config.settings import BldSettings
    from bldctl.services.planner import BuildPlanner
    from bldctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The planner is created on first use so ``--help`` and ``--version``
    never load plugins or touch git.
    """

    def __init__(self, settings: BldSettings) -> None:
        self.settings = settings
        self._planner: BuildPlanner | None = None

        from bldctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def planner(self) -> BuildPlanner:
        """The build planner (created lazily on first access)."""
        if self._planner is None:
            from bldctl.services.planner import BuildPlanner

            self._planner = BuildPlanner(self.settings)
        return self._planner

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: stdout, normal return. Warnings go to stderr so they
          don't pollute piped output.
        * Failure: stderr, exit code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(result.exit_code)
