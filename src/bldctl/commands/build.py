"""Commands: build-and-install and dev deployment."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from bldctl.commands._base import BldCommand

if TYPE_CHECKING:
    from bldctl.commands._context import AppContext


@click.command(
    cls=BldCommand,
    examples="""\
  bldctl build
  bldctl -v build
  bldctl --json build""",
)
@click.pass_obj
def build(app: AppContext) -> None:
    """Build the project and install it locally.

    Refuses to run with local dependencies or a dirty working tree.
    """
    app.emit(app.planner.build())


@click.command(
    "deploy-dev",
    cls=BldCommand,
    examples="""\
  bldctl deploy-dev
  BLDCTL_PIPELINE__DEV_REPOSITORY=https://pypi.example/dev bldctl deploy-dev""",
)
@click.pass_obj
def deploy_dev(app: AppContext) -> None:
    """Build a dev version and publish it to the dev repository.

    Requires the ``dev`` version qualifier on top of the build preconditions.
    """
    app.emit(app.planner.deploy_dev())
