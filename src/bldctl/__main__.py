"""``python -m bldctl`` — same as the ``bldctl`` script."""

from bldctl.cli import cli

cli(prog_name="bldctl")
