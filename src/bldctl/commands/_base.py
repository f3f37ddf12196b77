"""Click base classes with ``--examples`` support.

``bldctl build --examples`` prints canned invocations and exits, which keeps
``--help`` short.
"""

from __future__ import annotations

from typing import Any

import click


def _examples_option(examples: str) -> click.Option:
    """An eager ``--examples`` flag that prints *examples* and exits."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show_examples,
        help="Show usage examples.",
    )


class _ExamplesMixin:
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))  # type: ignore[attr-defined]


class BldCommand(_ExamplesMixin, click.Command):
    """Click Command that accepts ``examples=``."""


class BldGroup(_ExamplesMixin, click.Group):
    """Click Group that accepts ``examples=``; subcommands default to BldCommand."""

    command_class = BldCommand
