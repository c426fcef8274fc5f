"""CLI entry point for weaver.

Subcommands are imported on first use so that ``weaver --help`` does not
pull in the enhancement pipeline.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from weaver_cli import __version__
from weaver_cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True

# Command name -> "module:attribute"
LAZY_COMMANDS = {
    "enhance": "weaver_cli.commands.enhance:enhance",
    "scan": "weaver_cli.commands.scan:scan",
}


class LazyGroup(rclick.RichGroup):
    """Rich group whose subcommands are imported when looked up."""

    def __init__(self, *args: Any, lazy_subcommands: dict[str, str] | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = dict(lazy_subcommands or {})

    def list_commands(self, ctx: click.Context) -> list[str]:
        return sorted({*super().list_commands(ctx), *self.lazy_subcommands})

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        reference = self.lazy_subcommands.get(cmd_name)
        if reference is None:
            return super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        module_name, _, attr_name = reference.partition(":")
        command: click.Command = getattr(importlib.import_module(module_name), attr_name)
        return command


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="weaver")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
def cli() -> None:
    """Weaver - Build-time bytecode enhancement.

    Finds compiled classes, builds their loading context and runs the
    configured transformer on each of them.

    **Getting Started:**

    - `weaver scan` - List the classes that would be enhanced
    - `weaver enhance --enable-dirty-tracking` - Enhance classes in place
    - `weaver enhance --config weaver.yaml` - Enhance using a config file
    """


if __name__ == "__main__":
    cli()
