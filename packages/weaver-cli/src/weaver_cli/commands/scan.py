"""weaver scan command - List the classes an enhancement run would visit."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from weaver_cli import output
from weaver_cli.output import info, print_json, warning


@click.command()
@click.option(
    "--dir",
    "classes_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("target/classes"),
    help="Compiled classes directory [default: target/classes]",
)
@click.option(
    "--extension",
    default=".class",
    help="Artifact file suffix [default: .class]",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format [default: table]",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Minimum log level [default: WARNING]",
)
def scan(classes_dir: Path, extension: str, output_format: str, log_level: str) -> None:
    """List the classes an enhancement run would visit, in processing order.

    Examples:

        weaver scan

        weaver scan --dir build/classes --format json
    """
    from weaver_core import scan_artifacts
    from weaver_core.observability import configure_logging

    configure_logging(log_level=log_level)

    artifacts = scan_artifacts(classes_dir, extension)
    relative = [str(path.relative_to(classes_dir)) for path in artifacts]

    if output_format == "json":
        print_json({"classes_dir": str(classes_dir), "count": len(relative), "artifacts": relative})
        return

    if not classes_dir.is_dir():
        warning(f"There is no classes directory {classes_dir}")
        return
    if not relative:
        warning(f"There are no classes to enhance in {classes_dir}")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", width=5)
    table.add_column("Class file", min_width=30)
    for index, name in enumerate(relative, start=1):
        table.add_row(str(index), name)

    output.console.print(table)
    info(f"{len(relative)} classes in {classes_dir}")
