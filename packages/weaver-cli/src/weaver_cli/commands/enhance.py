"""weaver enhance command - Enhance compiled classes in place.

Builds an EnhanceConfig from an optional weaver.yaml plus command line
overrides, runs the enhancement and reports the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from click.core import ParameterSource

from weaver_cli import output
from weaver_cli.errors import (
    EXIT_ENHANCEMENT_FAILED,
    EXIT_SUCCESS,
    CLIError,
    handle_file_not_found,
    handle_unreadable_file,
    handle_validation_error,
    handle_yaml_error,
)
from weaver_cli.output import error, info, success, warning

if TYPE_CHECKING:
    from weaver_core import EnhanceConfig, EnhancementReport

DEFAULT_CONFIG_FILE = Path("weaver.yaml")

# CapabilityConfig field -> flag help
FEATURE_FLAGS = {
    "enable_lazy_initialization": "Enable lazy initialization support",
    "enable_dirty_tracking": "Enable inline dirty tracking",
    "enable_association_management": "Enable bidirectional association management",
    "enable_extended_enhancement": "Enable extended enhancement of non-entity classes",
}


@dataclass
class EnhanceOptions:
    """Grouped enhance CLI options."""

    config_path: Path | None
    classes_dir: Path | None
    features: tuple[str, ...]
    fail_on_error: bool | None
    dependencies: tuple[str, ...]
    transformer: str | None
    write_strategy: str | None
    extension: str | None
    output_format: str
    log_level: str
    log_json: bool
    verbose: bool


def _load_base_config(config_path: Path | None) -> EnhanceConfig:
    """Load the configuration file, or defaults when there is none.

    An explicit ``--config`` must exist; ./weaver.yaml is only read when present.
    """
    import yaml
    from pydantic import ValidationError as PydanticValidationError

    from weaver_core import EnhanceConfig, WeaverError

    if config_path is None:
        if not DEFAULT_CONFIG_FILE.is_file():
            return EnhanceConfig()
        config_path = DEFAULT_CONFIG_FILE

    source = str(config_path)
    try:
        return EnhanceConfig.from_yaml(config_path)
    except FileNotFoundError:
        handle_file_not_found(source)
    except yaml.YAMLError as e:
        handle_yaml_error(e, source)
    except PydanticValidationError as e:
        handle_validation_error(e, source)
    except WeaverError as e:
        raise CLIError(e.user_message) from None
    except OSError as e:
        handle_unreadable_file(source, e)


def _collect_overrides(opts: EnhanceOptions) -> dict[str, Any]:
    """Translate CLI options into EnhanceConfig field overrides."""
    overrides: dict[str, Any] = {}
    if opts.classes_dir is not None:
        overrides["classes_dir"] = opts.classes_dir
    if opts.fail_on_error is not None:
        overrides["fail_on_error"] = opts.fail_on_error
    if opts.transformer:
        overrides["transformer"] = opts.transformer
    if opts.write_strategy:
        overrides["write_strategy"] = opts.write_strategy
    if opts.extension:
        overrides["artifact_extension"] = opts.extension
    return overrides


def _build_config(opts: EnhanceOptions) -> EnhanceConfig:
    """Build the EnhanceConfig for this invocation.

    Command line values win over file values; capability flags can only
    switch features on and ``--dependency`` entries are appended after the
    file's dependencies.

    Raises:
        CLIError: If the file or the merged values are invalid.
    """
    from pydantic import ValidationError as PydanticValidationError

    from weaver_core import Dependency, EnhanceConfig

    base = _load_base_config(opts.config_path)
    data = base.model_dump()
    data.update(_collect_overrides(opts))
    for name in opts.features:
        data["capabilities"][name] = True
    data["dependencies"] = [
        *data["dependencies"],
        *(Dependency.parse(spec).model_dump() for spec in opts.dependencies),
    ]

    try:
        return EnhanceConfig.model_validate(data)
    except PydanticValidationError as e:
        handle_validation_error(e, "command line options")


def _print_summary(report: EnhancementReport) -> None:
    if report.aborted:
        assert report.abort is not None  # Type narrowing for mypy
        error(f"Enhancement aborted at {report.abort.path}: {report.abort.message}")
    elif report.skip_reason:
        warning(f"Enhancement skipped: {report.skip_reason}")
    elif report.warning_count or report.error_count:
        warning(
            f"Enhanced {report.enhanced_count} classes with "
            f"{report.warning_count + report.error_count} problems"
        )
    else:
        success(f"Enhanced {report.enhanced_count} classes ({len(report.unchanged)} unchanged)")


def _run_enhance(opts: EnhanceOptions) -> None:
    """Run the enhancement and display the report.

    Raises:
        SystemExit: With code 0 on success or skip, 1 when the run aborted
    """
    from weaver_core import WeaverError, print_report, resolve_transformer, run_enhancement
    from weaver_core.observability import configure_logging

    configure_logging(log_level=opts.log_level, json_format=opts.log_json)

    config = _build_config(opts)
    if opts.verbose:
        info(f"Classes directory: {config.classes_dir}")
        features = config.capabilities.enabled_features()
        info(f"Capabilities: {', '.join(features) if features else 'none'}")

    try:
        transformer = resolve_transformer(config.transformer)
        report = run_enhancement(config, transformer)
    except WeaverError as e:
        raise CLIError(e.user_message) from None

    print_report(report, output_format=opts.output_format, console=output.console)
    if opts.output_format == "table":
        _print_summary(report)

    if report.aborted:
        raise SystemExit(EXIT_ENHANCEMENT_FAILED)
    raise SystemExit(EXIT_SUCCESS)


def _explicit(ctx: click.Context, name: str) -> bool:
    return ctx.get_parameter_source(name) == ParameterSource.COMMANDLINE


@click.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to weaver.yaml [default: ./weaver.yaml when present]",
)
@click.option(
    "--dir",
    "classes_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Compiled classes directory [default: target/classes]",
)
@click.option("--enable-lazy-initialization", is_flag=True, help=FEATURE_FLAGS["enable_lazy_initialization"])
@click.option("--enable-dirty-tracking", is_flag=True, help=FEATURE_FLAGS["enable_dirty_tracking"])
@click.option(
    "--enable-association-management",
    is_flag=True,
    help=FEATURE_FLAGS["enable_association_management"],
)
@click.option(
    "--enable-extended-enhancement",
    is_flag=True,
    help=FEATURE_FLAGS["enable_extended_enhancement"],
)
@click.option(
    "--fail-on-error/--no-fail-on-error",
    default=True,
    help="Abort on the first failure [default: fail-on-error]",
)
@click.option(
    "-d",
    "--dependency",
    "dependencies",
    multiple=True,
    metavar="PATH[:SCOPE]",
    help="Build dependency to put on the loading context (repeatable)",
)
@click.option(
    "--transformer",
    default=None,
    help="Transformer name or module:attribute reference [default: noop]",
)
@click.option(
    "--write-strategy",
    type=click.Choice(["atomic", "delete_recreate"]),
    default=None,
    help="How enhanced classes are written back [default: atomic]",
)
@click.option(
    "--extension",
    default=None,
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
@click.option("--log-json", is_flag=True, default=False, help="Emit logs as JSON")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose output")
@click.pass_context
def enhance(
    ctx: click.Context,
    config_path: Path | None,
    classes_dir: Path | None,
    enable_lazy_initialization: bool,
    enable_dirty_tracking: bool,
    enable_association_management: bool,
    enable_extended_enhancement: bool,
    fail_on_error: bool,
    dependencies: tuple[str, ...],
    transformer: str | None,
    write_strategy: str | None,
    extension: str | None,
    output_format: str,
    log_level: str,
    log_json: bool,
    verbose: bool,
) -> None:
    """Enhance compiled classes in place.

    Scans the classes directory, builds the loading context from the
    classes directory and the build dependencies, then runs the
    transformer on every class. Nothing happens unless at least one
    --enable-* capability is switched on.

    Examples:

        weaver enhance --enable-dirty-tracking

        weaver enhance --config weaver.yaml --no-fail-on-error

        weaver enhance --dir build/classes -d libs/api.jar:provided --format json
    """
    selected = {
        "enable_lazy_initialization": enable_lazy_initialization,
        "enable_dirty_tracking": enable_dirty_tracking,
        "enable_association_management": enable_association_management,
        "enable_extended_enhancement": enable_extended_enhancement,
    }
    opts = EnhanceOptions(
        config_path=config_path,
        classes_dir=classes_dir,
        features=tuple(name for name, enabled in selected.items() if enabled),
        fail_on_error=fail_on_error if _explicit(ctx, "fail_on_error") else None,
        dependencies=dependencies,
        transformer=transformer,
        write_strategy=write_strategy,
        extension=extension,
        output_format=output_format,
        log_level=log_level.upper(),
        log_json=log_json,
        verbose=verbose,
    )

    try:
        _run_enhance(opts)
    except (SystemExit, click.ClickException):
        raise
    except Exception as e:
        error(f"Enhancement error: {e}")
        if verbose:
            import traceback

            traceback.print_exc()
        raise SystemExit(1) from None
