"""CLI error handling for weaver-cli.

Wraps weaver-core and configuration failures into user-friendly messages
with the CLI exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from weaver_cli.output import error

if TYPE_CHECKING:
    import yaml
    from pydantic_core import ErrorDetails


# Process exit codes for weaver commands
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Invalid configuration, unknown transformer
EXIT_ENHANCEMENT_FAILED = 1  # Run aborted under fail-fast
EXIT_SYSTEM_ERROR = 2  # Missing or unreadable configuration file


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message.

    Args:
        err: Pydantic ValidationError instance.

    Returns:
        Formatted error message with field paths and issues.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - write_strategy: Input should be 'atomic' or..."
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        # Field path, e.g. "capabilities.enable_dirty_tracking"
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")

    return "\n".join(lines)


def handle_yaml_error(err: yaml.YAMLError, file_path: str) -> NoReturn:
    """Handle YAML parsing errors with line number information.

    Raises:
        CLIError: Always.
    """
    error_msg = str(err)
    mark = getattr(err, "problem_mark", None)
    if mark is not None:
        problem = getattr(err, "problem", None)
        error_msg = f"YAML syntax error at line {mark.line + 1}, column {mark.column + 1}: {problem}"

    raise CLIError(f"Invalid YAML in {file_path}: {error_msg}")


def handle_validation_error(err: PydanticValidationError, source: str) -> NoReturn:
    """Handle Pydantic validation errors with user-friendly messages.

    Args:
        err: Pydantic ValidationError instance.
        source: Where the invalid values came from (file path or "command line").

    Raises:
        CLIError: Always.
    """
    formatted = format_pydantic_error(err)
    raise CLIError(f"Invalid configuration in {source}:\n{formatted}")


def handle_file_not_found(file_path: str) -> NoReturn:
    """Handle a missing configuration file.

    Raises:
        CLIError: Always, with EXIT_SYSTEM_ERROR.
    """
    raise CLIError(
        f"File not found: {file_path}\n\n"
        "Use --config to point at an existing weaver.yaml, or pass options on the command line.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_unreadable_file(file_path: str, err: OSError) -> NoReturn:
    """Handle a configuration file that exists but cannot be read.

    Raises:
        CLIError: Always, with EXIT_SYSTEM_ERROR.
    """
    reason = err.strerror or str(err)
    raise CLIError(f"Cannot read {file_path}: {reason}", exit_code=EXIT_SYSTEM_ERROR)
