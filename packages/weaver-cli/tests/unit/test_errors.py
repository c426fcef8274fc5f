"""Unit tests for weaver_cli.errors."""

from __future__ import annotations

import errno

import pytest
import yaml
from pydantic import ValidationError as PydanticValidationError

from weaver_cli import output
from weaver_cli.errors import (
    EXIT_ENHANCEMENT_FAILED,
    EXIT_SUCCESS,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    format_pydantic_error,
    handle_file_not_found,
    handle_unreadable_file,
    handle_validation_error,
    handle_yaml_error,
)
from weaver_core import EnhanceConfig


def _validation_error() -> PydanticValidationError:
    try:
        EnhanceConfig.model_validate({"write_strategy": "sideways", "capabilities": {"bogus": True}})
    except PydanticValidationError as e:
        return e
    raise AssertionError("expected a validation error")


class TestExitCodes:
    def test_values(self) -> None:
        assert EXIT_SUCCESS == 0
        assert EXIT_USER_ERROR == 1
        assert EXIT_ENHANCEMENT_FAILED == 1
        assert EXIT_SYSTEM_ERROR == 2


class TestCLIError:
    """Tests for CLIError."""

    def test_default_exit_code(self) -> None:
        assert CLIError("boom").exit_code == EXIT_USER_ERROR

    def test_custom_exit_code(self) -> None:
        assert CLIError("boom", exit_code=EXIT_SYSTEM_ERROR).exit_code == EXIT_SYSTEM_ERROR

    def test_show_uses_rich_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        original_console = output.console
        output.console = output.create_console(no_color=True)
        try:
            CLIError("Something failed").show()
            captured = capsys.readouterr()
        finally:
            output.console = original_console

        assert "✗" in captured.out
        assert "Something failed" in captured.out


class TestFormatPydanticError:
    def test_lists_field_paths(self) -> None:
        message = format_pydantic_error(_validation_error())

        lines = message.splitlines()
        assert lines[0] == "Validation failed:"
        assert any(line.startswith("  - write_strategy:") for line in lines)
        assert any(line.startswith("  - capabilities.bogus:") for line in lines)


class TestHandlers:
    """Tests for the handle_* helpers."""

    def test_yaml_error_with_position(self) -> None:
        try:
            yaml.safe_load("a: [1, 2\nb: 3\n")
        except yaml.YAMLError as e:
            err = e

        with pytest.raises(CLIError) as exc_info:
            handle_yaml_error(err, "weaver.yaml")

        assert "Invalid YAML in weaver.yaml" in exc_info.value.message
        assert "line" in exc_info.value.message
        assert exc_info.value.exit_code == EXIT_USER_ERROR

    def test_yaml_error_without_position(self) -> None:
        with pytest.raises(CLIError, match="Invalid YAML in weaver.yaml: broken"):
            handle_yaml_error(yaml.YAMLError("broken"), "weaver.yaml")

    def test_validation_error(self) -> None:
        with pytest.raises(CLIError) as exc_info:
            handle_validation_error(_validation_error(), "weaver.yaml")

        assert exc_info.value.message.startswith("Invalid configuration in weaver.yaml:\n")
        assert exc_info.value.exit_code == EXIT_USER_ERROR

    def test_file_not_found(self) -> None:
        with pytest.raises(CLIError) as exc_info:
            handle_file_not_found("weaver.yaml")

        assert "File not found: weaver.yaml" in exc_info.value.message
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR

    def test_unreadable_file(self) -> None:
        err = PermissionError(errno.EACCES, "Permission denied")

        with pytest.raises(CLIError) as exc_info:
            handle_unreadable_file("weaver.yaml", err)

        assert exc_info.value.message == "Cannot read weaver.yaml: Permission denied"
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR
