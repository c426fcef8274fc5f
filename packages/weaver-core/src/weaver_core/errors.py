"""Custom exception hierarchy for weaver-core.

This module defines the exception classes raised by weaver:
- WeaverError: Base exception for all weaver-related errors
- ConfigurationError: Raised when a configuration file is invalid
- TransformerNotFoundError: Raised when a transformer cannot be selected
- EnhancementAbortedError: Raised when a fail-fast run was aborted

Per-artifact failures are NOT raised by the pipeline components; they are
returned as diagnostics and the run-wide failure policy decides whether the
run continues. These exceptions cover the boundaries around a run.

User-facing messages are safe to display. Technical details are logged
internally via structlog and never shown to the user.
"""

from __future__ import annotations

from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class WeaverError(Exception):
    """Base exception for weaver.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but NEVER exposed to the user.

    Example:
        >>> raise WeaverError(
        ...     "Enhancement failed",
        ...     internal_details="transformer returned str instead of bytes",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize WeaverError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "weaver_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigurationError(WeaverError):
    """Raised when configuration file parsing or validation fails.

    Attributes:
        file_path: Path to the configuration file (if known).
        field_path: Dot-separated path to the invalid field (e.g., "capabilities.enable_dirty_tracking").
        line_number: Line number in the file where error occurred (if available).

    Example:
        >>> raise ConfigurationError(
        ...     "Invalid dependency scope",
        ...     file_path="weaver.yaml",
        ...     field_path="dependencies.0.scope",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        field_path: str | None = None,
        line_number: int | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with context.

        Args:
            user_message: Safe message to display to the user.
            file_path: Path to the configuration file (optional).
            field_path: Dot-separated path to the field (optional).
            line_number: Line number in the file (optional).
            internal_details: Technical details for internal logging only.
        """
        context_parts: list[str] = []
        if file_path:
            context_parts.append(f"in {file_path}")
        if line_number:
            context_parts.append(f"line {line_number}")
        if field_path:
            context_parts.append(f"field '{field_path}'")

        if context_parts:
            full_message = f"{user_message} ({', '.join(context_parts)})"
        else:
            full_message = user_message

        super().__init__(full_message, internal_details=internal_details)

        self.file_path = file_path
        self.field_path = field_path
        self.line_number = line_number


class TransformerNotFoundError(WeaverError):
    """Raised when a requested transformer cannot be resolved.

    Always includes the list of available transformer names.

    Attributes:
        transformer_name: Name or reference that was requested.
        available: Names of transformers that can be selected.

    Example:
        >>> raise TransformerNotFoundError("bytebuddy", available=["noop"])
        # User sees: "Transformer 'bytebuddy' not found. Available: noop"
    """

    def __init__(
        self,
        transformer_name: str,
        available: list[str],
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize TransformerNotFoundError.

        Args:
            transformer_name: Name or reference that was requested.
            available: Names of transformers that can be selected.
            internal_details: Technical details for internal logging only.
        """
        available_str = ", ".join(available) if available else "none"
        super().__init__(
            f"Transformer '{transformer_name}' not found. Available: {available_str}",
            internal_details=internal_details,
        )
        self.transformer_name = transformer_name
        self.available = available


class EnhancementAbortedError(WeaverError):
    """Raised when a fail-fast enhancement run was aborted.

    The originating exception (if any) is chained as ``__cause__``.

    Attributes:
        path: Artifact or classpath entry that caused the abort.
        reason: Human-readable failure message.

    Example:
        >>> report.raise_for_status()
        Traceback (most recent call last):
        ...
        EnhancementAbortedError: Enhancement aborted at a.class: Unable to enhance class: a.class
    """

    def __init__(self, path: Path | None, reason: str) -> None:
        """Initialize EnhancementAbortedError.

        Args:
            path: Artifact or classpath entry that caused the abort.
            reason: Human-readable failure message.
        """
        location = f" at {path}" if path is not None else ""
        super().__init__(f"Enhancement aborted{location}: {reason}")
        self.path = path
        self.reason = reason
