"""Transformer interface and selection.

The transformer (the "enhancer") is an opaque capability: given the bytes of
one class, the loading context and the requested capabilities, it returns
rewritten bytes, returns None when the class needs no change, or raises.

A transformer is selected once per run, by name:
- built-in transformers (``noop``)
- transformers installed under the ``weaver.transformers`` entry-point group
- a ``module:attribute`` reference to a class, factory or instance

When no name is configured, ``WEAVER_TRANSFORMER`` supplies it, falling back
to ``noop``.
"""

from __future__ import annotations

import importlib
import os
from collections.abc import Callable
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import structlog

from weaver_core.errors import TransformerNotFoundError

if TYPE_CHECKING:
    from weaver_core.classpath import LoadingContext
    from weaver_core.config import CapabilityConfig

logger = structlog.get_logger(__name__)

# Environment variable for default transformer selection
TRANSFORMER_ENV_VAR = "WEAVER_TRANSFORMER"

DEFAULT_TRANSFORMER = "noop"

ENTRY_POINT_GROUP = "weaver.transformers"


@runtime_checkable
class Transformer(Protocol):
    """Bytecode transformer contract."""

    def transform(
        self,
        data: bytes,
        *,
        name: str,
        context: LoadingContext,
        capabilities: CapabilityConfig,
    ) -> bytes | None:
        """Transform one class.

        Args:
            data: Original class file bytes.
            name: File name of the class being transformed.
            context: Loading context for resolving referenced classes.
            capabilities: Capabilities the transformer should add.

        Returns:
            The transformed bytes, or None when the class is left untouched.

        Raises:
            Exception: Any exception marks the class as failed.
        """
        ...


class NoOpTransformer:
    """Transformer that never changes anything."""

    def transform(
        self,
        data: bytes,
        *,
        name: str,
        context: LoadingContext,
        capabilities: CapabilityConfig,
    ) -> bytes | None:
        return None


def get_default_transformer_name() -> str:
    """Get the transformer name from the environment.

    Returns:
        Value of WEAVER_TRANSFORMER, or "noop".
    """
    return os.environ.get(TRANSFORMER_ENV_VAR, DEFAULT_TRANSFORMER)


class TransformerRegistry:
    """Registry of selectable transformers.

    Example:
        >>> transformer = TransformerRegistry.create("noop")
        >>> TransformerRegistry.available()
        ['noop']
    """

    # Registry mapping built-in names to transformer factories
    _BUILTINS: dict[str, Callable[[], Transformer]] = {
        "noop": NoOpTransformer,
    }

    @classmethod
    def available(cls) -> list[str]:
        """Names of built-in and installed transformers."""
        names = set(cls._BUILTINS)
        names.update(ep.name for ep in entry_points(group=ENTRY_POINT_GROUP))
        return sorted(names)

    @classmethod
    def create(cls, name: str) -> Transformer:
        """Create the transformer registered as ``name``.

        Args:
            name: Built-in name, entry-point name or ``module:attribute``.

        Returns:
            Transformer instance.

        Raises:
            TransformerNotFoundError: If the name cannot be resolved.
        """
        if ":" in name:
            return _instantiate(name, _import_reference(name, cls.available()))

        key = name.lower()
        if key in cls._BUILTINS:
            return cls._BUILTINS[key]()

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if ep.name == name:
                logger.debug("transformer_entry_point_loaded", name=name, value=ep.value)
                return _instantiate(name, ep.load())

        raise TransformerNotFoundError(name, cls.available())


def resolve_transformer(name: str | None = None) -> Transformer:
    """Select the transformer for a run.

    Args:
        name: Transformer name or reference; None reads WEAVER_TRANSFORMER.

    Returns:
        Transformer instance.
    """
    selected = name or get_default_transformer_name()
    transformer = TransformerRegistry.create(selected)
    logger.info("transformer_selected", transformer=selected, type=type(transformer).__name__)
    return transformer


def _import_reference(reference: str, available: list[str]) -> Any:
    module_name, _, attr_name = reference.partition(":")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr_name)
    except (ImportError, AttributeError) as e:
        raise TransformerNotFoundError(
            reference,
            available,
            internal_details=f"{type(e).__name__}: {e}",
        ) from e


def _instantiate(name: str, target: Any) -> Transformer:
    transformer = target() if isinstance(target, type) else target
    if not isinstance(transformer, Transformer):
        if callable(target) and not isinstance(target, type):
            transformer = target()
    if not isinstance(transformer, Transformer):
        raise TransformerNotFoundError(
            name,
            TransformerRegistry.available(),
            internal_details=f"{type(transformer).__name__} has no transform() method",
        )
    return transformer
