"""Unit tests for transformer selection."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from structlog.testing import capture_logs

from weaver_core.classpath import LoadingContext
from weaver_core.config import CapabilityConfig
from weaver_core.errors import TransformerNotFoundError
from weaver_core.transformers import (
    DEFAULT_TRANSFORMER,
    ENTRY_POINT_GROUP,
    TRANSFORMER_ENV_VAR,
    NoOpTransformer,
    Transformer,
    TransformerRegistry,
    get_default_transformer_name,
    resolve_transformer,
)

PLUGIN_MODULE = "weaver_test_plugins"


@pytest.fixture
def plugin_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Write an importable module with transformer-shaped objects."""
    (tmp_path / f"{PLUGIN_MODULE}.py").write_text(
        textwrap.dedent(
            """
            class Upper:
                def transform(self, data, *, name, context, capabilities):
                    return data.upper()

            INSTANCE = Upper()

            def make_upper():
                return Upper()

            NOT_A_TRANSFORMER = 42
            """
        )
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, PLUGIN_MODULE, raising=False)
    return PLUGIN_MODULE


def _entry_point(name: str, target: object) -> MagicMock:
    ep = MagicMock()
    ep.name = name
    ep.value = f"plugins:{name}"
    ep.load.return_value = target
    return ep


class TestNoOpTransformer:
    """Tests for the built-in transformer."""

    def test_never_changes_anything(self, tmp_path: Path) -> None:
        result = NoOpTransformer().transform(
            b"\xca\xfe\xba\xbe",
            name="a.class",
            context=LoadingContext([tmp_path]),
            capabilities=CapabilityConfig(enable_dirty_tracking=True),
        )
        assert result is None

    def test_satisfies_protocol(self) -> None:
        assert isinstance(NoOpTransformer(), Transformer)


class TestDefaultTransformerName:
    """Tests for WEAVER_TRANSFORMER handling."""

    def test_defaults_to_noop(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv(TRANSFORMER_ENV_VAR, raising=False)
        assert get_default_transformer_name() == DEFAULT_TRANSFORMER == "noop"

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(TRANSFORMER_ENV_VAR, "bytebuddy")
        assert get_default_transformer_name() == "bytebuddy"


class TestTransformerRegistry:
    """Tests for TransformerRegistry.create()."""

    def test_builtin(self) -> None:
        assert isinstance(TransformerRegistry.create("noop"), NoOpTransformer)

    def test_builtin_is_case_insensitive(self) -> None:
        assert isinstance(TransformerRegistry.create("NoOp"), NoOpTransformer)

    def test_available_includes_entry_points(self) -> None:
        eps = [_entry_point("bytebuddy", NoOpTransformer)]
        with patch("weaver_core.transformers.entry_points", return_value=eps) as mock_eps:
            assert TransformerRegistry.available() == ["bytebuddy", "noop"]
        mock_eps.assert_called_with(group=ENTRY_POINT_GROUP)

    def test_entry_point_class_is_instantiated(self) -> None:
        eps = [_entry_point("bytebuddy", NoOpTransformer)]
        with patch("weaver_core.transformers.entry_points", return_value=eps):
            transformer = TransformerRegistry.create("bytebuddy")
        assert isinstance(transformer, NoOpTransformer)

    def test_unknown_name_lists_available(self) -> None:
        with patch("weaver_core.transformers.entry_points", return_value=[]):
            with pytest.raises(TransformerNotFoundError) as exc_info:
                TransformerRegistry.create("bytebuddy")

        assert exc_info.value.transformer_name == "bytebuddy"
        assert exc_info.value.available == ["noop"]
        assert "Available: noop" in exc_info.value.user_message

    def test_reference_to_class(self, plugin_module: str) -> None:
        transformer = TransformerRegistry.create(f"{plugin_module}:Upper")
        assert type(transformer).__name__ == "Upper"

    def test_reference_to_instance(self, plugin_module: str) -> None:
        transformer = TransformerRegistry.create(f"{plugin_module}:INSTANCE")
        assert isinstance(transformer, Transformer)

    def test_reference_to_factory(self, plugin_module: str) -> None:
        transformer = TransformerRegistry.create(f"{plugin_module}:make_upper")
        assert type(transformer).__name__ == "Upper"

    def test_reference_to_non_transformer(self, plugin_module: str) -> None:
        with pytest.raises(TransformerNotFoundError):
            TransformerRegistry.create(f"{plugin_module}:NOT_A_TRANSFORMER")

    def test_reference_to_missing_attribute(self, plugin_module: str) -> None:
        with pytest.raises(TransformerNotFoundError) as exc_info:
            TransformerRegistry.create(f"{plugin_module}:Missing")
        assert isinstance(exc_info.value.__cause__, AttributeError)

    def test_reference_to_missing_module(self) -> None:
        with pytest.raises(TransformerNotFoundError) as exc_info:
            TransformerRegistry.create("weaver_no_such_module:Thing")
        assert isinstance(exc_info.value.__cause__, ImportError)


class TestResolveTransformer:
    """Tests for resolve_transformer()."""

    def test_explicit_name(self) -> None:
        assert isinstance(resolve_transformer("noop"), NoOpTransformer)

    def test_uses_environment_when_unnamed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(TRANSFORMER_ENV_VAR, "weaver_core.transformers:NoOpTransformer")
        assert isinstance(resolve_transformer(), NoOpTransformer)

    def test_unknown_environment_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(TRANSFORMER_ENV_VAR, "bytebuddy")
        with patch("weaver_core.transformers.entry_points", return_value=[]):
            with pytest.raises(TransformerNotFoundError, match="bytebuddy"):
                resolve_transformer()

    def test_logs_selection(self) -> None:
        with capture_logs() as logs:
            resolve_transformer("noop")

        assert logs[-1]["event"] == "transformer_selected"
        assert logs[-1]["type"] == "NoOpTransformer"
