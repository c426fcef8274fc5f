"""Enhancement configuration models.

Configuration for one enhancement run: which capabilities the transformer
is asked to add, where the compiled classes live, which dependencies make up
the loading context and how failures are handled.

Example weaver.yaml:

    classes_dir: target/classes
    fail_on_error: false
    transformer: noop
    capabilities:
      enable_lazy_initialization: true
      enable_dirty_tracking: true
    dependencies:
      - file: libs/persistence-api.jar
        scope: provided
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from weaver_core.classpath import Dependency
from weaver_core.errors import ConfigurationError
from weaver_core.policy import FailurePolicy
from weaver_core.scanner import CLASS_FILE_EXTENSION

DEFAULT_CLASSES_DIR = Path("target/classes")
"""Default location of compiled classes, relative to the working directory."""


class WriteStrategy(str, Enum):
    """How enhanced bytes replace the original artifact.

    Attributes:
        ATOMIC: Write a temporary sibling file and rename it over the original
        DELETE_RECREATE: Delete the original, recreate it and write in place
    """

    ATOMIC = "atomic"
    DELETE_RECREATE = "delete_recreate"


class CapabilityConfig(BaseModel):
    """Feature switches passed to the transformer.

    All switches default to off; the run is a no-op unless one is enabled.

    Attributes:
        enable_lazy_initialization: Lazy loading of attributes
        enable_dirty_tracking: Inline dirty tracking
        enable_association_management: Bidirectional association management
        enable_extended_enhancement: Rewrite field access in non-entity classes

    Example:
        >>> caps = CapabilityConfig(enable_dirty_tracking=True)
        >>> caps.any_enabled
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    enable_lazy_initialization: bool = Field(default=False, description="Lazy initialization support")
    enable_dirty_tracking: bool = Field(default=False, description="Dirty tracking support")
    enable_association_management: bool = Field(
        default=False,
        description="Bidirectional association management",
    )
    enable_extended_enhancement: bool = Field(
        default=False,
        description="Extended (non-entity) enhancement",
    )

    @property
    def any_enabled(self) -> bool:
        """Check whether at least one capability is requested."""
        return (
            self.enable_lazy_initialization
            or self.enable_dirty_tracking
            or self.enable_association_management
            or self.enable_extended_enhancement
        )

    def enabled_features(self) -> list[str]:
        """Names of the enabled capabilities, in declaration order."""
        return [name for name, value in self.model_dump().items() if value]


class EnhanceConfig(BaseModel):
    """Configuration for one enhancement run.

    Attributes:
        classes_dir: Root directory of compiled classes
        fail_on_error: Abort the run on the first failure
        capabilities: Capabilities requested from the transformer
        transformer: Transformer name or ``module:attribute`` reference
        write_strategy: How enhanced bytes are persisted
        artifact_extension: Suffix of eligible artifact files
        dependencies: Build dependencies, in build order

    Example:
        >>> config = EnhanceConfig(
        ...     classes_dir=Path("build/classes"),
        ...     capabilities=CapabilityConfig(enable_lazy_initialization=True),
        ...     fail_on_error=False,
        ... )
        >>> config.failure_policy
        <FailurePolicy.CONTINUE: 'continue'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    classes_dir: Path = Field(default=DEFAULT_CLASSES_DIR, description="Compiled classes root")
    fail_on_error: bool = Field(default=True, description="Abort on first failure")
    capabilities: CapabilityConfig = Field(
        default_factory=CapabilityConfig,
        description="Requested capabilities",
    )
    transformer: str | None = Field(default=None, description="Transformer name or reference")
    write_strategy: WriteStrategy = Field(default=WriteStrategy.ATOMIC, description="Persistence strategy")
    artifact_extension: str = Field(
        default=CLASS_FILE_EXTENSION,
        min_length=2,
        description="Artifact file suffix",
    )
    dependencies: list[Dependency] = Field(default_factory=list, description="Build dependencies")

    @field_validator("artifact_extension")
    @classmethod
    def extension_must_start_with_dot(cls, v: str) -> str:
        """Validate that the extension looks like a file suffix."""
        if not v.startswith("."):
            msg = f"artifact_extension must start with '.', got '{v}'"
            raise ValueError(msg)
        return v

    @property
    def failure_policy(self) -> FailurePolicy:
        return FailurePolicy.from_flag(self.fail_on_error)

    @classmethod
    def from_yaml(cls, path: str | Path) -> EnhanceConfig:
        """Load and validate EnhanceConfig from a YAML file.

        Relative ``classes_dir`` and dependency paths are resolved against
        the directory containing the file.

        Args:
            path: Path to weaver.yaml.

        Returns:
            Validated EnhanceConfig instance.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            pydantic.ValidationError: If schema validation fails.
            ConfigurationError: If the document is not a mapping.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data: Any = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(
                "Configuration must be a mapping of settings",
                file_path=str(path),
                internal_details=f"top-level YAML node is {type(data).__name__}",
            )

        config = cls.model_validate(data or {})
        return config.relative_to(path.parent)

    def relative_to(self, base: Path) -> EnhanceConfig:
        """Return a copy with relative paths anchored at ``base``."""
        dependencies = [
            dep.model_copy(update={"file": base / dep.file})
            if dep.file is not None and not dep.file.is_absolute()
            else dep
            for dep in self.dependencies
        ]
        classes_dir = self.classes_dir if self.classes_dir.is_absolute() else base / self.classes_dir
        return self.model_copy(update={"classes_dir": classes_dir, "dependencies": dependencies})
