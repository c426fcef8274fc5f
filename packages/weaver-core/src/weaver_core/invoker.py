"""Per-artifact transformer invocation."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from weaver_core.models import TransformResult

if TYPE_CHECKING:
    from weaver_core.classpath import LoadingContext
    from weaver_core.config import CapabilityConfig
    from weaver_core.transformers import Transformer

logger = structlog.get_logger(__name__)


class EnhancementInvoker:
    """Calls the transformer once per artifact inside the loading context.

    The invoker only reads the artifact. Exceptions raised by the
    transformer are turned into FAILED results; they never propagate.

    Example:
        >>> invoker = EnhancementInvoker(transformer, context, capabilities)
        >>> result = invoker.invoke(Path("target/classes/com/acme/Order.class"))
        >>> result.outcome
        <TransformOutcome.TRANSFORMED: 'transformed'>
    """

    def __init__(
        self,
        transformer: Transformer,
        context: LoadingContext,
        capabilities: CapabilityConfig,
    ) -> None:
        """Initialize the invoker.

        Args:
            transformer: Transformer selected for the run
            context: Loading context shared by all invocations
            capabilities: Capabilities requested from the transformer
        """
        self.transformer = transformer
        self.context = context
        self.capabilities = capabilities
        self._log = logger.bind(component="enhancement_invoker")

    def invoke(self, path: Path) -> TransformResult:
        """Transform one artifact.

        Args:
            path: Artifact to transform.

        Returns:
            UNCHANGED when the transformer returns None or the same bytes,
            TRANSFORMED with the new bytes, or FAILED with the cause.
        """
        message = f"Unable to enhance class: {path.name}"

        try:
            original = path.read_bytes()
        except OSError as e:
            self._log.warning("class_read_failed", path=str(path), error=str(e))
            return TransformResult.failed(message, e)

        try:
            enhanced = self.transformer.transform(
                original,
                name=path.name,
                context=self.context,
                capabilities=self.capabilities,
            )
        except Exception as e:
            self._log.warning("class_enhancement_failed", path=str(path), error=str(e))
            return TransformResult.failed(message, e)

        if enhanced is None:
            return TransformResult.unchanged()

        if not isinstance(enhanced, (bytes, bytearray, memoryview)):
            cause = TypeError(f"transformer returned {type(enhanced).__name__}, expected bytes")
            self._log.warning("class_enhancement_failed", path=str(path), error=str(cause))
            return TransformResult.failed(message, cause)

        enhanced = bytes(enhanced)
        if enhanced == original:
            return TransformResult.unchanged()
        return TransformResult.transformed(enhanced)
