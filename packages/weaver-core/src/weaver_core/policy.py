"""Run-wide failure policy.

The policy is a plain value threaded through the runner: components report
failures as Diagnostic objects and the policy decides, per diagnostic,
whether the run continues or aborts.
"""

from __future__ import annotations

from enum import Enum

from weaver_core.diagnostics import Diagnostic


class PolicyDecision(str, Enum):
    """What the runner does after a diagnostic."""

    CONTINUE = "continue"
    ABORT = "abort"


class FailurePolicy(str, Enum):
    """Fail-fast or record-and-continue.

    Attributes:
        FAIL_FAST: The first failure of any kind aborts the run
        CONTINUE: Failures are recorded as diagnostics and the run goes on

    Example:
        >>> policy = FailurePolicy.from_flag(fail_on_error=True)
        >>> policy.decide(diagnostic)
        <PolicyDecision.ABORT: 'abort'>
    """

    FAIL_FAST = "fail_fast"
    CONTINUE = "continue"

    @classmethod
    def from_flag(cls, fail_on_error: bool) -> FailurePolicy:
        """Build the policy from the boolean fail-on-error switch."""
        return cls.FAIL_FAST if fail_on_error else cls.CONTINUE

    @property
    def fail_fast(self) -> bool:
        return self is FailurePolicy.FAIL_FAST

    def decide(self, diagnostic: Diagnostic) -> PolicyDecision:
        """Decide whether the run continues after ``diagnostic``.

        Every diagnostic is a failure (classpath, transform or persistence),
        so the decision depends on the policy alone.
        """
        if self.fail_fast:
            return PolicyDecision.ABORT
        return PolicyDecision.CONTINUE
