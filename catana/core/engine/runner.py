"""
Step runner — probe, act, classify.

For one step:
    precondition satisfied → skipped (the action is never invoked)
    precondition unknown   → failed, action not invoked (fail-closed)
    otherwise              → one action invocation, exit 0 = succeeded

No retries and no rollback: side effects of a failed action stay.
"""

from __future__ import annotations

import logging

from catana.adapters.registry import AdapterRegistry
from catana.core.config.loader import ProvisionConfig
from catana.core.engine.presence import PresenceChecker
from catana.core.errors import ProbeError
from catana.core.models.result import StepResult
from catana.core.models.step import Step

logger = logging.getLogger(__name__)


class StepRunner:
    """Execute single steps idempotently."""

    def __init__(
        self,
        registry: AdapterRegistry,
        checker: PresenceChecker | None = None,
        config: ProvisionConfig | None = None,
    ):
        self._registry = registry
        self._checker = checker or PresenceChecker()
        self._config = config or ProvisionConfig()

    def is_satisfied(self, step: Step) -> bool:
        """Whether the step's target state already exists.

        A step without a precondition is never satisfied.

        Raises:
            ProbeError: If the precondition cannot be evaluated.
        """
        if step.precondition is None:
            return False
        return self._checker.check(step.precondition)

    def run(self, step: Step) -> StepResult:
        try:
            satisfied = self.is_satisfied(step)
        except ProbeError as e:
            logger.warning("%s: precondition unknown (%s), not running", step.id, e)
            return StepResult.precondition_unknown(step, str(e))

        if satisfied:
            logger.info("⊘ %s: already satisfied", step.id)
            return StepResult.skipped(step)

        logger.info("==> %s: %s", step.id, step.action.summary())
        invocation = self._registry.execute(step.id, step.action, self._config)

        if not invocation.ok:
            logger.info("✗ %s: exit code %d", step.id, invocation.exit_code)
            return StepResult.from_invocation(step, invocation)

        verified = self._verify(step)
        logger.info("✓ %s", step.id)
        return StepResult.from_invocation(step, invocation, verified=verified)

    def _verify(self, step: Step) -> bool | None:
        """Re-probe after a successful action (postcondition report)."""
        if (
            not self._config.verify_after_success
            or step.precondition is None
            or self._registry.mock_mode
        ):
            return None
        try:
            verified = self._checker.check(step.precondition)
        except ProbeError as e:
            logger.debug("%s: postcondition probe failed: %s", step.id, e)
            return None
        if not verified:
            logger.warning(
                "%s: action succeeded but %s still does not hold",
                step.id,
                step.precondition.describe(),
            )
        return verified
