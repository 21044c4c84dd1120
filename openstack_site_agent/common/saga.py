"""Ordered backend actions with compensations.

A saga emulates atomicity across resources that the backend can not create
in one transaction. Steps run in order; each completed step may register a
compensation. When a fail-fast step raises, the compensations of the steps
completed so far run in reverse order and the original error is re-raised.
Best-effort steps log their failure and the saga carries on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from openstack_site_agent.backend.exceptions import BackendError

logger = logging.getLogger(__name__)

SagaContext = dict[str, Any]


@dataclass
class SagaStep:
    """Single step of a saga.

    Attributes:
        name: Step name, also the key of the step result in the saga context
        action: Callable receiving the saga context, its return value is stored
            in the context under the step name
        compensation: Optional callable receiving the saga context, run when a
            later fail-fast step fails
        best_effort: Failure of the step is logged and skipped instead of
            aborting the saga
    """

    name: str
    action: Callable[[SagaContext], Any]
    compensation: Optional[Callable[[SagaContext], None]] = None
    best_effort: bool = False


@dataclass
class Saga:
    """Sequence of steps executed with compensating rollback."""

    name: str
    steps: list[SagaStep] = field(default_factory=list)
    context: SagaContext = field(default_factory=dict)

    def add_step(
        self,
        name: str,
        action: Callable[[SagaContext], Any],
        compensation: Optional[Callable[[SagaContext], None]] = None,
        best_effort: bool = False,
    ) -> SagaStep:
        """Append a step and return it."""
        step = SagaStep(
            name=name, action=action, compensation=compensation, best_effort=best_effort
        )
        self.steps.append(step)
        return step

    @property
    def best_effort_steps(self) -> list[str]:
        """Names of the steps whose failure does not abort the saga."""
        return [step.name for step in self.steps if step.best_effort]

    def run(self) -> SagaContext:
        """Execute all steps in order.

        Returns:
            The saga context with the result of every successful step

        Raises:
            BackendError: The error of the first failed fail-fast step, after
                the compensations of the completed steps have run
        """
        completed: list[SagaStep] = []
        for step in self.steps:
            logger.debug("Saga %s: running step %s", self.name, step.name)
            try:
                self.context[step.name] = step.action(self.context)
            except BackendError as e:
                if step.best_effort:
                    logger.warning(
                        "Saga %s: best-effort step %s failed: %s", self.name, step.name, e
                    )
                    continue
                logger.error("Saga %s: step %s failed: %s", self.name, step.name, e)
                self.compensate(completed)
                raise
            completed.append(step)
        return self.context

    def compensate(self, completed: list[SagaStep]) -> None:
        """Run the compensations of the completed steps in reverse order.

        Compensation failures are logged and never replace the original error.
        """
        for step in reversed(completed):
            if step.compensation is None:
                continue
            logger.warning("Saga %s: compensating step %s", self.name, step.name)
            try:
                step.compensation(self.context)
            except BackendError as e:
                logger.error(
                    "Saga %s: compensation of step %s failed: %s", self.name, step.name, e
                )
