from __future__ import annotations

import logging
import time
from typing import Callable, List, Mapping, Optional

from .solver import SearchStep, SolveOutcome, SolveSequence, StepKind
from .solver.backtracking import Advance

LOG = logging.getLogger(__name__)

StepCallback = Callable[[SearchStep], None]


class StepLimitExceeded(RuntimeError):
    pass


def describe_step(step: SearchStep, labels: Optional[Mapping[str, str]] = None) -> str:
    label = (labels or {}).get(step.node_id, step.node_id)
    if step.kind is StepKind.TRY:
        return f"Trying to color {label}..."
    if step.kind is StepKind.SUCCESS:
        return f"Successfully colored {label}."
    return f"Backtracking from {label}..."


def describe_outcome(outcome: SolveOutcome) -> str:
    if outcome.solved:
        return f"Solved successfully with {outcome.num_colors} colors!"
    return f"No solution found with {outcome.num_colors} colors. Try increasing the number of colors."


class StepDriver:
    """Pulls steps out of a solve sequence at a fixed pace.

    Stands in for a display loop: every `tick()` advances the sequence once
    and hands the step to `on_step`. `run()` keeps ticking, sleeping `delay`
    seconds between pulls, until the outcome arrives.
    """

    def __init__(
        self,
        sequence: SolveSequence,
        *,
        delay: float = 0.0,
        on_step: Optional[StepCallback] = None,
        max_steps: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.sequence = sequence
        self.delay = delay
        self.on_step = on_step
        self.max_steps = max_steps
        self._sleep = sleep
        self.steps: List[SearchStep] = []
        self.outcome: Optional[SolveOutcome] = None

    def tick(self) -> Advance:
        item = self.sequence.advance()
        if isinstance(item, SolveOutcome):
            self.outcome = item
            return item
        if self.max_steps is not None and len(self.steps) >= self.max_steps:
            raise StepLimitExceeded(f"Search did not finish within {self.max_steps} steps")
        self.steps.append(item)
        LOG.debug("%s %s color=%d", item.kind.value, item.node_id, item.color)
        if self.on_step is not None:
            self.on_step(item)
        return item

    def run(self) -> SolveOutcome:
        while self.outcome is None:
            item = self.tick()
            if isinstance(item, SearchStep) and self.delay:
                self._sleep(self.delay)
        return self.outcome
