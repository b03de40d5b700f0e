"""Budget-bounded processing of deferred work.

Work that is not finished inside the call that created it (a zap buffer
waiting for a pair, a fee buffer waiting for a fair price) is registered
here as a named task. Each cycle has two phases:

1. ``scan()`` asks every task whether it has pending work. Nothing mutates.
2. ``run_cycle(budget)`` services pending tasks in key order, starting
   just after the last task serviced in a previous cycle, until the next
   task's cost no longer fits in the remaining budget.

Because the starting point rotates, a task that was skipped for lack of
budget is first in line on a following cycle, so no task starves however
often another one has work.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from tokenomics.errors import ValidationError

logger = structlog.get_logger()


@dataclass(frozen=True)
class WorkItem:
    """A registered task that currently has pending work."""

    key: str
    cost: int


@dataclass(frozen=True)
class CycleReport:
    """Summary of one processing cycle."""

    serviced: list[str] = field(default_factory=list)
    deferred: list[str] = field(default_factory=list)
    budget_used: int = 0
    cursor: str | None = None


@dataclass(frozen=True)
class _Task:
    key: str
    cost: int
    is_pending: Callable[[], bool]
    execute: Callable[[], object]


class BudgetedScheduler:
    """Round-robin executor for deferred work under a per-cycle budget."""

    def __init__(self, default_budget: int) -> None:
        if default_budget < 1:
            raise ValidationError(f"Cycle budget must be at least 1, got {default_budget}")
        self.default_budget = default_budget
        self._tasks: dict[str, _Task] = {}
        self.cursor: str | None = None

    def register(
        self,
        key: str,
        cost: int,
        is_pending: Callable[[], bool],
        execute: Callable[[], object],
    ) -> None:
        if key in self._tasks:
            raise ValidationError(f"Task already registered: {key}")
        if cost < 1:
            raise ValidationError(f"Task cost must be at least 1, got {cost}")
        self._tasks[key] = _Task(key=key, cost=cost, is_pending=is_pending, execute=execute)

    @property
    def task_keys(self) -> list[str]:
        return sorted(self._tasks)

    def scan(self) -> list[WorkItem]:
        """Pending work in service order for the next cycle."""
        pending = [
            WorkItem(key=task.key, cost=task.cost)
            for task in sorted(self._tasks.values(), key=lambda t: t.key)
            if task.is_pending()
        ]
        if self.cursor is None or not pending:
            return pending
        start = next((i for i, item in enumerate(pending) if item.key > self.cursor), 0)
        return pending[start:] + pending[:start]

    def run_cycle(self, budget: int | None = None) -> CycleReport:
        """Service pending work until the budget runs out.

        Service stops at the first item whose cost exceeds the remaining
        budget; that item leads the next cycle.
        """
        remaining = self.default_budget if budget is None else budget
        if remaining < 0:
            raise ValidationError(f"Cycle budget cannot be negative, got {remaining}")

        pending = self.scan()
        serviced: list[str] = []
        deferred: list[str] = []
        for position, item in enumerate(pending):
            if item.cost > remaining:
                deferred = [i.key for i in pending[position:]]
                break
            self._tasks[item.key].execute()
            remaining -= item.cost
            serviced.append(item.key)
            self.cursor = item.key

        used = (self.default_budget if budget is None else budget) - remaining
        if deferred:
            logger.debug("work_deferred", deferred=deferred, budget_used=used)
        return CycleReport(
            serviced=serviced, deferred=deferred, budget_used=used, cursor=self.cursor
        )
