"""FastAPI dependency injection: run registry and collaborator wiring."""

from __future__ import annotations

import time
from functools import lru_cache
from typing import Optional

import structlog

from auto_shorts.config import settings
from auto_shorts.services import Services
from auto_shorts.task import GenerationTask

logger = structlog.get_logger()


class RunRegistry:
    """In-process run registry.

    Running tasks are always kept. Finished ones are dropped once they are
    older than *retention* seconds, or oldest first when more than
    *max_finished* have piled up.
    """

    def __init__(self, retention: float, max_finished: int):
        self.retention = retention
        self.max_finished = max_finished
        self._tasks: dict[str, GenerationTask] = {}

    def add(self, task: GenerationTask) -> None:
        self.prune()
        self._tasks[task.run_id] = task

    def get(self, run_id: str) -> Optional[GenerationTask]:
        self.prune()
        return self._tasks.get(run_id)

    def values(self) -> list[GenerationTask]:
        return list(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def prune(self, now: float | None = None) -> None:
        now = time.monotonic() if now is None else now
        finished = sorted(
            (t for t in self._tasks.values() if t.finished_at is not None),
            key=lambda t: t.finished_at,
        )
        expired = [t for t in finished if now - t.finished_at > self.retention]
        kept = finished[len(expired):]
        if len(kept) > self.max_finished:
            expired += kept[: len(kept) - self.max_finished]
        for task in expired:
            del self._tasks[task.run_id]
        if expired:
            logger.info("registry.pruned", num_runs=len(expired), remaining=len(self._tasks))


@lru_cache(maxsize=1)
def get_registry() -> RunRegistry:
    """Process-wide run registry; runs live only as long as the process."""
    return RunRegistry(settings.run_retention_seconds, settings.max_finished_runs)


def get_services() -> Optional[Services]:
    """Collaborators for new runs; ``None`` builds them from each run's options."""
    return None
