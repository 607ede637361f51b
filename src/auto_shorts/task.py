"""Generation Task: the observable handle for one video run.

A task owns its workspace directory, an append-only log channel and a single
terminal result. Progress is reported as ``log`` events; the run ends with
exactly one ``done`` or ``error`` event.
"""

from __future__ import annotations

import asyncio
import shutil
import time
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Literal, Optional, Union

import structlog
from pydantic import BaseModel, ConfigDict

from auto_shorts.config import VideoOptions
from auto_shorts.errors import AutoShortsError, Cancelled
from auto_shorts.models.timeline import Timeline

logger = structlog.get_logger()


class Success(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_path: str


class Failure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    message: str


Result = Union[Success, Failure]


class TaskEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["log", "done", "error"]
    message: str = ""
    output_path: Optional[str] = None
    kind: Optional[str] = None

    @property
    def terminal(self) -> bool:
        return self.type != "log"


class GenerationTask:
    def __init__(self, options: VideoOptions, run_id: str | None = None):
        self.run_id = run_id or uuid.uuid4().hex
        self.options = options
        self.workspace = Path(options.temp_path) / self.run_id
        self.logs: list[str] = []
        # Set once offsets are assigned; kept for inspection after the run
        self.timeline: Timeline | None = None
        # Monotonic clock reading taken when the result is set
        self.finished_at: float | None = None

        self._events: list[TaskEvent] = []
        self._subscribers: list[asyncio.Queue[TaskEvent]] = []
        self._finished = asyncio.Event()
        self._result: Result | None = None
        self._exception: AutoShortsError | None = None
        self._runner: asyncio.Task | None = None

    # -- state --------------------------------------------------------------

    @property
    def done(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> Result | None:
        return self._result

    @property
    def status(self) -> str:
        if self._result is None:
            return "running"
        if isinstance(self._result, Success):
            return "completed"
        return "cancelled" if self._result.kind == Cancelled.kind else "failed"

    # -- workspace ----------------------------------------------------------

    def prepare_workspace(self) -> Path:
        """Create a fresh workspace, deleting a stale one with the same id."""
        if self.workspace.exists():
            logger.warning("task.workspace.stale", run_id=self.run_id, workspace=str(self.workspace))
            shutil.rmtree(self.workspace)
        self.workspace.mkdir(parents=True)
        return self.workspace

    def cleanup(self) -> None:
        if self.workspace.exists():
            shutil.rmtree(self.workspace, ignore_errors=True)
            logger.info("task.workspace.removed", run_id=self.run_id)

    # -- events -------------------------------------------------------------

    def log(self, message: str) -> None:
        self.logs.append(message)
        logger.info("task.log", run_id=self.run_id, message=message)
        self._publish(TaskEvent(type="log", message=message))

    def _publish(self, event: TaskEvent) -> None:
        self._events.append(event)
        for queue in self._subscribers:
            queue.put_nowait(event)

    async def subscribe(self) -> AsyncIterator[TaskEvent]:
        """Replay past events, then follow live ones until the terminal event."""
        queue: asyncio.Queue[TaskEvent] = asyncio.Queue()
        for event in self._events:
            queue.put_nowait(event)
        if not self.done:
            self._subscribers.append(queue)
        try:
            while True:
                event = await queue.get()
                yield event
                if event.terminal:
                    return
        finally:
            if queue in self._subscribers:
                self._subscribers.remove(queue)

    def events(self) -> list[TaskEvent]:
        return list(self._events)

    # -- lifecycle ----------------------------------------------------------

    def start(self, runner: Callable[[GenerationTask], Awaitable[str]]) -> None:
        """Schedule *runner* on the running loop; it must return the output path."""
        if self._runner is not None:
            raise RuntimeError(f"task {self.run_id} already started")
        self._runner = asyncio.get_running_loop().create_task(self._drive(runner))
        self._runner.add_done_callback(self._on_runner_done)

    def _on_runner_done(self, runner: asyncio.Task) -> None:
        # A runner cancelled before its first step never enters _drive
        if not self.done:
            self._fail(Cancelled("Generation cancelled"))
            self._finished.set()

    async def _drive(self, runner: Callable[[GenerationTask], Awaitable[str]]) -> None:
        try:
            output_path = await runner(self)
        except asyncio.CancelledError:
            self._fail(Cancelled("Generation cancelled"))
        except AutoShortsError as exc:
            logger.error("task.failed", run_id=self.run_id, kind=exc.kind, error=str(exc))
            self._fail(exc)
        except Exception as exc:
            logger.exception("task.crashed", run_id=self.run_id)
            wrapped = AutoShortsError(str(exc) or type(exc).__name__)
            wrapped.kind = type(exc).__name__
            self._fail(wrapped)
        else:
            self._finish(Success(output_path=output_path))
            self._publish(TaskEvent(type="done", output_path=output_path, message=output_path))
            logger.info("task.done", run_id=self.run_id, output_path=output_path)
        finally:
            if self.options.cleanup_temp:
                self.cleanup()
            self._finished.set()

    def _finish(self, result: Result) -> None:
        self._result = result
        self.finished_at = time.monotonic()

    def _fail(self, exc: AutoShortsError) -> None:
        self._exception = exc
        self._finish(Failure(kind=exc.kind, message=str(exc)))
        self._publish(TaskEvent(type="error", kind=exc.kind, message=str(exc)))

    def cancel(self) -> bool:
        """Stop the run at its next suspension point.

        Work already handed to executor threads or subprocesses is not
        interrupted; the result becomes a ``Cancelled`` failure.
        """
        if self._runner is None or self._runner.done():
            return False
        return self._runner.cancel()

    async def wait(self) -> Result:
        await self._finished.wait()
        assert self._result is not None
        return self._result

    async def raise_for_result(self) -> str:
        """Wait for the run; return the output path or raise its error."""
        result = await self.wait()
        if isinstance(result, Failure):
            assert self._exception is not None
            raise self._exception
        return result.output_path
