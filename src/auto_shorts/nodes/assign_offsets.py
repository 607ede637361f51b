"""Assign Offsets node: maps visual units onto the measured offset table."""

from __future__ import annotations

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.errors import MediaProcessingError
from auto_shorts.graph.state import PipelineState
from auto_shorts.models.timeline import Timeline
from auto_shorts.nodes.context import run_context
from auto_shorts.shapes import get_provider
from auto_shorts.timing import OffsetTable, entries_within

logger = structlog.get_logger()


async def assign_offsets(state: PipelineState, config: RunnableConfig) -> dict:
    _, task = run_context(config)
    table = OffsetTable(state["segments"], total_duration=state["master_duration"])
    entries = get_provider(state["shape"]).assign_offsets(state["units"].visuals, table)

    if any(e.start < 0 for e in entries) or not entries_within(entries, table.total):
        raise MediaProcessingError("assign_offsets", "a timeline entry falls outside the master track")

    timeline = Timeline(
        offsets=table.offsets,
        durations=table.durations,
        total_duration=table.total,
        entries=entries,
    )
    logger.info(
        "assign_offsets.done",
        run_id=state["run_id"],
        offsets=[round(o, 3) for o in table.offsets],
        num_entries=len(entries),
        total_duration=table.total,
    )
    task.timeline = timeline
    task.log(f"Timeline ready: {len(entries)} timed elements over {table.total:.2f}s")
    return {"timeline": timeline}
