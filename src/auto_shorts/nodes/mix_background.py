"""Mix Background node: lays the background music under the voice track."""

from __future__ import annotations

from pathlib import Path

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.config import settings
from auto_shorts.graph.state import PipelineState
from auto_shorts.nodes.context import run_context

logger = structlog.get_logger()


async def mix_background(state: PipelineState, config: RunnableConfig) -> dict:
    services, task = run_context(config)
    mixed_path = str(Path(state["workspace"]) / "mixed.mp3")

    task.log("Mixing background music")
    await services.assembler.mix(
        state["voice_path"],
        state["bg_music_path"],
        mixed_path,
        voice_gain=settings.voice_gain,
        background_gain=settings.background_gain,
    )
    logger.info("mix_background.node_done", run_id=state["run_id"], master_path=mixed_path)
    return {"master_path": mixed_path}
