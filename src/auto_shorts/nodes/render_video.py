"""Render Video node: hands the scene graph to the rendering collaborator."""

from __future__ import annotations

from pathlib import Path

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.graph.state import PipelineState
from auto_shorts.nodes.context import run_context

logger = structlog.get_logger()


async def render_video(state: PipelineState, config: RunnableConfig) -> dict:
    services, task = run_context(config)
    output_dir = Path(state["options"].output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = str(output_dir / f"{state['run_id']}.mp4")

    reported = -1

    def on_progress(fraction: float) -> None:
        nonlocal reported
        step = int(fraction * 10)
        if step > reported:
            reported = step
            task.log(f"Rendering: {step * 10}%")

    task.log(f"Rendering video with {services.renderer.name}")
    await services.renderer.render(state["scene"], output_path, on_progress=on_progress)

    logger.info("render_video.node_done", run_id=state["run_id"], output_path=output_path)
    return {"output_path": output_path}
