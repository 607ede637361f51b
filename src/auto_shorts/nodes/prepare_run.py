"""Prepare Run node: picks background media and checks every resource file up front."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Optional

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.errors import ConfigurationError
from auto_shorts.graph.state import PipelineState
from auto_shorts.nodes.context import run_context
from auto_shorts.shapes import get_provider

logger = structlog.get_logger()


def _pick(folder: Path, pattern: str) -> Optional[str]:
    candidates = sorted(folder.glob(pattern))
    return str(random.choice(candidates)) if candidates else None


def _require_file(path: Optional[str], what: str) -> str:
    if not path or not Path(path).is_file():
        raise ConfigurationError(f"No {what} available: {path or 'none found'}")
    return path


async def prepare_run(state: PipelineState, config: RunnableConfig) -> dict:
    """Resolve background music/video and verify cue and card resources exist.

    Runs before any external call so a missing resource never wastes a
    speech-synthesis request.
    """
    _, task = run_context(config)
    options = state["options"]
    provider = get_provider(state["shape"])
    res = Path(options.res_path)

    for unit in state["units"].narration:
        if unit.cue:
            _require_file(str(res / unit.cue), f"cue clip '{unit.cue}'")
    for visual in state["units"].visuals:
        if visual.background:
            _require_file(str(res / visual.background), f"background image '{visual.background}'")

    bg_music_path = None
    if options.use_bg_music:
        bg_music_path = _require_file(
            options.bg_music_path or _pick(res / "music", "*.mp3"), "background music"
        )

    bg_video_path = None
    if provider.uses_background_video and options.use_bg_video:
        bg_video_path = _require_file(
            options.bg_video_path or _pick(res / "vid", "*.mp4"), "background video"
        )

    logger.info(
        "prepare_run.done",
        run_id=state["run_id"],
        shape=state["shape"],
        bg_music=bg_music_path,
        bg_video=bg_video_path,
    )
    task.log(f"Preparing {state['shape']} video in {state['workspace']}")
    return {"bg_music_path": bg_music_path, "bg_video_path": bg_video_path}
