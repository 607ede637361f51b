"""Assemble Master node: concatenates the unit clips into the voice track."""

from __future__ import annotations

from pathlib import Path

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.errors import MediaProcessingError
from auto_shorts.graph.state import PipelineState
from auto_shorts.nodes.context import run_context

logger = structlog.get_logger()

# Seconds of disagreement between summed clips and the master file worth a warning
DRIFT_TOLERANCE = 0.05


async def assemble_master(state: PipelineState, config: RunnableConfig) -> dict:
    services, task = run_context(config)
    segments = state["segments"]

    # Empty clips keep their ordinal (and a zero duration) but add nothing audible
    clips = [s.file_path for s in segments if s.duration > 0]
    skipped = len(segments) - len(clips)
    if not clips:
        raise MediaProcessingError("concatenate", "every narration clip is empty")

    voice_path = str(Path(state["workspace"]) / "voice.mp3")
    task.log(f"Assembling master track from {len(clips)} clips")
    await services.assembler.concatenate(clips, voice_path)

    master_duration = await services.assembler.probe(voice_path)
    expected = sum(s.duration for s in segments)
    if abs(master_duration - expected) > DRIFT_TOLERANCE:
        logger.warning(
            "assemble_master.drift",
            measured=master_duration,
            expected=expected,
            drift=master_duration - expected,
        )

    logger.info(
        "assemble_master.done",
        run_id=state["run_id"],
        voice_path=voice_path,
        duration=master_duration,
        skipped_empty=skipped,
    )
    return {"voice_path": voice_path, "master_path": voice_path, "master_duration": master_duration}
