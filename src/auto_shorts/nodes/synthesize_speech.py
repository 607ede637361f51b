"""Synthesize Speech node: one spoken clip per narration unit, cue clips merged in."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.config import settings
from auto_shorts.graph.state import PipelineState
from auto_shorts.models.timeline import AudioSegment, NarrationUnit
from auto_shorts.nodes.context import run_context
from auto_shorts.services import Services
from auto_shorts.utils import gather_or_cancel

logger = structlog.get_logger()


async def _synthesize_unit(
    unit: NarrationUnit,
    services: Services,
    audio_dir: Path,
    res_path: Path,
    semaphore: asyncio.Semaphore,
) -> AudioSegment:
    raw_path = audio_dir / f"unit-{unit.ordinal:03d}.mp3"
    async with semaphore:
        await services.voice.generate(unit.text, unit.voice_gender, str(raw_path))

    clip_path = raw_path
    if unit.cue:
        cue_path = res_path / unit.cue
        if await services.assembler.probe(str(raw_path)) > 0:
            clip_path = audio_dir / f"unit-{unit.ordinal:03d}-cue.mp3"
            await services.assembler.merge_with_cue(str(raw_path), str(cue_path), str(clip_path))
        else:
            # Nothing to merge onto; the cue alone stands in for the unit
            clip_path = cue_path

    duration = await services.assembler.probe(str(clip_path))
    logger.info(
        "synthesize.unit.done",
        unit_id=unit.unit_id,
        ordinal=unit.ordinal,
        cue=unit.cue,
        duration=duration,
    )
    return AudioSegment(
        unit_id=unit.unit_id,
        ordinal=unit.ordinal,
        file_path=str(clip_path),
        duration=duration,
    )


async def synthesize_speech(state: PipelineState, config: RunnableConfig) -> dict:
    """Generate every unit's clip concurrently, bounded by the TTS concurrency limit.

    Completion order does not matter: segments are returned sorted by ordinal.
    """
    services, task = run_context(config)
    units = state["units"].narration
    audio_dir = Path(state["workspace"]) / "audio"
    audio_dir.mkdir(parents=True, exist_ok=True)

    task.log(f"Generating speech for {len(units)} narration units with {services.voice.name}")
    semaphore = asyncio.Semaphore(settings.tts_concurrency)
    res_path = Path(state["options"].res_path)

    segments = await gather_or_cancel(
        _synthesize_unit(unit, services, audio_dir, res_path, semaphore) for unit in units
    )
    segments.sort(key=lambda s: s.ordinal)

    logger.info(
        "synthesize_speech.done",
        run_id=state["run_id"],
        num_units=len(segments),
        total_duration=sum(s.duration for s in segments),
    )
    task.log(f"Generated {len(segments)} audio clips")
    return {"segments": segments}
