"""Transcription nodes: resample the master track, then write the subtitle file."""

from __future__ import annotations

from pathlib import Path

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.config import settings
from auto_shorts.graph.state import PipelineState
from auto_shorts.nodes.context import run_context
from auto_shorts.shapes import get_provider
from auto_shorts.tools.whisper import normalize_segments, write_srt

logger = structlog.get_logger()


async def prepare_transcription(state: PipelineState, config: RunnableConfig) -> dict:
    services, task = run_context(config)
    rate = settings.transcription_sample_rate
    output_path = str(Path(state["workspace"]) / f"audio{rate // 1000}k.wav")

    task.log("Preparing audio for transcription")
    await services.assembler.resample(state["master_path"], output_path, rate=rate)
    return {"transcription_path": output_path}


async def transcribe_subtitles(state: PipelineState, config: RunnableConfig) -> dict:
    """Transcribe the whole mixed master so cue times are relative to it."""
    services, task = run_context(config)
    transcriber = services.require_transcriber()
    max_len = get_provider(state["shape"]).subtitle_max_len

    task.log(f"Transcribing subtitles with {transcriber.name}")
    segments = await transcriber.transcribe(state["transcription_path"], max_len)
    if not segments:
        logger.warning("transcribe_subtitles.empty", run_id=state["run_id"])
        task.log("Transcription returned no speech; rendering without subtitles")
        return {"srt_path": None}

    total_ms = int(round(state["master_duration"] * 1000))
    srt_path = write_srt(
        normalize_segments(segments, total_ms),
        str(Path(state["workspace"]) / "subtitles.srt"),
    )
    return {"srt_path": srt_path}
