"""Entry points: validate a script, then run the generation graph as a task."""

from __future__ import annotations

import json
from typing import Any

import structlog

from auto_shorts.config import VideoOptions, check_res_dir
from auto_shorts.errors import InvalidScript
from auto_shorts.graph.builder import build_graph
from auto_shorts.graph.edges import wants_subtitles
from auto_shorts.models.script import Script, parse_script
from auto_shorts.models.timeline import DerivedUnits
from auto_shorts.services import Services, build_services
from auto_shorts.shapes import get_provider
from auto_shorts.task import GenerationTask

logger = structlog.get_logger()


def _initial_state(task: GenerationTask, script: Script, units: DerivedUnits) -> dict:
    return {
        "run_id": task.run_id,
        "shape": script.type,
        "script": script,
        "options": task.options,
        "workspace": str(task.workspace),
        "units": units,
        "bg_music_path": None,
        "bg_video_path": None,
        "segments": [],
        "voice_path": None,
        "master_path": None,
        "master_duration": 0.0,
        "transcription_path": None,
        "srt_path": None,
        "assets": {},
        "timeline": None,
        "scene": None,
        "output_path": None,
    }


def generate_video(
    script: Any,
    options: VideoOptions | None = None,
    services: Services | None = None,
    run_id: str | None = None,
) -> GenerationTask:
    """Start generating a video for *script* and return its task handle.

    Everything that can be checked without side effects (script shape,
    required fields, option compatibility, resource folders, credentials)
    is checked here and raised synchronously; nothing touches the
    filesystem until the script is known to be valid. Must be called from
    a running event loop.
    """
    parsed = parse_script(script)
    provider = get_provider(parsed.type)
    units = provider.derive_units(parsed)

    options = options or VideoOptions()
    provider.check_options(options)
    check_res_dir(options.res_path)

    task = GenerationTask(options, run_id=run_id)
    initial_state = _initial_state(task, parsed, units)
    if services is None:
        services = build_services(
            options,
            images=any(v.image_queries for v in units.visuals),
            transcription=wants_subtitles(initial_state),
        )

    async def _run(task: GenerationTask) -> str:
        task.prepare_workspace()
        graph = build_graph()
        final_state = await graph.ainvoke(
            initial_state,
            config={"configurable": {"services": services, "task": task}},
        )
        return final_state["output_path"]

    logger.info(
        "generate_video.start",
        run_id=task.run_id,
        shape=parsed.type,
        num_units=len(units.narration),
        num_visuals=len(units.visuals),
    )
    task.start(_run)
    return task


def generate_video_from_json(
    text: str,
    options: VideoOptions | None = None,
    services: Services | None = None,
    run_id: str | None = None,
) -> GenerationTask:
    if not text or not text.strip():
        raise InvalidScript("Empty JSON data!")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidScript("Invalid JSON data!") from exc
    return generate_video(data, options=options, services=services, run_id=run_id)


async def run_video(
    script: Any,
    options: VideoOptions | None = None,
    services: Services | None = None,
) -> str:
    """Generate a video and return its output path, raising the run's error on failure."""
    task = generate_video(script, options=options, services=services)
    return await task.raise_for_result()
