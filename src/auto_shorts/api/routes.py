"""FastAPI route handlers for starting and observing video runs."""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sse_starlette.sse import EventSourceResponse

from auto_shorts.api.dependencies import RunRegistry, get_registry, get_services
from auto_shorts.api.schemas import VideoCreateRequest, VideoCreateResponse, VideoStatusResponse
from auto_shorts.config import VideoOptions
from auto_shorts.errors import ConfigurationError, InvalidScript
from auto_shorts.generate import generate_video
from auto_shorts.services import Services
from auto_shorts.task import Failure, GenerationTask, Success

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/videos")


def _get_task(run_id: str, registry: RunRegistry) -> GenerationTask:
    task = registry.get(run_id)
    if task is None:
        raise HTTPException(status_code=404, detail=f"Video run {run_id} not found")
    return task


@router.post("", response_model=VideoCreateResponse)
async def create_video(
    request: VideoCreateRequest,
    registry: RunRegistry = Depends(get_registry),
    services: Optional[Services] = Depends(get_services),
):
    """Validate the script and start a run in the background."""
    try:
        options = VideoOptions.model_validate(request.options)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    try:
        task = generate_video(request.script, options=options, services=services)
    except InvalidScript as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    registry.add(task)
    logger.info("video.started", run_id=task.run_id, shape=request.script.get("type"))
    return VideoCreateResponse(run_id=task.run_id)


@router.get("/{run_id}/status", response_model=VideoStatusResponse)
async def get_video_status(run_id: str, registry: RunRegistry = Depends(get_registry)):
    task = _get_task(run_id, registry)
    response = VideoStatusResponse(run_id=run_id, status=task.status, logs=list(task.logs))

    result = task.result
    if isinstance(result, Success):
        response.output_path = result.output_path
    elif isinstance(result, Failure):
        response.error_kind = result.kind
        response.error = result.message
    return response


@router.get("/{run_id}/events")
async def stream_video_events(run_id: str, registry: RunRegistry = Depends(get_registry)):
    """SSE endpoint: replays the run's log, then follows it to the terminal event."""
    task = _get_task(run_id, registry)

    async def event_generator():
        async for event in task.subscribe():
            yield {"event": event.type, "data": event.model_dump_json()}

    return EventSourceResponse(event_generator())
