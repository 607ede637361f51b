"""Request/Response schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class VideoCreateRequest(BaseModel):
    script: dict[str, Any]
    options: dict[str, Any] = Field(
        default_factory=dict, description="Overrides for VideoOptions fields"
    )


class VideoCreateResponse(BaseModel):
    run_id: str
    status: str = "started"


class VideoStatusResponse(BaseModel):
    run_id: str
    status: str  # "running" | "completed" | "failed" | "cancelled"
    output_path: Optional[str] = None
    error_kind: Optional[str] = None
    error: Optional[str] = None
    logs: list[str] = Field(default_factory=list)
