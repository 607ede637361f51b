"""Access to the per-run collaborators passed through the graph config."""

from __future__ import annotations

from langchain_core.runnables import RunnableConfig

from auto_shorts.services import Services
from auto_shorts.task import GenerationTask


def run_context(config: RunnableConfig) -> tuple[Services, GenerationTask]:
    configurable = config.get("configurable") or {}
    return configurable["services"], configurable["task"]
