"""Resolve Assets node: turns image queries into local files through a name-stable cache."""

from __future__ import annotations

import os
import uuid
from pathlib import Path

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.errors import ExternalProviderError
from auto_shorts.graph.state import PipelineState
from auto_shorts.nodes.context import run_context
from auto_shorts.services import ImageProvider
from auto_shorts.utils import gather_or_cancel, image_filename

logger = structlog.get_logger()


async def resolve_image(provider: ImageProvider, query: str, cache_dir: Path, refetch: bool) -> str:
    """Local path for *query*.

    With *refetch* off, an already cached file is returned without calling
    the provider, so re-rendering the same script is idempotent. Fetched
    images are written to a private file and moved into place, so another
    run reading the cache never sees a partial image.
    """
    dest = cache_dir / image_filename(query)
    if not refetch and dest.is_file() and dest.stat().st_size > 0:
        logger.info("resolve_image.cached", query=query, path=str(dest))
        return str(dest)

    partial = dest.with_name(f".{dest.stem}-{uuid.uuid4().hex[:8]}{dest.suffix}")
    try:
        await provider.resolve(query, str(partial))
        if not partial.is_file():
            raise ExternalProviderError(provider.name, f"no image written for {query!r}")
        os.replace(partial, dest)
    finally:
        partial.unlink(missing_ok=True)
    logger.info("resolve_image.fetched", query=query, path=str(dest))
    return str(dest)


async def resolve_assets(state: PipelineState, config: RunnableConfig) -> dict:
    services, task = run_context(config)
    options = state["options"]
    visuals = [v for v in state["units"].visuals if v.image_queries]
    if not visuals:
        return {"assets": {}}

    provider = services.require_images()
    cache_dir = options.image_cache_dir(task.workspace)
    cache_dir.mkdir(parents=True, exist_ok=True)

    # Each distinct query is resolved once per run
    queries = list(dict.fromkeys(q for v in visuals for q in v.image_queries))
    task.log(f"Resolving {len(queries)} images with {provider.name}")
    paths = await gather_or_cancel(
        resolve_image(provider, q, cache_dir, options.refetch_images) for q in queries
    )
    by_query = dict(zip(queries, paths))

    assets = {v.unit_id: [by_query[q] for q in v.image_queries] for v in visuals}
    logger.info("resolve_assets.done", run_id=state["run_id"], num_images=len(queries))
    return {"assets": assets}
