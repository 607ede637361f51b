"""Small helpers shared by the pipeline stages."""

from __future__ import annotations

import asyncio
import hashlib
import re
from collections.abc import Awaitable, Iterable
from typing import TypeVar

T = TypeVar("T")

_SLUG_RE = re.compile(r"[^a-z0-9]+")


async def gather_or_cancel(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Like ``asyncio.gather`` but cancels the siblings of the first failure."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


def slugify(text: str, max_len: int = 40) -> str:
    slug = _SLUG_RE.sub("-", text.lower()).strip("-")
    return slug[:max_len].rstrip("-") or "image"


def image_filename(query: str) -> str:
    """Deterministic cache file name for an image query."""
    digest = hashlib.sha1(query.encode("utf-8")).hexdigest()[:10]
    return f"image-{slugify(query)}-{digest}.png"
