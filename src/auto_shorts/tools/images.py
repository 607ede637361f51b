"""Image-provider collaborators: Pexels photo search and DALL-E 3 generation."""

from __future__ import annotations

from pathlib import Path

import httpx
import structlog
from openai import AsyncOpenAI

from auto_shorts.errors import ConfigurationError, ExternalProviderError

logger = structlog.get_logger()

_PEXELS_SEARCH_URL = "https://api.pexels.com/v1/search"


async def _download(provider: str, url: str, output_path: str) -> int:
    try:
        async with httpx.AsyncClient(timeout=60, follow_redirects=True) as http:
            dl_resp = await http.get(url)
            dl_resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise ExternalProviderError(provider, f"download failed: {exc}") from exc

    Path(output_path).write_bytes(dl_resp.content)
    return len(dl_resp.content)


class PexelsImages:
    """Search-style provider: returns an existing photo for the query."""

    name = "pexels"

    def __init__(self, api_key: str):
        if not api_key:
            raise ConfigurationError("Pexels API key required. Set PEXELS_API_KEY or pass api_keys.pexels.")
        self._api_key = api_key

    async def resolve(self, query: str, output_path: str) -> None:
        logger.info("pexels_search.start", query=query)

        try:
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.get(
                    _PEXELS_SEARCH_URL,
                    headers={"Authorization": self._api_key},
                    params={"query": query, "per_page": 1, "page": 1},
                )
        except httpx.HTTPError as exc:
            raise ExternalProviderError(self.name, str(exc)) from exc

        if not resp.is_success:
            logger.error("pexels_search.api_error", status_code=resp.status_code, response_body=resp.text[:500])
            raise ExternalProviderError(self.name, f"HTTP {resp.status_code} searching {query!r}")

        photos = resp.json().get("photos") or []
        if not photos:
            raise ExternalProviderError(self.name, f"no photos found for {query!r}")

        image_url = photos[0]["src"]["large"]
        bytes_written = await _download(self.name, image_url, output_path)
        logger.info("pexels_search.done", output_path=output_path, bytes_written=bytes_written)


class DalleImages:
    """Generative provider: synthesizes a new image from the prompt."""

    name = "dalle"

    def __init__(self, api_key: str, size: str = "1024x1792"):
        if not api_key:
            raise ConfigurationError("OpenAI API key required for DALL-E. Set OPENAI_API_KEY or pass api_keys.openai.")
        self._client = AsyncOpenAI(api_key=api_key)
        # DALL-E 3 supported sizes: 1024x1024 | 1024x1792 | 1792x1024
        self._size = size

    async def resolve(self, query: str, output_path: str) -> None:
        logger.info("dalle_generate.start", prompt_len=len(query), size=self._size)

        full_prompt = f"No text, no letters, no words, no typography visible in the image. {query}"
        try:
            response = await self._client.images.generate(
                model="dall-e-3",
                prompt=full_prompt,
                size=self._size,
                quality="hd",
                n=1,
                response_format="url",
            )
        except Exception as exc:
            raise ExternalProviderError(self.name, str(exc)) from exc

        image_url = response.data[0].url
        if not image_url:
            raise ExternalProviderError(self.name, "DALL-E 3 returned no image URL")

        bytes_written = await _download(self.name, image_url, output_path)
        logger.info("dalle_generate.done", output_path=output_path, bytes_written=bytes_written)
