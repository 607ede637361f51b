"""Voice-generation collaborators: ElevenLabs, Neets, Edge TTS, and a silent stand-in."""

from __future__ import annotations

from pathlib import Path

import edge_tts
import httpx
import structlog
from elevenlabs import AsyncElevenLabs

from auto_shorts.config import EdgeTTSOptions, ElevenLabsOptions, NeetsTTSOptions
from auto_shorts.errors import ConfigurationError, ExternalProviderError
from auto_shorts.tools.media import MoviePyAudioAssembler

logger = structlog.get_logger()

_NEETS_API_URL = "https://api.neets.ai/v1/tts"


class ElevenLabsVoice:
    name = "elevenlabs"

    def __init__(self, api_key: str, options: ElevenLabsOptions | None = None):
        if not api_key:
            raise ConfigurationError(
                "ElevenLabs API key required for voice generation. "
                "Set ELEVENLABS_API_KEY or pass api_keys.elevenlabs."
            )
        self._client = AsyncElevenLabs(api_key=api_key)
        self._options = options or ElevenLabsOptions()

    async def generate(self, text: str, gender: str, output_path: str) -> None:
        voice_id = self._options.male_voice if gender == "male" else self._options.female_voice
        logger.info("elevenlabs_tts.start", voice_id=voice_id, text_len=len(text))

        try:
            audio_iter = self._client.text_to_speech.convert(
                voice_id=voice_id,
                text=text,
                model_id=self._options.model,
            )
            chunks: list[bytes] = []
            async for chunk in audio_iter:
                chunks.append(chunk)
        except Exception as exc:
            raise ExternalProviderError(self.name, str(exc)) from exc

        audio_data = b"".join(chunks)
        if not audio_data:
            raise ExternalProviderError(self.name, f"empty audio for voice_id={voice_id}")

        Path(output_path).write_bytes(audio_data)
        logger.info("elevenlabs_tts.done", output_path=output_path, bytes_written=len(audio_data))


class NeetsVoice:
    name = "neets"

    def __init__(self, api_key: str, options: NeetsTTSOptions | None = None):
        if not api_key:
            raise ConfigurationError(
                "Neets API key required for voice generation. "
                "Set NEETS_API_KEY or pass api_keys.neets."
            )
        self._api_key = api_key
        self._options = options or NeetsTTSOptions()

    async def generate(self, text: str, gender: str, output_path: str) -> None:
        voice_id = self._options.male_voice if gender == "male" else self._options.female_voice
        logger.info("neets_tts.start", voice_id=voice_id, text_len=len(text))

        try:
            async with httpx.AsyncClient(timeout=60) as client:
                resp = await client.post(
                    _NEETS_API_URL,
                    headers={"X-API-Key": self._api_key, "Content-Type": "application/json"},
                    json={
                        "text": text,
                        "voice_id": voice_id,
                        "fmt": "mp3",
                        "params": {"model": self._options.voice_model},
                    },
                )
        except httpx.HTTPError as exc:
            raise ExternalProviderError(self.name, str(exc)) from exc

        if not resp.is_success:
            logger.error("neets_tts.api_error", status_code=resp.status_code, response_body=resp.text[:500])
            raise ExternalProviderError(self.name, f"HTTP {resp.status_code}: {resp.reason_phrase}")

        Path(output_path).write_bytes(resp.content)
        logger.info("neets_tts.done", output_path=output_path, bytes_written=len(resp.content))


class EdgeVoice:
    """Free Microsoft Edge voices; needs no credential."""

    name = "edge"

    def __init__(self, options: EdgeTTSOptions | None = None):
        self._options = options or EdgeTTSOptions()

    async def generate(self, text: str, gender: str, output_path: str) -> None:
        voice = self._options.male_voice if gender == "male" else self._options.female_voice
        logger.info("edge_tts.start", voice=voice, text_len=len(text))
        try:
            communicate = edge_tts.Communicate(text, voice)
            await communicate.save(output_path)
        except Exception as exc:
            raise ExternalProviderError(self.name, str(exc)) from exc
        logger.info("edge_tts.done", output_path=output_path)


class SilentVoice:
    """Writes silence sized to the text; used when speech synthesis is disabled."""

    name = "silent"

    # Roughly conversational speaking rate
    WORDS_PER_SECOND = 2.5

    def __init__(self, assembler: MoviePyAudioAssembler | None = None):
        self._assembler = assembler or MoviePyAudioAssembler()

    async def generate(self, text: str, gender: str, output_path: str) -> None:
        duration = max(0.5, len(text.split()) / self.WORDS_PER_SECOND)
        await self._assembler.silence(output_path, duration)
