"""Collaborator contracts and their per-run wiring."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional, Protocol

import structlog

from auto_shorts.config import VideoOptions, settings
from auto_shorts.errors import ConfigurationError
from auto_shorts.models.scene import SceneGraph
from auto_shorts.models.timeline import TranscriptSegment

logger = structlog.get_logger()


class VoiceProvider(Protocol):
    name: str

    async def generate(self, text: str, gender: str, output_path: str) -> None: ...


class ImageProvider(Protocol):
    name: str

    async def resolve(self, query: str, output_path: str) -> None: ...


class Transcriber(Protocol):
    name: str

    async def transcribe(self, audio_path: str, max_len: int) -> list[TranscriptSegment]: ...


class AudioAssembler(Protocol):
    async def concatenate(self, clips: list[str], output_path: str) -> str: ...

    async def merge_with_cue(self, unit_clip: str, cue_clip: str, output_path: str) -> str: ...

    async def mix(
        self,
        voice_path: str,
        background_path: str,
        output_path: str,
        voice_gain: float = 1.0,
        background_gain: float = 0.1,
    ) -> str: ...

    async def resample(self, input_path: str, output_path: str, rate: int = 16000) -> str: ...

    async def probe(self, path: str) -> float: ...


class Renderer(Protocol):
    name: str

    async def render(
        self,
        scene: SceneGraph,
        output_path: str,
        on_progress: Callable[[float], None] | None = None,
    ) -> str: ...


@dataclass(frozen=True)
class Services:
    """Everything a run talks to outside the process."""

    voice: VoiceProvider
    assembler: AudioAssembler
    renderer: Renderer
    images: Optional[ImageProvider] = None
    transcriber: Optional[Transcriber] = None

    def require_images(self) -> ImageProvider:
        if self.images is None:
            raise ConfigurationError("No image provider configured for a script that needs images")
        return self.images

    def require_transcriber(self) -> Transcriber:
        if self.transcriber is None:
            raise ConfigurationError("No transcriber configured while subtitles are enabled")
        return self.transcriber


def build_voice(options: VideoOptions, assembler: AudioAssembler) -> VoiceProvider:
    from auto_shorts.tools.voice import EdgeVoice, ElevenLabsVoice, NeetsVoice, SilentVoice

    if options.disable_tts:
        return SilentVoice(assembler)
    if options.voice_provider == "neets":
        return NeetsVoice(options.api_keys.resolve("neets"), options.neets)
    if options.voice_provider == "edge":
        return EdgeVoice(options.edge)
    return ElevenLabsVoice(options.api_keys.resolve("elevenlabs"), options.elevenlabs)


def build_images(options: VideoOptions) -> ImageProvider:
    from auto_shorts.tools.images import DalleImages, PexelsImages

    if options.image_provider == "dalle":
        size = "1792x1024" if options.orientation == "horizontal" else "1024x1792"
        return DalleImages(options.api_keys.resolve("openai"), size=size)
    return PexelsImages(options.api_keys.resolve("pexels"))


def build_services(options: VideoOptions, *, images: bool = True, transcription: bool = True) -> Services:
    """Instantiate the collaborators *options* selects.

    Image and transcription clients are only built when the run needs them,
    so a script without images never requires an image-provider credential.
    """
    from auto_shorts.tools.media import MoviePyAudioAssembler
    from auto_shorts.tools.moviepy_tools import MoviePyRenderer
    from auto_shorts.tools.whisper import WhisperTranscriber

    assembler = MoviePyAudioAssembler()
    services = Services(
        voice=build_voice(options, assembler),
        assembler=assembler,
        renderer=MoviePyRenderer(fps=settings.video_fps),
        images=build_images(options) if images else None,
        transcriber=(
            WhisperTranscriber(
                options.api_keys.resolve("openai"),
                model=settings.whisper_model,
                language=settings.whisper_language,
            )
            if transcription
            else None
        ),
    )
    logger.info(
        "services.built",
        voice=services.voice.name,
        images=services.images.name if services.images else None,
        transcriber=services.transcriber.name if services.transcriber else None,
    )
    return services
