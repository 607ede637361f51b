"""Application configuration loaded from environment variables, plus per-run options."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings

from auto_shorts.errors import ConfigurationError

_PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Folders every resource directory must provide
REQUIRED_RES_FOLDERS = ("models", "vid", "music")


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Provider API keys
    elevenlabs_api_key: str = ""
    neets_api_key: str = ""
    pexels_api_key: str = ""
    openai_api_key: str = ""

    # Directories
    res_dir: str = str(_PROJECT_ROOT / "res")
    temp_dir: str = "./video_temp"
    output_base_dir: str = "./output"

    # Default collaborators
    voice_provider: str = "elevenlabs"
    image_provider: str = "pexels"

    # Audio mixing
    voice_gain: float = 1.0
    background_gain: float = 0.1
    transcription_sample_rate: int = 16000

    # ElevenLabs allows max 2 concurrent requests on most plans
    tts_concurrency: int = 2

    # Transcription
    whisper_model: str = "whisper-1"
    whisper_language: str = "en"

    # Video output
    video_fps: int = 24

    # Comma-separated extra CORS origins for the HTTP surface
    allowed_origins: str = ""

    # Finished runs stay visible to the HTTP surface this long, up to a cap
    run_retention_seconds: float = 3600.0
    max_finished_runs: int = 200


settings = Settings()


def get_res_dir() -> Path:
    return Path(settings.res_dir)


class SubtitleOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    font: str = "Bangers"
    font_size: int = 70
    font_color: str = "#ffffff"
    stroke_color: str = "#000000"
    stroke_width: int = 8


class ElevenLabsOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str = "eleven_turbo_v2"
    # Voice IDs of the "Will" and "Sarah" premade voices
    male_voice: str = "bIHbv24MWmeRgasZH58o"
    female_voice: str = "EXAVITQu4vr4xnSDxMaL"


class NeetsTTSOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    voice_model: str = "style-diff-500"
    male_voice: str = "us-male-2"
    female_voice: str = "us-female-2"


class EdgeTTSOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    male_voice: str = "en-US-GuyNeural"
    female_voice: str = "en-US-JennyNeural"


class APIKeys(BaseModel):
    """Per-run credential overrides; empty values fall back to ``settings``."""

    model_config = ConfigDict(frozen=True)

    elevenlabs: str = ""
    neets: str = ""
    pexels: str = ""
    openai: str = ""

    def resolve(self, provider: str) -> str:
        override = getattr(self, provider, "")
        return override or getattr(settings, f"{provider}_api_key", "")


class VideoOptions(BaseModel):
    """Options for a single generation run.

    Built once per run and passed by reference through every stage; nothing
    in here is mutated after construction.
    """

    model_config = ConfigDict(frozen=True)

    temp_path: str = Field(default_factory=lambda: settings.temp_dir)
    res_path: str = Field(default_factory=lambda: settings.res_dir)
    output_dir: str = Field(default_factory=lambda: settings.output_base_dir)
    # Cache shared across runs, used only when refetch_images is off
    image_dir: Optional[str] = None

    voice_provider: Literal["elevenlabs", "neets", "edge"] = Field(
        default_factory=lambda: settings.voice_provider
    )
    image_provider: Literal["pexels", "dalle"] = Field(
        default_factory=lambda: settings.image_provider
    )
    orientation: Literal["vertical", "horizontal"] = "vertical"

    bg_video_path: Optional[str] = None
    bg_music_path: Optional[str] = None
    use_bg_music: bool = True
    use_bg_video: bool = True

    refetch_images: bool = True
    disable_tts: bool = False
    disable_subtitles: bool = False
    cleanup_temp: bool = False

    subtitles: SubtitleOptions = Field(default_factory=SubtitleOptions)
    elevenlabs: ElevenLabsOptions = Field(default_factory=ElevenLabsOptions)
    neets: NeetsTTSOptions = Field(default_factory=NeetsTTSOptions)
    edge: EdgeTTSOptions = Field(default_factory=EdgeTTSOptions)
    api_keys: APIKeys = Field(default_factory=APIKeys)

    @property
    def resolution(self) -> tuple[int, int]:
        """(width, height) for the configured orientation."""
        if self.orientation == "horizontal":
            return 1920, 1080
        return 1080, 1920

    def image_cache_dir(self, workspace: Path) -> Path:
        """Where a run keeps its images.

        Only the no-refetch mode uses the cache shared across runs
        (``image_dir``, or ``images`` under the temp path); a refetching run
        keeps its images inside its own workspace.
        """
        if self.refetch_images:
            return workspace / "images"
        return Path(self.image_dir) if self.image_dir else Path(self.temp_path) / "images"


def check_res_dir(res_path: str | Path) -> None:
    """Raise ``ConfigurationError`` unless *res_path* holds every required folder."""
    root = Path(res_path)
    for folder in REQUIRED_RES_FOLDERS:
        folder_path = root / folder
        if not folder_path.is_dir():
            raise ConfigurationError(
                f"Resource folder is missing folder: {folder_path}. "
                "Download the default resources into the resource path first."
            )
