"""Shared fixtures: a throwaway resource directory and in-process collaborator fakes.

The fakes stand in for real media: every "audio" file holds its duration in
seconds as text, so the fake assembler can concatenate and probe it exactly.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from auto_shorts.config import VideoOptions
from auto_shorts.errors import ExternalProviderError, MediaProcessingError
from auto_shorts.models.timeline import TranscriptSegment
from auto_shorts.services import Services


def _read_duration(path: str) -> float:
    p = Path(path)
    if not p.is_file():
        raise MediaProcessingError("probe", f"file not found: {path}")
    text = p.read_text().strip()
    return float(text) if text else 0.0


class FakeVoice:
    name = "fake-voice"

    def __init__(self, durations: dict[str, float] | None = None, default: float = 1.0, fail_on: str | None = None):
        self.durations = durations or {}
        self.default = default
        self.fail_on = fail_on
        self.calls: list[tuple[str, str]] = []

    async def generate(self, text: str, gender: str, output_path: str) -> None:
        self.calls.append((text, gender))
        if text == self.fail_on:
            raise ExternalProviderError(self.name, f"cannot speak {text!r}")
        duration = self.durations.get(text, self.default)
        Path(output_path).write_text(f"{duration}" if duration > 0 else "")


class FakeAssembler:
    def __init__(self):
        self.calls: list[str] = []

    async def concatenate(self, clips: list[str], output_path: str) -> str:
        self.calls.append("concatenate")
        Path(output_path).write_text(str(sum(_read_duration(c) for c in clips)))
        return output_path

    async def merge_with_cue(self, unit_clip: str, cue_clip: str, output_path: str) -> str:
        self.calls.append("merge_with_cue")
        Path(output_path).write_text(str(_read_duration(unit_clip) + _read_duration(cue_clip)))
        return output_path

    async def mix(self, voice_path, background_path, output_path, voice_gain=1.0, background_gain=0.1) -> str:
        self.calls.append("mix")
        Path(output_path).write_text(Path(voice_path).read_text())
        return output_path

    async def resample(self, input_path: str, output_path: str, rate: int = 16000) -> str:
        self.calls.append("resample")
        Path(output_path).write_text(Path(input_path).read_text())
        return output_path

    async def silence(self, output_path: str, duration: float) -> str:
        Path(output_path).write_text(str(duration))
        return output_path

    async def probe(self, path: str) -> float:
        return _read_duration(path)


class FakeImages:
    name = "fake-images"

    def __init__(self):
        self.queries: list[str] = []

    async def resolve(self, query: str, output_path: str) -> None:
        self.queries.append(query)
        Path(output_path).write_bytes(b"image:" + query.encode())


class FakeTranscriber:
    name = "fake-whisper"

    def __init__(self, segments: list[TranscriptSegment] | None = None):
        self.segments = segments if segments is not None else [
            TranscriptSegment(start_ms=0, end_ms=800, text="hello"),
            TranscriptSegment(start_ms=800, end_ms=1500, text="world"),
        ]
        self.calls: list[tuple[str, int]] = []

    async def transcribe(self, audio_path: str, max_len: int) -> list[TranscriptSegment]:
        self.calls.append((audio_path, max_len))
        return list(self.segments)


class FakeRenderer:
    name = "fake-renderer"

    def __init__(self):
        self.scene = None

    async def render(self, scene, output_path, on_progress=None) -> str:
        self.scene = scene
        if on_progress:
            on_progress(0.5)
            on_progress(1.0)
        Path(output_path).write_text("video")
        return output_path


@pytest.fixture
def res_dir(tmp_path: Path) -> Path:
    res = tmp_path / "res"
    for folder in ("models", "vid", "music"):
        (res / folder).mkdir(parents=True)
    (res / "vid" / "background.mp4").write_text("video")
    (res / "music" / "background.mp3").write_text("30.0")
    (res / "tick.mp3").write_text("0.5")
    (res / "clock.mp3").write_text("1.0")
    (res / "msg_header.png").write_bytes(b"header")
    (res / "rather.png").write_bytes(b"rather")
    return res


@pytest.fixture
def options(tmp_path: Path, res_dir: Path) -> VideoOptions:
    return VideoOptions(
        temp_path=str(tmp_path / "temp"),
        res_path=str(res_dir),
        output_dir=str(tmp_path / "output"),
        use_bg_music=False,
    )


@pytest.fixture
def voice() -> FakeVoice:
    return FakeVoice()


@pytest.fixture
def assembler() -> FakeAssembler:
    return FakeAssembler()


@pytest.fixture
def images() -> FakeImages:
    return FakeImages()


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def services(voice, assembler, images, transcriber, renderer) -> Services:
    return Services(
        voice=voice,
        assembler=assembler,
        renderer=renderer,
        images=images,
        transcriber=transcriber,
    )
