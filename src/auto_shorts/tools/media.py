"""Audio Assembler and Duration Prober built on MoviePy audio clips."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from pathlib import Path

import structlog
from moviepy import AudioClip, AudioFileClip, CompositeAudioClip, concatenate_audioclips
from moviepy.audio.fx import MultiplyVolume

from auto_shorts.errors import MediaProcessingError

logger = structlog.get_logger()

_OUTPUT_RATE = 44100


async def _offload(operation: str, func: Callable[..., str], *args) -> str:
    """Run blocking MoviePy work off the loop; failures are raised naming *operation*."""
    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, func, *args)
    except MediaProcessingError:
        raise
    except Exception as exc:
        logger.error("media.failed", operation=operation, error=str(exc))
        raise MediaProcessingError(operation, str(exc)) from exc


def _concatenate(paths: list[str], output_path: str) -> str:
    clips = [AudioFileClip(p) for p in paths]
    try:
        final = concatenate_audioclips(clips)
        final.write_audiofile(output_path, fps=_OUTPUT_RATE, logger=None)
        final.close()
    finally:
        for c in clips:
            c.close()
    return output_path


def _mix(voice_path: str, background_path: str, output_path: str, voice_gain: float, background_gain: float) -> str:
    voice = AudioFileClip(voice_path)
    background = AudioFileClip(background_path)
    try:
        if not background.duration:
            raise MediaProcessingError("mix", f"background has no duration: {background_path}")
        bed = background
        if background.duration < voice.duration:
            loops_needed = int(voice.duration / background.duration) + 1
            bed = concatenate_audioclips([background] * loops_needed)
        bed = bed.subclipped(0, voice.duration).with_effects([MultiplyVolume(background_gain)])
        narration = voice.with_effects([MultiplyVolume(voice_gain)])

        mixed = CompositeAudioClip([narration, bed]).with_duration(voice.duration)
        mixed.write_audiofile(output_path, fps=_OUTPUT_RATE, logger=None)
        mixed.close()
    finally:
        voice.close()
        background.close()
    return output_path


def _resample(input_path: str, output_path: str, rate: int) -> str:
    clip = AudioFileClip(input_path)
    try:
        clip.write_audiofile(output_path, fps=rate, ffmpeg_params=["-ac", "1"], logger=None)
    finally:
        clip.close()
    return output_path


def _silence(output_path: str, duration: float) -> str:
    clip = AudioClip(lambda t: 0 * t, duration=duration, fps=_OUTPUT_RATE)
    clip.write_audiofile(output_path, fps=_OUTPUT_RATE, logger=None)
    return output_path


class MoviePyAudioAssembler:
    """File-to-file audio operations; no timing logic of its own."""

    async def concatenate(self, clips: list[str], output_path: str) -> str:
        """Join *clips* end to end, in the given order."""
        if not clips:
            raise MediaProcessingError("concatenate", "no input clips")
        await _offload("concatenate", _concatenate, list(clips), output_path)
        logger.info("concatenate_audio.done", output_path=output_path, num_clips=len(clips))
        return output_path

    async def merge_with_cue(self, unit_clip: str, cue_clip: str, output_path: str) -> str:
        """Place *cue_clip* right after *unit_clip* in one file."""
        await _offload("merge_with_cue", _concatenate, [unit_clip, cue_clip], output_path)
        logger.info("merge_with_cue.done", unit_clip=unit_clip, cue_clip=cue_clip)
        return output_path

    async def mix(
        self,
        voice_path: str,
        background_path: str,
        output_path: str,
        voice_gain: float = 1.0,
        background_gain: float = 0.1,
    ) -> str:
        """Lay *background_path* under the voice track at reduced gain.

        The background loops as needed; the output always runs for the full
        voice duration.
        """
        await _offload("mix", _mix, voice_path, background_path, output_path, voice_gain, background_gain)
        logger.info("mix_background.done", output_path=output_path, background=background_path)
        return output_path

    async def resample(self, input_path: str, output_path: str, rate: int = 16000) -> str:
        """Convert to *rate* Hz mono, the format speech-to-text engines expect."""
        await _offload("resample", _resample, input_path, output_path, rate)
        logger.info("resample_audio.done", output_path=output_path, rate=rate)
        return output_path

    async def silence(self, output_path: str, duration: float) -> str:
        """Write *duration* seconds of silence; nothing to play gives an empty file."""
        if duration <= 0:
            Path(output_path).write_bytes(b"")
            return output_path
        return await _offload("silence", _silence, output_path, duration)

    async def probe(self, path: str) -> float:
        return await probe_duration(path)


def _measure(path: str) -> float:
    clip = AudioFileClip(path)
    try:
        return float(clip.duration or 0.0)
    finally:
        clip.close()


async def probe_duration(path: str) -> float:
    """Play duration of *path* in seconds.

    An empty file or one without a duration measures as ``0`` so a silent
    unit never aborts the run; a missing file is an error.
    """
    if not os.path.isfile(path):
        raise MediaProcessingError("probe", f"file not found: {path}")
    if Path(path).stat().st_size == 0:
        logger.warning("probe.empty_file", path=path)
        return 0.0

    loop = asyncio.get_running_loop()
    try:
        duration = await loop.run_in_executor(None, _measure, path)
    except Exception as exc:
        raise MediaProcessingError("probe", f"{path}: {exc}") from exc
    return duration
