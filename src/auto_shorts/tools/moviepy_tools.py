"""MoviePy rendering: paints a SceneGraph into the final video file."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Optional

import pysrt
import structlog
from moviepy import (
    AudioFileClip,
    ColorClip,
    CompositeVideoClip,
    ImageClip,
    TextClip,
    VideoClip,
    VideoFileClip,
    concatenate_videoclips,
    vfx,
)
from proglog import ProgressBarLogger

from auto_shorts.config import settings
from auto_shorts.errors import ExternalProviderError
from auto_shorts.models.scene import Layer, SceneGraph, SubtitleTrack

logger = structlog.get_logger()

ProgressCallback = Callable[[float], None]


def _rgb(color: str) -> tuple[int, int, int]:
    value = color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


class _RenderProgress(ProgressBarLogger):
    """Forwards MoviePy's frame counter as 0..1 fractions to the event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, callback: ProgressCallback):
        super().__init__()
        self._loop = loop
        self._callback = callback

    def bars_callback(self, bar, attr, value, old_value=None):
        if bar != "frame_index" or attr != "index":
            return
        total = self.bars[bar].get("total")
        if total:
            self._loop.call_soon_threadsafe(self._callback, min(1.0, (value + 1) / total))


def _background_video(layer: Layer, size: tuple[int, int]) -> VideoClip:
    raw = VideoFileClip(layer.path, audio=False)
    if raw.duration < layer.duration:
        loops_needed = int(layer.duration / raw.duration) + 1
        raw = concatenate_videoclips([raw] * loops_needed)
    return raw.subclipped(0, layer.duration).resized(size)


def _build_layer(layer: Layer, size: tuple[int, int]) -> VideoClip:
    width, height = size
    if layer.kind == "video":
        clip = _background_video(layer, size)
    elif layer.kind == "color":
        clip = ColorClip(
            size=(layer.width or width, layer.height or height),
            color=_rgb(layer.color),
        )
    elif layer.kind == "image":
        clip = ImageClip(layer.path)
        if layer.width and layer.height:
            clip = clip.resized((layer.width, layer.height))
        elif layer.width:
            clip = clip.resized(width=layer.width)
        elif layer.height:
            clip = clip.resized(height=layer.height)
    else:
        clip = TextClip(
            text=layer.text,
            font=layer.font,
            font_size=layer.font_size,
            color=layer.color,
            stroke_color=layer.stroke_color,
            stroke_width=layer.stroke_width,
            bg_color=layer.bg_color,
            method="caption",
            size=(layer.width or width - 160, None),
            text_align="center",
            margin=(20, 20) if layer.bg_color else (0, 0),
        )

    clip = clip.with_start(layer.start).with_duration(layer.duration).with_position((layer.x, layer.y))
    if layer.fade_in > 0:
        clip = clip.with_effects([vfx.CrossFadeIn(layer.fade_in)])
    return clip


def _caption_clips(track: SubtitleTrack, size: tuple[int, int], duration: float) -> list[VideoClip]:
    width, height = size
    subs = pysrt.open(track.srt_path, encoding="utf-8")
    _cap_avail_w = width - 160
    y = int(height * track.y_ratio)

    clips = []
    for sub in subs:
        sub_start = sub.start.ordinal / 1000.0
        sub_end = min(duration, sub.end.ordinal / 1000.0)
        if sub_end <= sub_start:
            continue
        clips.append(
            TextClip(
                text=sub.text,
                font=track.font,
                font_size=track.font_size,
                color=track.color,
                stroke_color=track.stroke_color,
                stroke_width=track.stroke_width,
                method="caption",
                size=(_cap_avail_w, None),
                text_align="center",
            )
            .with_position(("center", y))
            .with_start(sub_start)
            .with_duration(sub_end - sub_start)
        )
    return clips


class MoviePyRenderer:
    name = "moviepy"

    def __init__(self, fps: int | None = None, audio_codec: str = "aac"):
        self._fps = fps or settings.video_fps
        self._audio_codec = audio_codec

    def _render_sync(self, scene: SceneGraph, output_path: str, progress: Optional[ProgressBarLogger]) -> str:
        size = (scene.width, scene.height)
        audio = AudioFileClip(scene.audio_path)
        layers = [_build_layer(layer, size) for layer in scene.layers]
        captions = _caption_clips(scene.subtitles, size, scene.duration) if scene.subtitles else []

        final = CompositeVideoClip([*layers, *captions], size=size).with_audio(audio).with_duration(scene.duration)
        try:
            final.write_videofile(
                output_path,
                fps=scene.fps or self._fps,
                codec="libx264",
                audio_codec=self._audio_codec,
                preset="ultrafast",
                threads=2,
                logger=progress,
            )
        finally:
            # Clean up MoviePy objects so ffmpeg readers are released
            final.close()
            audio.close()
            for clip in layers:
                clip.close()
        return output_path

    async def render(
        self,
        scene: SceneGraph,
        output_path: str,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """Render *scene* to *output_path* off the event loop.

        Progress fractions are delivered on the calling loop; failures surface
        as ``ExternalProviderError`` naming the renderer.
        """
        logger.info(
            "render_video.start",
            output_path=output_path,
            duration=scene.duration,
            num_layers=len(scene.layers),
            has_subtitles=scene.subtitles is not None,
        )
        loop = asyncio.get_running_loop()
        progress = _RenderProgress(loop, on_progress) if on_progress else None
        try:
            await loop.run_in_executor(None, self._render_sync, scene, output_path, progress)
        except Exception as exc:
            logger.exception("render_video.failed", output_path=output_path)
            raise ExternalProviderError(self.name, str(exc)) from exc

        logger.info("render_video.done", output_path=output_path, duration=scene.duration)
        return output_path
