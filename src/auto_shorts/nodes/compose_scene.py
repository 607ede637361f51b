"""Compose Scene node: maps timeline entries and assets onto renderer layers.

No timing is computed here. Timed elements copy their entry's (start,
duration) verbatim and static elements span the whole master track.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import structlog
from langchain_core.runnables import RunnableConfig

from auto_shorts.config import VideoOptions, settings
from auto_shorts.graph.state import PipelineState
from auto_shorts.models.scene import Layer, SceneGraph, SubtitleTrack
from auto_shorts.models.timeline import Timeline, VisualUnit
from auto_shorts.nodes.context import run_context

logger = structlog.get_logger()

# Where the caption band sits, as a fraction of frame height
_SUBTITLE_Y = {"topic": 0.5, "quiz": 0.85}


def _font_path(res_path: Path, name: Optional[str]) -> Optional[str]:
    if not name:
        return None
    path = res_path / "fonts" / f"{name}.ttf"
    return str(path) if path.is_file() else None


@dataclass(frozen=True)
class _Frame:
    width: int
    height: int
    res_path: Path
    default_font: Optional[str]

    @property
    def margin(self) -> int:
        return self.width // 20

    def font(self, name: Optional[str]) -> Optional[str]:
        return _font_path(self.res_path, name) or self.default_font


def _layers_for(
    visual: VisualUnit,
    start: float,
    duration: float,
    assets: list[str],
    frame: _Frame,
) -> list[Layer]:
    W, H = frame.width, frame.height
    font = frame.font(visual.font)

    def layer(suffix: str, **fields) -> Layer:
        element_id = visual.unit_id if not suffix else f"{visual.unit_id}/{suffix}"
        return Layer(element_id=element_id, start=start, duration=duration, **fields)

    if visual.kind == "image":
        return [layer("", kind="image", path=assets[0], y=int(H * 0.12), width=int(W * 0.8), fade_in=visual.fade_in)]

    if visual.kind == "header":
        return [
            layer("background", kind="image", path=str(frame.res_path / visual.background), x=0, y=0, width=W),
            layer(
                "name",
                kind="text",
                text=visual.text,
                y=int(H * 0.04),
                width=W - 320,
                font=font,
                font_size=56,
            ),
        ]

    if visual.kind == "bubble":
        top = int(H * 0.14)
        step = int(H * 0.09)
        bubble_w = int(W * 0.6)
        x = frame.margin if visual.side == "left" else W - bubble_w - frame.margin
        return [
            layer(
                "",
                kind="text",
                text=visual.text,
                x=x,
                # Bubbles stay up until the end, so rows never reuse a slot
                y=top + visual.slot * step,
                width=bubble_w,
                font=font,
                font_size=44,
                color="#ffffff",
                bg_color=visual.color,
                fade_in=visual.fade_in,
            )
        ]

    if visual.kind == "title":
        return [
            layer(
                "",
                kind="text",
                text=visual.text,
                y=int(H * 0.08),
                font=font,
                font_size=90,
                color=visual.color,
                stroke_color="#000000",
                stroke_width=6,
            )
        ]

    if visual.kind in ("label", "answer"):
        row_y = int(H * 0.22) + visual.slot * int(H * 0.1)
        label_w = 120
        x = frame.margin if visual.kind == "label" else frame.margin + label_w
        return [
            layer(
                "",
                kind="text",
                text=visual.text,
                x=x,
                y=row_y,
                width=label_w if visual.kind == "label" else W - 2 * frame.margin - label_w,
                font=font,
                font_size=64,
                color=visual.color,
                stroke_color="#000000",
                stroke_width=4,
                fade_in=visual.fade_in,
            )
        ]

    if visual.kind == "card":
        return [
            layer("image", kind="image", path=assets[0], x=0, y=0, width=W, height=H),
            layer(
                "headline",
                kind="text",
                text=visual.text,
                y=int(H * 0.06),
                font=font,
                font_size=80,
                stroke_color="#000000",
                stroke_width=6,
            ),
            layer(
                "ranks",
                kind="text",
                text="\n".join(f"{n}." for n in visual.labels),
                x=frame.margin,
                y=int(H * 0.25),
                width=200,
                font=font,
                font_size=90,
                stroke_color="#000000",
                stroke_width=6,
            ),
        ]

    if visual.kind == "poll":
        half = int(H * 0.45)
        layers = [layer("background", kind="image", path=str(frame.res_path / visual.background), x=0, y=0, width=W, height=H)]
        for side, (image, label) in enumerate(zip(assets, visual.labels)):
            top = int(H * 0.05) + side * int(H * 0.5)
            layers.append(layer(f"image{side + 1}", kind="image", path=image, y=top, height=half - 140))
            layers.append(
                layer(
                    f"option{side + 1}",
                    kind="text",
                    text=label,
                    y=top + half - 120,
                    font=font,
                    font_size=56,
                    stroke_color="#000000",
                    stroke_width=4,
                )
            )
        return layers

    # percentage
    return [
        layer(
            "",
            kind="text",
            text=visual.text,
            y=int(H * 0.2) + visual.slot * int(H * 0.5),
            font=font,
            font_size=130,
            color=visual.color,
            stroke_color="#000000",
            stroke_width=8,
            fade_in=visual.fade_in,
        )
    ]


def build_scene(
    *,
    shape: str,
    visuals: list[VisualUnit],
    timeline: Timeline,
    assets: dict[str, list[str]],
    options: VideoOptions,
    audio_path: str,
    bg_video_path: Optional[str] = None,
    srt_path: Optional[str] = None,
) -> SceneGraph:
    """Pure mapping from timeline entries and resolved assets to a scene graph."""
    width, height = options.resolution
    total = timeline.total_duration
    res_path = Path(options.res_path)
    frame = _Frame(width, height, res_path, _font_path(res_path, options.subtitles.font))

    if bg_video_path:
        layers = [Layer(element_id="background", kind="video", start=0.0, duration=total, path=bg_video_path)]
    else:
        layers = [Layer(element_id="background", kind="color", start=0.0, duration=total, color="#000000")]

    by_id = {v.unit_id: v for v in visuals}
    for visual in visuals:
        if visual.static:
            layers += _layers_for(visual, 0.0, total, assets.get(visual.unit_id, []), frame)
    for entry in timeline.entries:
        visual = by_id[entry.element_id]
        layers += _layers_for(visual, entry.start, entry.duration, assets.get(visual.unit_id, []), frame)

    subtitles = None
    if srt_path:
        style = options.subtitles
        subtitles = SubtitleTrack(
            srt_path=srt_path,
            font=frame.default_font,
            font_size=style.font_size,
            color=style.font_color,
            stroke_color=style.stroke_color,
            stroke_width=style.stroke_width,
            y_ratio=_SUBTITLE_Y.get(shape, 0.7),
        )

    return SceneGraph(
        width=width,
        height=height,
        duration=total,
        fps=settings.video_fps,
        audio_path=audio_path,
        layers=layers,
        subtitles=subtitles,
    )


async def compose_scene(state: PipelineState, config: RunnableConfig) -> dict:
    _, task = run_context(config)
    scene = build_scene(
        shape=state["shape"],
        visuals=state["units"].visuals,
        timeline=state["timeline"],
        assets=state.get("assets") or {},
        options=state["options"],
        audio_path=state["master_path"],
        bg_video_path=state.get("bg_video_path"),
        srt_path=state.get("srt_path"),
    )
    logger.info("compose_scene.done", run_id=state["run_id"], num_layers=len(scene.layers))
    task.log(f"Composed scene with {len(scene.layers)} layers")
    return {"scene": scene}
