"""Topic shape: one narrated text over an image album and subtitles."""

from __future__ import annotations

from auto_shorts.models.script import TopicScript
from auto_shorts.models.timeline import NarrationUnit, TimelineEntry, VisualUnit
from auto_shorts.shapes.base import ShapeProvider, UnitBuilder
from auto_shorts.timing import OffsetTable


class TopicShape(ShapeProvider):
    shape = "topic"
    required_fields = ("text",)
    subtitle_max_len = 4

    def _derive(self, script: TopicScript) -> tuple[list[NarrationUnit], list[VisualUnit]]:
        units = UnitBuilder()
        units.add("text", script.text)
        if script.extra:
            units.add("extra", script.extra)

        visuals = [
            VisualUnit(unit_id=f"image-{i}", kind="image", image_queries=[query], slot=i, fade_in=0.2)
            for i, query in enumerate(script.images)
        ]
        return units.units, visuals

    def assign_offsets(self, visuals: list[VisualUnit], table: OffsetTable) -> list[TimelineEntry]:
        """Split the master track evenly across the album images, in order."""
        images = [v for v in visuals if v.kind == "image"]
        if not images:
            return []
        share = table.total / len(images)
        entries = []
        for i, visual in enumerate(images):
            last = i == len(images) - 1
            entries.append(table.span(visual.unit_id, i * share, None if last else (i + 1) * share))
        return entries
