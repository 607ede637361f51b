"""Rank shape: a cover card followed by one full-screen card per ranking."""

from __future__ import annotations

from auto_shorts.errors import InvalidScript
from auto_shorts.models.script import RankScript
from auto_shorts.models.timeline import NarrationUnit, TimelineEntry, VisualUnit
from auto_shorts.shapes.base import TICK_CUE, ShapeProvider, UnitBuilder
from auto_shorts.timing import OffsetTable


class RankShape(ShapeProvider):
    shape = "rank"
    required_fields = ("rankings", "images", "start_script", "end_script")
    uses_background_video = False

    def check(self, script: RankScript) -> None:
        super().check(script)
        if len(script.images) < len(script.rankings):
            raise InvalidScript(
                f"rank script needs one image per ranking "
                f"({len(script.rankings)} rankings, {len(script.images)} images)"
            )

    def _derive(self, script: RankScript) -> tuple[list[NarrationUnit], list[VisualUnit]]:
        units = UnitBuilder()
        numbers = [str(n) for n in range(1, len(script.rankings) + 1)]

        start_id = units.add("start", script.start_script)
        visuals = [
            VisualUnit(
                unit_id="cover",
                kind="card",
                narration_id=start_id,
                text=script.title,
                image_queries=[script.images[0]],
                labels=numbers,
            )
        ]

        for i, rank in enumerate(script.rankings):
            rank_id = units.add(f"rank-{i}", rank, cue=TICK_CUE)
            visuals.append(
                VisualUnit(
                    unit_id=f"card-{i}",
                    kind="card",
                    narration_id=rank_id,
                    text=rank,
                    image_queries=[script.images[i]],
                    labels=numbers,
                    slot=i,
                )
            )

        units.add("end", script.end_script)
        return units.units, visuals

    def assign_offsets(self, visuals: list[VisualUnit], table: OffsetTable) -> list[TimelineEntry]:
        """Cards play back to back; each runs until the next card's clip starts.

        The cover starts at zero so any leading audio is covered, and the last
        card absorbs the closing narration up to the master end.
        """
        cards = [v for v in visuals if v.kind == "card"]
        entries = []
        for i, card in enumerate(cards):
            start = 0.0 if i == 0 else table.offset(card.narration_id)
            if i == len(cards) - 1:
                entries.append(table.span(card.unit_id, start))
            else:
                entries.append(table.span(card.unit_id, start, table.offset(cards[i + 1].narration_id)))
        return entries
