"""Message shape: a text-message exchange, one spoken clip per bubble."""

from __future__ import annotations

from auto_shorts.models.script import MessageScript
from auto_shorts.models.timeline import NarrationUnit, TimelineEntry, VisualUnit
from auto_shorts.shapes.base import ShapeProvider, UnitBuilder
from auto_shorts.timing import OffsetTable

MESSAGE_HEADER = "msg_header.png"


class MessageShape(ShapeProvider):
    shape = "message"
    required_fields = ("contactname", "script")

    def _derive(self, script: MessageScript) -> tuple[list[NarrationUnit], list[VisualUnit]]:
        units = UnitBuilder()
        visuals = [
            VisualUnit(
                unit_id="header",
                kind="header",
                text=script.contactname,
                background=MESSAGE_HEADER,
                font=script.font_name,
                static=True,
            )
        ]

        for i, line in enumerate(script.script):
            unit_id = units.add(f"message-{i}", line.message, voice=line.voice)
            visuals.append(
                VisualUnit(
                    unit_id=f"bubble-{i}",
                    kind="bubble",
                    narration_id=unit_id,
                    text=line.message,
                    slot=i,
                    # Sender bubbles sit on the right, like a phone's own messages
                    side="right" if line.msgtype == "sender" else "left",
                    color="#007aff" if line.msgtype == "sender" else "#323232",
                    fade_in=0.2,
                )
            )

        if script.extra:
            units.add("extra", script.extra)

        return units.units, visuals

    def assign_offsets(self, visuals: list[VisualUnit], table: OffsetTable) -> list[TimelineEntry]:
        """Each bubble fades in at its own clip's offset and stays until the end."""
        return [
            table.span(v.unit_id, table.offset(v.narration_id))
            for v in visuals
            if v.kind == "bubble"
        ]
