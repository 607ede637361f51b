"""Quiz shape: numbered questions whose answers appear as they are spoken."""

from __future__ import annotations

from auto_shorts.models.script import QuizScript
from auto_shorts.models.timeline import NarrationUnit, TimelineEntry, VisualUnit
from auto_shorts.shapes.base import CLOCK_CUE, ShapeProvider, UnitBuilder
from auto_shorts.timing import OffsetTable

# Green, red, yellow, cyan, orange, purple, pink; cycles past seven questions
ANSWER_COLORS = ("#00FF00", "#FF0000", "#FFFF00", "#00FFFF", "#FFA500", "#800080", "#FFC0CB")


class QuizShape(ShapeProvider):
    shape = "quiz"
    required_fields = ("title", "questions")
    subtitle_max_len = 30

    def _derive(self, script: QuizScript) -> tuple[list[NarrationUnit], list[VisualUnit]]:
        units = UnitBuilder()
        visuals = [
            VisualUnit(unit_id="title", kind="title", text=script.title, font=script.font_name, static=True)
        ]

        if script.start_script:
            units.add("start", script.start_script)

        for i, item in enumerate(script.questions):
            color = ANSWER_COLORS[i % len(ANSWER_COLORS)]
            # The clock ticks while viewers think, before the answer is read out
            units.add(f"question-{i}", f"Question {i + 1}: {item.question}", cue=CLOCK_CUE)
            answer_id = units.add(f"answer-{i}", item.answer)

            visuals.append(
                VisualUnit(
                    unit_id=f"number-{i}",
                    kind="label",
                    text=f"{i + 1}.",
                    slot=i,
                    color=color,
                    font=script.font_name,
                    static=True,
                )
            )
            visuals.append(
                VisualUnit(
                    unit_id=f"answer-{i}",
                    kind="answer",
                    narration_id=answer_id,
                    text=item.answer,
                    slot=i,
                    color=color,
                    font=script.font_name,
                    fade_in=0.2,
                )
            )

        if script.end_script:
            units.add("end", script.end_script)

        return units.units, visuals

    def assign_offsets(self, visuals: list[VisualUnit], table: OffsetTable) -> list[TimelineEntry]:
        """Answers appear when their own clip starts and stay on screen."""
        return [
            table.span(v.unit_id, table.offset(v.narration_id))
            for v in visuals
            if v.kind == "answer"
        ]
