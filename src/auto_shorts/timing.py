"""Offset math shared by every content shape.

All shapes read their timing from one ``OffsetTable`` built from the measured
per-unit clip durations, so no shape can drift from what actually plays.
"""

from __future__ import annotations

from collections.abc import Sequence

from auto_shorts.models.timeline import AudioSegment, TimelineEntry

EPSILON = 1e-3


def cumulative_offsets(durations: Sequence[float]) -> list[float]:
    """``offset[0] = 0`` and ``offset[i] = offset[i-1] + duration[i-1]``."""
    offsets: list[float] = []
    cursor = 0.0
    for duration in durations:
        offsets.append(cursor)
        cursor += duration
    return offsets


class OffsetTable:
    """Ordinal-indexed offsets with lookup by narration unit id."""

    def __init__(self, segments: Sequence[AudioSegment], total_duration: float | None = None):
        ordered = sorted(segments, key=lambda s: s.ordinal)
        self.unit_ids = [s.unit_id for s in ordered]
        self.durations = [s.duration for s in ordered]
        self.offsets = cumulative_offsets(self.durations)
        self._index = {unit_id: i for i, unit_id in enumerate(self.unit_ids)}
        # Measured master duration; the sum of clips when not given
        self.total = sum(self.durations) if total_duration is None else total_duration

    def __contains__(self, unit_id: str) -> bool:
        return unit_id in self._index

    def __len__(self) -> int:
        return len(self.unit_ids)

    def offset(self, unit_id: str) -> float:
        return self.offsets[self._index[unit_id]]

    def duration(self, unit_id: str) -> float:
        return self.durations[self._index[unit_id]]

    def end(self, unit_id: str) -> float:
        return self.offset(unit_id) + self.duration(unit_id)

    def span(self, element_id: str, start: float, end: float | None = None) -> TimelineEntry:
        """Entry from *start* to *end*; ``None`` runs to the master end."""
        anchored = end is None
        stop = self.total if end is None else min(end, self.total)
        return TimelineEntry(
            element_id=element_id,
            start=start,
            duration=max(0.0, stop - start),
            anchored_to_end=anchored,
        )


def entries_within(entries: Sequence[TimelineEntry], total: float, eps: float = EPSILON) -> bool:
    """True when every non-anchored entry ends inside the master track."""
    return all(e.anchored_to_end or e.start + e.duration <= total + eps for e in entries)
