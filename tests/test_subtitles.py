import pysrt

from auto_shorts.models.timeline import TranscriptSegment
from auto_shorts.tools.whisper import group_words, normalize_segments, write_srt


def test_group_words_respects_max_len():
    words = [(0.0, 0.4, " The"), (0.4, 0.9, " quick"), (0.9, 1.3, " fox"), (1.3, 2.0, " jumps")]
    segments = group_words(words, max_len=9)
    assert [s.text for s in segments] == ["The quick", "fox jumps"]
    assert (segments[0].start_ms, segments[0].end_ms) == (0, 900)
    assert (segments[1].start_ms, segments[1].end_ms) == (900, 2000)


def test_group_words_keeps_long_words_whole():
    segments = group_words([(0.0, 1.0, "extraordinary"), (1.0, 1.5, "day")], max_len=4)
    assert [s.text for s in segments] == ["extraordinary", "day"]


def test_normalize_segments_is_monotonic_and_covers_master():
    segments = [
        TranscriptSegment(start_ms=1200, end_ms=1900, text="second"),
        TranscriptSegment(start_ms=0, end_ms=1300, text="first"),
        TranscriptSegment(start_ms=4000, end_ms=9000, text="late"),
    ]
    result = normalize_segments(segments, total_ms=5000)
    assert [s.text for s in result] == ["first", "second", "late"]
    for before, after in zip(result, result[1:]):
        assert before.end_ms <= after.start_ms
        assert after.start_ms <= after.end_ms
    assert result[-1].end_ms == 5000


def test_write_srt_uses_subrip_timestamps(tmp_path):
    path = tmp_path / "subs.srt"
    write_srt(
        [
            TranscriptSegment(start_ms=0, end_ms=1500, text="Hello"),
            TranscriptSegment(start_ms=1500, end_ms=3723004, text="there"),
        ],
        str(path),
    )
    content = path.read_text(encoding="utf-8")
    assert "00:00:00,000 --> 00:00:01,500" in content
    assert "01:02:03,004" in content

    subs = pysrt.open(str(path), encoding="utf-8")
    assert [s.index for s in subs] == [1, 2]
    assert subs[1].text == "there"


def test_normalize_segments_starts_at_zero():
    segments = [TranscriptSegment(start_ms=350, end_ms=1200, text="late start")]
    result = normalize_segments(segments, total_ms=2000)
    assert [(s.start_ms, s.end_ms) for s in result] == [(0, 2000)]
