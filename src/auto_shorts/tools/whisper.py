"""Whisper transcription: calls the OpenAI Whisper API and writes the SRT file."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pysrt
import structlog
from openai import AsyncOpenAI

from auto_shorts.errors import ConfigurationError, ExternalProviderError
from auto_shorts.models.timeline import TranscriptSegment

logger = structlog.get_logger()


def group_words(words: Iterable[tuple[float, float, str]], max_len: int) -> list[TranscriptSegment]:
    """Pack ``(start_sec, end_sec, word)`` triples into cues of at most *max_len* characters.

    A single word longer than *max_len* becomes its own cue.
    """
    segments: list[TranscriptSegment] = []
    current: list[str] = []
    start = end = 0.0

    for w_start, w_end, word in words:
        word = word.strip()
        if not word:
            continue
        candidate = " ".join([*current, word])
        if current and len(candidate) > max_len:
            segments.append(
                TranscriptSegment(start_ms=round(start * 1000), end_ms=round(end * 1000), text=" ".join(current))
            )
            current = []
        if not current:
            start = w_start
        current.append(word)
        end = w_end

    if current:
        segments.append(TranscriptSegment(start_ms=round(start * 1000), end_ms=round(end * 1000), text=" ".join(current)))
    return segments


class WhisperTranscriber:
    name = "whisper"

    def __init__(self, api_key: str, model: str = "whisper-1", language: str = "en"):
        if not api_key:
            raise ConfigurationError("OpenAI API key required for subtitles. Set OPENAI_API_KEY or pass api_keys.openai.")
        self._client = AsyncOpenAI(api_key=api_key)
        self._model = model
        self._language = language

    async def transcribe(self, audio_path: str, max_len: int) -> list[TranscriptSegment]:
        """Word-timestamped transcription grouped into cues of at most *max_len* characters."""
        logger.info("whisper.transcribe.start", audio_path=audio_path, max_len=max_len)

        try:
            with open(audio_path, "rb") as f:
                result = await self._client.audio.transcriptions.create(
                    model=self._model,
                    file=f,
                    language=self._language,
                    response_format="verbose_json",
                    timestamp_granularities=["word"],
                )
        except Exception as exc:
            raise ExternalProviderError(self.name, str(exc)) from exc

        words = result.words or []
        segments = group_words(((w.start, w.end, w.word) for w in words), max_len)
        logger.info("whisper.transcribe.done", num_words=len(words), num_segments=len(segments))
        return segments


def normalize_segments(segments: Sequence[TranscriptSegment], total_ms: int) -> list[TranscriptSegment]:
    """Order cues, keep times non-decreasing and inside the master track, and
    stretch the first and last cues so the file covers the whole master."""
    ordered = sorted(segments, key=lambda s: (s.start_ms, s.end_ms))
    result: list[TranscriptSegment] = []
    cursor = 0
    for seg in ordered:
        start = min(max(seg.start_ms, cursor), total_ms)
        end = min(max(seg.end_ms, start), total_ms)
        result.append(TranscriptSegment(start_ms=start, end_ms=end, text=seg.text))
        cursor = end
    if result:
        first = result[0]
        result[0] = TranscriptSegment(start_ms=0, end_ms=first.end_ms, text=first.text)
        last = result[-1]
        result[-1] = TranscriptSegment(start_ms=last.start_ms, end_ms=total_ms, text=last.text)
    return result


def write_srt(segments: Sequence[TranscriptSegment], output_srt_path: str) -> str:
    """Write *segments* as a numbered SubRip file (``HH:MM:SS,mmm`` times)."""
    srt_file = pysrt.SubRipFile()
    for idx, seg in enumerate(segments, start=1):
        srt_file.append(
            pysrt.SubRipItem(
                index=idx,
                start=pysrt.SubRipTime.from_ordinal(seg.start_ms),
                end=pysrt.SubRipTime.from_ordinal(seg.end_ms),
                text=seg.text.strip(),
            )
        )
    srt_file.save(output_srt_path, encoding="utf-8")
    logger.info("whisper.srt.saved", output_srt_path=output_srt_path, num_segments=len(segments))
    return output_srt_path
