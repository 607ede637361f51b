"""End-to-end runs of the generation graph against in-process fakes."""

import asyncio
import json
import shutil
from pathlib import Path

import pytest

from auto_shorts.errors import ConfigurationError, ExternalProviderError, InvalidScript, MissingField
from auto_shorts.generate import generate_video, generate_video_from_json, run_video
from auto_shorts.task import Failure, Success

MESSAGE = {
    "type": "message",
    "contactname": "Sam",
    "script": [
        {"voice": "male", "message": "Are you up?", "msgtype": "sender"},
        {"voice": "female", "message": "Barely", "msgtype": "receiver"},
    ],
}

RANK = {
    "type": "rank",
    "title": "Top snacks",
    "rankings": ["Chips", "Popcorn"],
    "images": ["chips", "popcorn"],
    "start_script": "Ranking snacks",
    "end_script": "Thanks for watching",
}

TOPIC = {
    "type": "topic",
    "title": "Octopuses",
    "text": "Octopuses have three hearts.",
    "extra": "Follow for more facts.",
    "images": ["octopus", "reef"],
}


async def test_message_scenario(options, services, voice, renderer):
    voice.durations.update({"Are you up?": 1.5, "Barely": 2.0})

    task = generate_video(MESSAGE, options=options, services=services)
    result = await task.wait()

    assert isinstance(result, Success), result
    assert Path(result.output_path).is_file()
    assert len(voice.calls) == 2
    assert [gender for _, gender in voice.calls] == ["male", "female"]

    timeline = task.timeline
    assert timeline.offsets == pytest.approx([0.0, 1.5])
    assert timeline.total_duration == pytest.approx(3.5)
    assert len(timeline.entries) == 2
    for offset, entry in zip(timeline.offsets, timeline.entries):
        assert entry.start >= offset - 1e-9

    # Header and bubbles land on the renderer with the entries' timing
    scene = renderer.scene
    assert scene.layers[0].kind == "video"
    bubbles = {layer.element_id: layer for layer in scene.layers if layer.element_id.startswith("bubble-")}
    assert bubbles["bubble-1"].start == pytest.approx(1.5)
    assert bubbles["bubble-1"].duration == pytest.approx(2.0)
    assert scene.subtitles is None


async def test_rank_scenario(options, services, voice, assembler, images, renderer):
    voice.durations.update({"Ranking snacks": 1.0, "Chips": 2.0, "Popcorn": 1.5, "Thanks for watching": 1.0})

    task = generate_video(RANK, options=options, services=services)
    result = await task.wait()
    assert isinstance(result, Success), result

    timeline = task.timeline
    # Tick cue (0.5s) is absorbed into both ranking clips
    assert timeline.durations == pytest.approx([1.0, 2.5, 2.0, 1.0])
    assert timeline.offsets == pytest.approx([0.0, 1.0, 3.5, 5.5])
    assert assembler.calls.count("merge_with_cue") == 2

    assert len(timeline.entries) == 3
    assert sum(e.duration for e in timeline.entries) == pytest.approx(timeline.total_duration)
    assert images.queries == ["chips", "popcorn"]

    # Rank cards fill the frame, no background video or subtitles
    assert renderer.scene.layers[0].kind == "color"
    assert renderer.scene.subtitles is None


async def test_unknown_type_is_rejected_before_any_side_effect(options, services, voice):
    with pytest.raises(InvalidScript, match="bogus"):
        generate_video({"type": "bogus"}, options=options, services=services)
    assert not Path(options.temp_path).exists()
    assert voice.calls == []


async def test_missing_type_creates_no_workspace(options, services):
    with pytest.raises(InvalidScript):
        generate_video({"contactname": "x"}, options=options, services=services)
    assert not Path(options.temp_path).exists()


async def test_missing_fields_are_rejected_synchronously(options, services):
    with pytest.raises(MissingField):
        generate_video({"type": "topic", "text": ""}, options=options, services=services)
    assert not Path(options.temp_path).exists()


async def test_master_duration_matches_sum_of_clips(options, services, voice):
    voice.durations.update({TOPIC["text"]: 3.25, TOPIC["extra"]: 1.5})

    task = generate_video(TOPIC, options=options, services=services)
    assert isinstance(await task.wait(), Success)

    timeline = task.timeline
    assert sum(timeline.durations) == pytest.approx(timeline.total_duration)
    for i in range(1, len(timeline.offsets)):
        assert timeline.offsets[i] == pytest.approx(timeline.offsets[i - 1] + timeline.durations[i - 1])
    assert all(e.start + e.duration <= timeline.total_duration + 1e-3 for e in timeline.entries)


async def test_topic_runs_every_optional_stage(options, services, assembler, transcriber, renderer):
    options = options.model_copy(update={"use_bg_music": True})

    task = generate_video(TOPIC, options=options, services=services)
    assert isinstance(await task.wait(), Success)

    assert assembler.calls[-3:] == ["concatenate", "mix", "resample"]
    assert transcriber.calls[0][1] == 4
    assert transcriber.calls[0][0].endswith("audio16k.wav")

    srt_path = renderer.scene.subtitles.srt_path
    assert Path(srt_path).is_file()
    assert renderer.scene.audio_path.endswith("mixed.mp3")

    entries = task.timeline.entries
    assert [e.element_id for e in entries] == ["image-0", "image-1"]
    assert entries[1].end == pytest.approx(task.timeline.total_duration)


async def test_disabled_subtitles_skip_transcription(options, services, assembler, transcriber):
    options = options.model_copy(update={"disable_subtitles": True})

    task = generate_video(TOPIC, options=options, services=services)
    assert isinstance(await task.wait(), Success)
    assert transcriber.calls == []
    assert "resample" not in assembler.calls


async def test_empty_clip_is_tolerated(options, services, voice, assembler):
    voice.durations.update({TOPIC["text"]: 2.0, TOPIC["extra"]: 0.0})

    task = generate_video(TOPIC, options=options, services=services)
    assert isinstance(await task.wait(), Success)
    assert task.timeline.durations == pytest.approx([2.0, 0.0])
    assert task.timeline.total_duration == pytest.approx(2.0)


async def test_provider_failure_aborts_before_render(options, services, voice, renderer):
    voice.fail_on = "Barely"

    task = generate_video(MESSAGE, options=options, services=services)
    result = await task.wait()

    assert isinstance(result, Failure)
    assert result.kind == "ExternalProviderError"
    assert "fake-voice" in result.message
    assert renderer.scene is None
    assert task.timeline is None
    assert task.status == "failed"

    events = task.events()
    assert events[-1].type == "error"
    assert [e for e in events if e.type == "done"] == []

    with pytest.raises(ExternalProviderError):
        await task.raise_for_result()


async def test_missing_resource_folder(options, services, res_dir):
    shutil.rmtree(res_dir / "music")
    with pytest.raises(ConfigurationError, match="music"):
        generate_video(MESSAGE, options=options, services=services)


async def test_missing_background_music(options, services, res_dir):
    (res_dir / "music" / "background.mp3").unlink()
    task = generate_video(MESSAGE, options=options.model_copy(update={"use_bg_music": True}), services=services)
    result = await task.wait()
    assert isinstance(result, Failure)
    assert result.kind == "ConfigurationError"


async def test_rather_rejects_horizontal(options, services):
    script = {
        "type": "rather",
        "start_script": "Pick one",
        "end_script": "Bye",
        "questions": [{"option1": "tea", "option2": "coffee", "p1": 40, "p2": 60}],
    }
    with pytest.raises(ConfigurationError):
        generate_video(script, options=options.model_copy(update={"orientation": "horizontal"}), services=services)


async def test_stale_workspace_is_replaced(options, services):
    stale = Path(options.temp_path) / "fixed-run"
    stale.mkdir(parents=True)
    (stale / "leftover.txt").write_text("old")

    task = generate_video(MESSAGE, options=options, services=services, run_id="fixed-run")
    assert isinstance(await task.wait(), Success)
    assert not (stale / "leftover.txt").exists()
    assert (stale / "voice.mp3").is_file()


async def test_cleanup_removes_workspace(options, services):
    task = generate_video(MESSAGE, options=options.model_copy(update={"cleanup_temp": True}), services=services)
    assert isinstance(await task.wait(), Success)
    assert not task.workspace.exists()


async def test_events_replay_and_terminate(options, services):
    task = generate_video(MESSAGE, options=options, services=services)
    await task.wait()

    events = [event async for event in task.subscribe()]
    assert events[-1].type == "done"
    assert events[-1].output_path == task.result.output_path
    assert all(e.type == "log" for e in events[:-1])
    assert "Rendering: 100%" in task.logs


async def test_live_subscriber_sees_every_event(options, services):
    task = generate_video(MESSAGE, options=options, services=services)
    events = [event async for event in task.subscribe()]
    assert [e.message for e in events if e.type == "log"] == task.logs
    assert events[-1].type == "done"


async def test_cancel(options, services, voice):
    started = asyncio.Event()

    async def hang(text, gender, output_path):
        started.set()
        await asyncio.Event().wait()

    voice.generate = hang

    task = generate_video(MESSAGE, options=options, services=services)
    await started.wait()
    assert task.cancel()

    result = await task.wait()
    assert isinstance(result, Failure)
    assert result.kind == "Cancelled"
    assert task.status == "cancelled"


async def test_generate_from_json(options, services):
    task = generate_video_from_json(json.dumps(MESSAGE), options=options, services=services)
    assert isinstance(await task.wait(), Success)


@pytest.mark.parametrize("text, message", [("", "Empty JSON data!"), ("{not json", "Invalid JSON data!")])
async def test_generate_from_bad_json(options, services, text, message):
    with pytest.raises(InvalidScript) as exc_info:
        generate_video_from_json(text, options=options, services=services)
    assert str(exc_info.value) == message


async def test_run_video_returns_output_path(options, services):
    output_path = await run_video(MESSAGE, options=options, services=services)
    assert output_path.endswith(".mp4")
    assert Path(output_path).parent == Path(options.output_dir)


async def test_quiz_merges_clock_cue_and_uses_long_captions(options, services, assembler, transcriber, renderer):
    script = {
        "type": "quiz",
        "title": "Space",
        "questions": [{"question": "Closest star?", "answer": "The Sun"}],
    }
    task = generate_video(script, options=options, services=services)
    assert isinstance(await task.wait(), Success)

    # Question clip 1.0 + clock cue 1.0, then the answer
    assert task.timeline.durations == pytest.approx([2.0, 1.0])
    assert assembler.calls.count("merge_with_cue") == 1
    assert transcriber.calls[0][1] == 30

    static_ids = {layer.element_id for layer in renderer.scene.layers if layer.start == 0.0}
    assert {"title", "number-0"} <= static_ids


async def test_rather_builds_poll_cards(options, services, images, renderer):
    script = {
        "type": "rather",
        "start_script": "Pick one",
        "end_script": "Bye",
        "questions": [{"option1": "tea", "option2": "coffee", "p1": 40, "p2": 60, "image1": "tea cup"}],
    }
    task = generate_video(script, options=options, services=services)
    assert isinstance(await task.wait(), Success)

    assert sorted(images.queries) == ["coffee", "tea cup"]
    layer_ids = [layer.element_id for layer in renderer.scene.layers]
    assert "poll-0/background" in layer_ids
    assert "percent-0-2" in layer_ids
    assert renderer.scene.layers[0].kind == "color"


async def test_long_chat_bubbles_never_share_a_row(options, services, renderer):
    lines = [
        {"voice": "male" if i % 2 else "female", "message": f"line {i}", "msgtype": "sender" if i % 2 else "receiver"}
        for i in range(20)
    ]
    task = generate_video({"type": "message", "contactname": "Sam", "script": lines}, options=options, services=services)
    assert isinstance(await task.wait(), Success)

    bubbles = [layer for layer in renderer.scene.layers if layer.element_id.startswith("bubble-")]
    assert len(bubbles) == 20
    rows = [layer.y for layer in sorted(bubbles, key=lambda layer: int(layer.element_id.split("-")[1]))]
    assert rows == sorted(set(rows))
