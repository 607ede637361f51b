import pytest

from auto_shorts.config import APIKeys, VideoOptions, check_res_dir
from auto_shorts.errors import ConfigurationError, MediaProcessingError
from auto_shorts.services import build_images, build_voice
from auto_shorts.tools.media import probe_duration
from auto_shorts.tools.voice import EdgeVoice, SilentVoice


async def test_probe_missing_file_is_an_error(tmp_path):
    with pytest.raises(MediaProcessingError, match="probe"):
        await probe_duration(str(tmp_path / "missing.mp3"))


async def test_probe_empty_file_measures_zero(tmp_path):
    empty = tmp_path / "empty.mp3"
    empty.write_bytes(b"")
    assert await probe_duration(str(empty)) == 0.0


async def test_silent_voice_sizes_silence_to_text(tmp_path, assembler):
    voice = SilentVoice(assembler)
    out = tmp_path / "s.mp3"
    await voice.generate("one two three four five", "male", str(out))
    assert await assembler.probe(str(out)) == pytest.approx(2.0)

    await voice.generate("hi", "female", str(out))
    assert await assembler.probe(str(out)) == pytest.approx(0.5)


def test_check_res_dir(res_dir, tmp_path):
    check_res_dir(res_dir)
    with pytest.raises(ConfigurationError, match="models"):
        check_res_dir(tmp_path / "nowhere")


def test_api_key_override_wins():
    assert APIKeys(pexels="abc").resolve("pexels") == "abc"


def test_disable_tts_selects_silent_voice(assembler):
    options = VideoOptions(disable_tts=True)
    assert isinstance(build_voice(options, assembler), SilentVoice)


def test_edge_voice_needs_no_key(assembler):
    assert isinstance(build_voice(VideoOptions(voice_provider="edge"), assembler), EdgeVoice)


def test_missing_image_key_is_a_configuration_error(monkeypatch):
    from auto_shorts.config import settings

    monkeypatch.setattr(settings, "pexels_api_key", "")
    with pytest.raises(ConfigurationError, match="Pexels"):
        build_images(VideoOptions(image_provider="pexels"))
