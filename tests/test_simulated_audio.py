import asyncio

import pytest

from hostsuite.core import ExternalOperationError, retry_for_status
from hostsuite.core.expect import create_spy
from hostsuite.hosts import Asset, SimulatedAudio


def _audio(**kwargs) -> SimulatedAudio:
    options = {"duration_ms": 1000, "load_latency": 0.0, "start_latency": 0.01}
    options.update(kwargs)
    return SimulatedAudio(**options)


@pytest.mark.asyncio
async def test_load_reports_status_and_source_uri() -> None:
    sound = _audio().create_sound()
    assert await sound.get_status() == {"is_loaded": False}
    status = await sound.load(Asset.from_module("assets/a.mp3"), {"volume": 0.25})
    assert status["is_loaded"] is True
    assert status["uri"] == "asset:///assets/a.mp3"
    assert status["volume"] == 0.25
    assert status["duration_millis"] == 1000
    with pytest.raises(ExternalOperationError, match="already loaded"):
        await sound.load("other.mp3")
    assert (await sound.unload()) == {"is_loaded": False}
    assert (await sound.unload()) == {"is_loaded": False}


@pytest.mark.asyncio
async def test_disabled_audio_refuses_to_load() -> None:
    audio = _audio()
    await audio.set_is_enabled(False)
    with pytest.raises(ExternalOperationError, match="disabled"):
        await audio.create_sound().load("a.mp3")


@pytest.mark.asyncio
async def test_audio_mode_validation() -> None:
    audio = _audio()
    with pytest.raises(ExternalOperationError, match="Impossible audio mode"):
        await audio.set_audio_mode({"plays_in_silent_mode_ios": False, "allows_recording_ios": True})
    with pytest.raises(ExternalOperationError, match="Unknown audio mode"):
        await audio.set_audio_mode({"bogus": 1})
    await audio.set_audio_mode({"plays_in_silent_mode_ios": True, "allows_recording_ios": True})
    assert audio.mode["allows_recording_ios"] is True


@pytest.mark.asyncio
async def test_playback_advances_position_on_the_loop_clock() -> None:
    sound = _audio().create_sound()
    await sound.load("a.mp3")
    status = await sound.play()
    assert status["should_play"] is True
    assert status["is_buffering"] is True
    await retry_for_status(sound, {"is_playing": True}, interval=0.01)
    await asyncio.sleep(0.1)
    paused = await sound.pause()
    assert paused["is_playing"] is False
    assert paused["position_millis"] > 0
    stopped = await sound.stop()
    assert stopped["position_millis"] == 0


@pytest.mark.asyncio
async def test_finish_is_reported_once_to_the_callback() -> None:
    sound = _audio(duration_ms=200).create_sound()
    spy = create_spy()
    sound.set_on_playback_status_update(spy)
    await sound.load("a.mp3", {"should_play": True, "progress_update_interval_millis": 20})
    await retry_for_status(sound, {"should_play": False}, interval=0.02)
    finished = [args[0] for args, _ in spy.calls if args[0].get("did_just_finish")]
    assert len(finished) == 1
    assert finished[0]["position_millis"] == 200
    assert (await sound.get_status())["did_just_finish"] is False
    await sound.unload()


@pytest.mark.asyncio
async def test_looping_wraps_position() -> None:
    sound = _audio(duration_ms=50).create_sound()
    await sound.load("a.mp3", {"should_play": True, "is_looping": True})
    await asyncio.sleep(0.15)
    status = await sound.get_status()
    assert status["is_playing"] is True
    assert 0 <= status["position_millis"] < 50
    await sound.unload()


@pytest.mark.asyncio
async def test_status_validation() -> None:
    sound = _audio().create_sound()
    with pytest.raises(ExternalOperationError, match="not loaded"):
        await sound.set_volume(0.5)
    await sound.load({"uri": "https://example.test/a.mp3"})
    with pytest.raises(ExternalOperationError, match=r"value .+ between"):
        await sound.set_volume(1.5)
    with pytest.raises(ExternalOperationError, match=r"value .+ between"):
        await sound.set_rate(-1)
    with pytest.raises(ExternalOperationError, match="Unknown status key"):
        await sound.set_status(speed=2)
    status = await sound.set_rate(2.0, should_correct_pitch=True)
    assert status["rate"] == 2.0
    assert status["should_correct_pitch"] is True


@pytest.mark.asyncio
async def test_callback_errors_are_logged_not_raised() -> None:
    sound = _audio().create_sound()

    def broken(status) -> None:
        raise RuntimeError("callback broke")

    sound.set_on_playback_status_update(broken)
    status = await sound.load("a.mp3")
    assert status["is_loaded"] is True
    await sound.unload()
