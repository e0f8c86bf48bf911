"""Audio integration suite."""
from __future__ import annotations

from types import SimpleNamespace

from hostsuite.core.builder import SuiteBuilder
from hostsuite.hosts.base import Asset
from hostsuite.hosts.simulated import (
    INTERRUPTION_MODE_ANDROID_DO_NOT_MIX,
    INTERRUPTION_MODE_IOS_DO_NOT_MIX,
)

NAME = "audio"
DESCRIPTION = "Sound loading, playback control and status updates"

MAIN_SOURCE = "assets/LLizard.mp3"
SOUND_URI = "http://www.noiseaddicts.com/samples_1w72b820/280.mp3"

PLAYBACK_OPTIONS = {
    "should_play": True,
    "is_looping": True,
    "is_muted": False,
    "volume": 0.5,
    "rate": 1.5,
}


def register(t: SuiteBuilder) -> None:
    audio = t.host.audio
    expect = t.expect
    retry_for_status = t.retry_for_status

    def audio_class() -> None:
        def set_audio_mode() -> None:
            @t.it("rejects an impossible audio mode")
            async def rejects_impossible_mode() -> None:
                mode = {
                    "plays_in_silent_mode_ios": False,
                    "allows_recording_ios": True,
                    "interruption_mode_ios": INTERRUPTION_MODE_IOS_DO_NOT_MIX,
                    "should_duck_android": False,
                    "interruption_mode_android": INTERRUPTION_MODE_ANDROID_DO_NOT_MIX,
                }
                error = await t.rejects(audio.set_audio_mode(mode))
                expect(str(error)).to_match("Impossible audio mode")

        t.describe("Audio.set_audio_mode", set_audio_mode)

    t.describe("Audio class", audio_class)

    def audio_instances() -> None:
        state = SimpleNamespace(sound=None)

        @t.before_all
        async def enable_audio() -> None:
            await audio.set_is_enabled(True)

        @t.before_each
        def create_sound() -> None:
            state.sound = audio.create_sound()

        @t.after_each
        async def unload_sound() -> None:
            await state.sound.unload()
            state.sound = None

        def load() -> None:
            @t.it("loads the file from a bundled module")
            async def loads_module() -> None:
                await state.sound.load(MAIN_SOURCE)
                await retry_for_status(state.sound, {"is_loaded": True})

            @t.it("loads the file from an Asset")
            async def loads_asset() -> None:
                await state.sound.load(Asset.from_module(MAIN_SOURCE))
                await retry_for_status(state.sound, {"is_loaded": True})

            @t.it("loads the file from the Internet")
            async def loads_uri() -> None:
                await state.sound.load({"uri": SOUND_URI})
                await retry_for_status(state.sound, {"is_loaded": True})

            @t.it("rejects if a file is already loaded")
            async def rejects_second_load() -> None:
                await state.sound.load({"uri": SOUND_URI})
                await retry_for_status(state.sound, {"is_loaded": True})
                error = await t.rejects(state.sound.load(MAIN_SOURCE))
                expect(str(error)).to_match("already loaded")

        t.describe("Audio.load", load)

        def load_with_initial_status() -> None:
            @t.it("sets an initial status")
            async def initial_status() -> None:
                await state.sound.load(MAIN_SOURCE, PLAYBACK_OPTIONS)
                await retry_for_status(state.sound, PLAYBACK_OPTIONS)

        t.describe("Audio.load(source, initial_status)", load_with_initial_status)

        def set_status() -> None:
            @t.it("sets a status")
            async def sets_status() -> None:
                await state.sound.load(MAIN_SOURCE)
                await retry_for_status(state.sound, {"is_loaded": True})
                await state.sound.set_status(**PLAYBACK_OPTIONS)
                await retry_for_status(state.sound, PLAYBACK_OPTIONS)

        t.describe("Audio.set_status", set_status)

        def unload() -> None:
            @t.it("unloads the object when it is loaded")
            async def unloads() -> None:
                await state.sound.load(MAIN_SOURCE)
                await retry_for_status(state.sound, {"is_loaded": True})
                await state.sound.unload()
                await retry_for_status(state.sound, {"is_loaded": False})

            @t.it("does not reject if the object isn't loaded")
            async def unload_unloaded() -> None:
                status = await state.sound.unload()
                expect(status).to_equal({"is_loaded": False})

        t.describe("Audio.unload", unload)

        def status_updates() -> None:
            @t.it("calls the status callback when playing and stopping")
            async def callback_on_play_and_stop() -> None:
                on_update = t.create_spy("on_playback_status_update")
                state.sound.set_on_playback_status_update(on_update)
                await state.sound.load(MAIN_SOURCE)
                await retry_for_status(state.sound, {"is_loaded": True})
                await state.sound.play()
                await retry_for_status(state.sound, {"is_playing": True})
                await state.sound.stop()
                await retry_for_status(state.sound, {"is_playing": False})
                expect(on_update).to_have_been_called_with({"is_loaded": False})
                expect(on_update).to_have_been_called_with(t.object_containing(is_loaded=True))
                expect(on_update).to_have_been_called_with(t.object_containing(should_play=True))
                expect(on_update).to_have_been_called_with(t.object_containing(is_playing=False))

            @t.it("reports did_just_finish when playback reaches the end")
            async def callback_on_finish() -> None:
                on_update = t.create_spy("on_playback_status_update")
                state.sound.set_on_playback_status_update(on_update)
                await state.sound.load(MAIN_SOURCE, {"progress_update_interval_millis": 50})
                await retry_for_status(state.sound, {"is_buffering": False})
                status = await state.sound.get_status()
                await state.sound.set_status(
                    position_millis=status["playable_duration_millis"] - 100,
                    should_play=True,
                )
                await retry_for_status(state.sound, {"is_playing": False, "should_play": False})
                await t.wait_for(0.1)
                expect(on_update).to_have_been_called_with(t.object_containing(did_just_finish=True))

        t.describe("Audio.set_on_playback_status_update", status_updates)

        def play() -> None:
            @t.it("plays the sound")
            async def plays() -> None:
                await state.sound.load(MAIN_SOURCE)
                await state.sound.play()
                await retry_for_status(state.sound, {"is_playing": True})

        t.describe("Audio.play", play)

        def replay() -> None:
            @t.it("replays the sound")
            async def replays() -> None:
                await state.sound.load(MAIN_SOURCE)
                await retry_for_status(state.sound, {"is_loaded": True})
                await state.sound.play()
                await retry_for_status(state.sound, {"is_playing": True})
                await t.wait_for(0.5)
                status_before = await state.sound.get_status()
                await state.sound.replay()
                await retry_for_status(state.sound, {"is_playing": True})
                status_after = await state.sound.get_status()
                expect(status_after["position_millis"]).to_be_less_than(status_before["position_millis"])

            @t.it("calls the status callback with has_just_been_interrupted")
            async def replay_interrupts() -> None:
                on_update = t.create_spy("on_playback_status_update")
                await state.sound.load(MAIN_SOURCE)
                state.sound.set_on_playback_status_update(on_update)
                await retry_for_status(state.sound, {"is_loaded": True})
                await state.sound.play()
                await retry_for_status(state.sound, {"is_playing": True})
                await state.sound.replay()
                expect(on_update).to_have_been_called_with(t.object_containing(has_just_been_interrupted=True))

        t.describe("Audio.replay", replay)

        def pause() -> None:
            @t.it("pauses the sound")
            async def pauses() -> None:
                await state.sound.load(MAIN_SOURCE)
                await state.sound.play()
                await retry_for_status(state.sound, {"is_playing": True})
                await state.sound.pause()
                await retry_for_status(state.sound, {"is_playing": False})
                await state.sound.play()
                await retry_for_status(state.sound, {"is_playing": True})

        t.describe("Audio.pause", pause)

        def stop() -> None:
            @t.it("stops the sound")
            async def stops() -> None:
                await state.sound.load(MAIN_SOURCE, {"should_play": True})
                await retry_for_status(state.sound, {"is_playing": True})
                await state.sound.stop()
                await retry_for_status(state.sound, {"is_playing": False, "position_millis": 0})

        t.describe("Audio.stop", stop)

        def set_position() -> None:
            @t.it("sets the position")
            async def sets_position() -> None:
                await state.sound.load(MAIN_SOURCE)
                await retry_for_status(state.sound, {"position_millis": 0})
                await state.sound.set_position(1000)
                await retry_for_status(state.sound, {"position_millis": 1000})

        t.describe("Audio.set_position", set_position)

        def set_volume() -> None:
            @t.before_each
            async def load_at_full_volume() -> None:
                await state.sound.load(MAIN_SOURCE, {"volume": 1})
                await retry_for_status(state.sound, {"volume": 1})

            @t.it("sets the volume")
            async def sets_volume() -> None:
                await state.sound.set_volume(0.5)
                await retry_for_status(state.sound, {"volume": 0.5})

            def volume_failure(description: str, value: float) -> None:
                @t.it(f"rejects if volume value is {description}")
                async def rejects_volume() -> None:
                    error = await t.rejects(state.sound.set_volume(value))
                    expect(str(error)).to_match(r"value .+ between")

            volume_failure("too big", 2)
            volume_failure("negative", -0.5)

        t.describe("Audio.set_volume", set_volume)

        def set_is_muted() -> None:
            @t.it("sets whether the audio is muted")
            async def sets_muted() -> None:
                await state.sound.load(MAIN_SOURCE, {"is_muted": True})
                await retry_for_status(state.sound, {"is_muted": True})
                await state.sound.set_is_muted(False)
                await retry_for_status(state.sound, {"is_muted": False})

        t.describe("Audio.set_is_muted", set_is_muted)

        def set_is_looping() -> None:
            @t.it("sets whether the audio is looped")
            async def sets_looping() -> None:
                await state.sound.load(MAIN_SOURCE, {"is_looping": False})
                await retry_for_status(state.sound, {"is_looping": False})
                await state.sound.set_is_looping(True)
                await retry_for_status(state.sound, {"is_looping": True})

        t.describe("Audio.set_is_looping", set_is_looping)

        def set_progress_update_interval() -> None:
            @t.it("sets the update interval")
            async def sets_interval() -> None:
                on_update = t.create_spy("on_playback_status_update")
                await state.sound.load(MAIN_SOURCE, {"should_play": True, "is_looping": True})
                await retry_for_status(state.sound, {"is_playing": True})
                state.sound.set_on_playback_status_update(on_update)
                await state.sound.set_progress_update_interval(20)
                await t.wait_for(0.3)
                expect(on_update.call_count).to_be_greater_than(5)

        t.describe("Audio.set_progress_update_interval", set_progress_update_interval)

        def set_rate() -> None:
            rate_case = SimpleNamespace(rate=0.0, should_error=False, should_correct_pitch=False)

            @t.before_each
            async def load_at_initial_rate() -> None:
                initial_rate = 0.9
                status = await state.sound.load(MAIN_SOURCE, {"rate": initial_rate})
                expect(status["rate"]).to_be_close_to(initial_rate, 2)

            @t.after_each
            async def apply_rate() -> None:
                rejected = False
                try:
                    status = await state.sound.set_rate(rate_case.rate, rate_case.should_correct_pitch)
                    expect(status["rate"]).to_be_close_to(rate_case.rate, 2)
                    expect(status["should_correct_pitch"]).to_be(rate_case.should_correct_pitch)
                except t.ExternalOperationError:
                    rejected = True
                expect(rejected).to_equal(rate_case.should_error)
                rate_case.rate = 0.0
                rate_case.should_error = False
                rate_case.should_correct_pitch = False

            @t.it("sets rate with should_correct_pitch = True")
            async def rate_with_pitch() -> None:
                rate_case.rate = 1.5
                rate_case.should_correct_pitch = True

            @t.it("sets rate with should_correct_pitch = False")
            async def rate_without_pitch() -> None:
                rate_case.rate = 0.75
                rate_case.should_correct_pitch = False

            @t.it("rejects too high rate")
            async def rejects_high_rate() -> None:
                rate_case.rate = 40
                rate_case.should_error = True

            @t.it("rejects negative rate")
            async def rejects_negative_rate() -> None:
                rate_case.rate = -10
                rate_case.should_error = True

        t.describe("Audio.set_rate", set_rate)

    t.describe("Audio instances", audio_instances)
