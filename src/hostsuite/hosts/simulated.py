"""Simulated audio host used for development and CI.

Sounds never decode anything: a status model advances ``position_millis`` on
the event-loop clock while playing, which is enough to drive the audio suite
and the status poller.
"""
from __future__ import annotations

import asyncio
import numbers
from typing import Any, Dict, Mapping, Optional

import structlog

from hostsuite.core.errors import ExternalOperationError

from .base import AudioCapability, SoundCapability, StatusCallback

logger = structlog.get_logger()

INTERRUPTION_MODE_IOS_MIX_WITH_OTHERS = 0
INTERRUPTION_MODE_IOS_DO_NOT_MIX = 1
INTERRUPTION_MODE_IOS_DUCK_OTHERS = 2
INTERRUPTION_MODE_ANDROID_DO_NOT_MIX = 1
INTERRUPTION_MODE_ANDROID_DUCK_OTHERS = 2

AUDIO_MODE_KEYS = (
    "plays_in_silent_mode_ios",
    "allows_recording_ios",
    "interruption_mode_ios",
    "should_duck_android",
    "interruption_mode_android",
)

STATUS_KEYS = (
    "should_play",
    "position_millis",
    "rate",
    "should_correct_pitch",
    "volume",
    "is_muted",
    "is_looping",
    "progress_update_interval_millis",
)

MIN_RATE = 0.0
MAX_RATE = 32.0


class SimulatedAudio(AudioCapability):
    """Audio module whose sounds run on the event-loop clock."""

    def __init__(
        self,
        *,
        duration_ms: float = 5000.0,
        load_latency: float = 0.02,
        start_latency: float = 0.02,
    ) -> None:
        self.duration_ms = float(duration_ms)
        self.load_latency = load_latency
        self.start_latency = start_latency
        self.enabled = True
        self.mode: Dict[str, Any] = {}

    async def set_is_enabled(self, enabled: bool) -> None:
        self.enabled = bool(enabled)

    async def set_audio_mode(self, mode: Mapping[str, Any]) -> None:
        unknown = sorted(set(mode) - set(AUDIO_MODE_KEYS))
        if unknown:
            raise ExternalOperationError("set_audio_mode", f"Unknown audio mode key(s): {', '.join(unknown)}")
        if mode.get("allows_recording_ios") and mode.get("plays_in_silent_mode_ios") is False:
            raise ExternalOperationError(
                "set_audio_mode",
                "Impossible audio mode: plays_in_silent_mode_ios == False and "
                "allows_recording_ios == True cannot be set together.",
            )
        ios_mode = mode.get("interruption_mode_ios")
        if ios_mode is not None and ios_mode not in (
            INTERRUPTION_MODE_IOS_MIX_WITH_OTHERS,
            INTERRUPTION_MODE_IOS_DO_NOT_MIX,
            INTERRUPTION_MODE_IOS_DUCK_OTHERS,
        ):
            raise ExternalOperationError("set_audio_mode", f"Invalid interruption_mode_ios: {ios_mode!r}")
        android_mode = mode.get("interruption_mode_android")
        if android_mode is not None and android_mode not in (
            INTERRUPTION_MODE_ANDROID_DO_NOT_MIX,
            INTERRUPTION_MODE_ANDROID_DUCK_OTHERS,
        ):
            raise ExternalOperationError("set_audio_mode", f"Invalid interruption_mode_android: {android_mode!r}")
        self.mode.update(mode)

    def create_sound(self) -> "SimulatedSound":
        return SimulatedSound(self)


class SimulatedSound(SoundCapability):
    """Status model for one sound."""

    def __init__(self, audio: SimulatedAudio) -> None:
        self._audio = audio
        self._callback: Optional[StatusCallback] = None
        self._ticker: Optional[asyncio.Task] = None
        self._loading = False
        self._reset()

    def _reset(self) -> None:
        self._loaded = False
        self._uri: Optional[str] = None
        self._should_play = False
        self._start_at = 0.0
        self._base_position = 0.0
        self._rate = 1.0
        self._should_correct_pitch = False
        self._volume = 1.0
        self._is_muted = False
        self._is_looping = False
        self._interval_ms = 500
        self._pending_finish = False

    # -- clock --------------------------------------------------------------

    @staticmethod
    def _now() -> float:
        return asyncio.get_running_loop().time()

    def _settle(self, now: float) -> None:
        if not (self._should_play and now >= self._start_at):
            return
        duration = self._audio.duration_ms
        position = self._base_position + (now - self._start_at) * 1000.0 * self._rate
        if position >= duration:
            if self._is_looping and duration > 0:
                position %= duration
            else:
                position = duration
                self._should_play = False
                self._pending_finish = True
        self._base_position = position
        self._start_at = now

    def _snapshot(self, **extra: Any) -> Dict[str, Any]:
        if not self._loaded:
            return {"is_loaded": False}
        now = self._now()
        self._settle(now)
        started = now >= self._start_at
        status = {
            "is_loaded": True,
            "uri": self._uri,
            "progress_update_interval_millis": self._interval_ms,
            "duration_millis": int(self._audio.duration_ms),
            "position_millis": int(self._base_position),
            "playable_duration_millis": int(self._audio.duration_ms),
            "should_play": self._should_play,
            "is_playing": self._should_play and started,
            "is_buffering": self._should_play and not started,
            "rate": self._rate,
            "should_correct_pitch": self._should_correct_pitch,
            "volume": self._volume,
            "is_muted": self._is_muted,
            "is_looping": self._is_looping,
            "did_just_finish": self._pending_finish,
        }
        self._pending_finish = False
        status.update(extra)
        return status

    # -- capability ---------------------------------------------------------

    async def load(self, source: Any, initial_status: Optional[Mapping[str, Any]] = None) -> Mapping[str, Any]:
        if not self._audio.enabled:
            raise ExternalOperationError("load", "Audio is disabled. Call set_is_enabled(True) first.")
        if self._loaded or self._loading:
            raise ExternalOperationError("load", "The Sound is already loaded.")
        uri = _source_uri(source)
        fields = dict(initial_status or {})
        _validate_status(fields)
        self._loading = True
        try:
            await asyncio.sleep(self._audio.load_latency)
        finally:
            self._loading = False
        self._loaded = True
        self._uri = uri
        self._apply(fields, self._now())
        self._ensure_ticker()
        logger.debug("sound.loaded", uri=uri)
        return self._notify()

    async def unload(self) -> Mapping[str, Any]:
        if not self._loaded:
            return {"is_loaded": False}
        self._stop_ticker()
        self._reset()
        return self._notify()

    async def get_status(self) -> Mapping[str, Any]:
        status = self._snapshot()
        if status.get("did_just_finish"):
            self._emit(status)
        return status

    async def set_status(self, **fields: Any) -> Mapping[str, Any]:
        self._require_loaded("set_status")
        _validate_status(fields)
        now = self._now()
        self._settle(now)
        self._apply(fields, now)
        if "progress_update_interval_millis" in fields:
            self._stop_ticker()
            self._ensure_ticker()
        return self._notify()

    async def replay(self) -> Mapping[str, Any]:
        self._require_loaded("replay")
        now = self._now()
        self._settle(now)
        if self._should_play and now >= self._start_at:
            self._emit(self._snapshot(has_just_been_interrupted=True))
        self._base_position = 0.0
        self._should_play = True
        self._start_at = now + self._audio.start_latency
        return self._notify()

    def set_on_playback_status_update(self, callback: Optional[StatusCallback]) -> None:
        self._callback = callback
        if callback is None:
            self._stop_ticker()
            return
        self._ensure_ticker()
        self._emit(self._snapshot())

    # -- internals ----------------------------------------------------------

    def _apply(self, fields: Mapping[str, Any], now: float) -> None:
        if "rate" in fields:
            self._rate = float(fields["rate"])
        if "should_correct_pitch" in fields:
            self._should_correct_pitch = bool(fields["should_correct_pitch"])
        if "volume" in fields:
            self._volume = float(fields["volume"])
        if "is_muted" in fields:
            self._is_muted = bool(fields["is_muted"])
        if "is_looping" in fields:
            self._is_looping = bool(fields["is_looping"])
        if "progress_update_interval_millis" in fields:
            self._interval_ms = int(fields["progress_update_interval_millis"])
        if "position_millis" in fields:
            self._base_position = min(max(float(fields["position_millis"]), 0.0), self._audio.duration_ms)
            if self._should_play and now >= self._start_at:
                self._start_at = now
        if "should_play" in fields:
            should_play = bool(fields["should_play"])
            if should_play and not self._should_play:
                self._start_at = now + self._audio.start_latency
            self._should_play = should_play

    def _require_loaded(self, operation: str) -> None:
        if not self._loaded:
            raise ExternalOperationError(operation, "Cannot complete operation because sound is not loaded.")

    def _notify(self) -> Mapping[str, Any]:
        status = self._snapshot()
        self._emit(status)
        return status

    def _emit(self, status: Mapping[str, Any]) -> None:
        if self._callback is None:
            return
        try:
            self._callback(dict(status))
        except Exception:
            logger.exception("sound.status_callback_failed", uri=self._uri)

    def _ensure_ticker(self) -> None:
        if self._callback is None or not self._loaded:
            return
        if self._ticker is not None and not self._ticker.done():
            return
        self._ticker = asyncio.get_running_loop().create_task(self._tick())

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def _tick(self) -> None:
        while self._loaded:
            await asyncio.sleep(self._interval_ms / 1000.0)
            if not self._loaded:
                break
            was_playing = self._should_play
            status = self._snapshot()
            if was_playing or status["did_just_finish"]:
                self._emit(status)


def _source_uri(source: Any) -> str:
    if isinstance(source, Mapping) and source.get("uri"):
        return str(source["uri"])
    uri = getattr(source, "uri", None)
    if uri:
        return str(uri)
    if isinstance(source, str) and source:
        return source if "://" in source else f"asset:///{source}"
    if isinstance(source, int) and not isinstance(source, bool):
        return f"asset:///{source}"
    raise ExternalOperationError("load", "Cannot load an AV asset from a null playback source.")


def _validate_status(fields: Mapping[str, Any]) -> None:
    unknown = sorted(set(fields) - set(STATUS_KEYS))
    if unknown:
        raise ExternalOperationError("set_status", f"Unknown status key(s): {', '.join(unknown)}")
    if "volume" in fields:
        volume = fields["volume"]
        if not _is_number(volume) or not 0.0 <= volume <= 1.0:
            raise ExternalOperationError("set_status", f"Volume value must be between 0.0 and 1.0, got {volume!r}.")
    if "rate" in fields:
        rate = fields["rate"]
        if not _is_number(rate) or not MIN_RATE <= rate <= MAX_RATE:
            raise ExternalOperationError(
                "set_status", f"Rate value must be between {MIN_RATE} and {MAX_RATE}, got {rate!r}."
            )
    if "progress_update_interval_millis" in fields:
        interval = fields["progress_update_interval_millis"]
        if not _is_number(interval) or interval <= 0:
            raise ExternalOperationError("set_status", "Progress update interval must be a positive number.")


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
