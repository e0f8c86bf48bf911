"""Host capability interfaces and the host registry."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

StatusCallback = Callable[[Mapping[str, Any]], None]


@dataclass(frozen=True)
class Asset:
    """A bundled media asset addressed by URI."""

    uri: str

    @classmethod
    def from_module(cls, module: str) -> "Asset":
        return cls(uri=f"asset:///{module}")


@dataclass(frozen=True)
class FileInfo:
    """Result of ``get_info``."""

    exists: bool
    uri: str
    is_directory: bool = False
    size: Optional[int] = None
    modification_time: Optional[float] = None
    md5: Optional[str] = None


@dataclass(frozen=True)
class DownloadResult:
    """Result of ``download``."""

    uri: str
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    md5: Optional[str] = None


class FileSystemCapability:
    """Sandboxed filesystem exposed by a host. Every method is a coroutine."""

    async def get_info(self, path: str, *, md5: bool = False) -> FileInfo:
        raise NotImplementedError

    async def download(self, url: str, path: str, *, md5: bool = False) -> DownloadResult:
        raise NotImplementedError

    async def read_as_string(self, path: str) -> str:
        raise NotImplementedError

    async def write_as_string(self, path: str, contents: str) -> None:
        raise NotImplementedError

    async def delete(self, path: str, *, idempotent: bool = False) -> None:
        raise NotImplementedError

    async def move(self, from_: str, to: str) -> None:
        raise NotImplementedError

    async def copy(self, from_: str, to: str) -> None:
        raise NotImplementedError

    async def make_directory(self, path: str, *, intermediates: bool = False) -> None:
        raise NotImplementedError

    async def read_directory(self, path: str) -> List[str]:
        raise NotImplementedError


class SoundCapability:
    """A stateful sound object. Status-changing calls resolve with the new status."""

    async def load(self, source: Any, initial_status: Optional[Mapping[str, Any]] = None) -> Mapping[str, Any]:
        raise NotImplementedError

    async def unload(self) -> Mapping[str, Any]:
        raise NotImplementedError

    async def get_status(self) -> Mapping[str, Any]:
        raise NotImplementedError

    async def set_status(self, **fields: Any) -> Mapping[str, Any]:
        raise NotImplementedError

    async def play(self) -> Mapping[str, Any]:
        return await self.set_status(should_play=True)

    async def pause(self) -> Mapping[str, Any]:
        return await self.set_status(should_play=False)

    async def stop(self) -> Mapping[str, Any]:
        return await self.set_status(should_play=False, position_millis=0)

    async def replay(self) -> Mapping[str, Any]:
        raise NotImplementedError

    async def set_position(self, position_millis: float) -> Mapping[str, Any]:
        return await self.set_status(position_millis=position_millis)

    async def set_volume(self, volume: float) -> Mapping[str, Any]:
        return await self.set_status(volume=volume)

    async def set_is_muted(self, is_muted: bool) -> Mapping[str, Any]:
        return await self.set_status(is_muted=is_muted)

    async def set_is_looping(self, is_looping: bool) -> Mapping[str, Any]:
        return await self.set_status(is_looping=is_looping)

    async def set_rate(self, rate: float, should_correct_pitch: bool = False) -> Mapping[str, Any]:
        return await self.set_status(rate=rate, should_correct_pitch=should_correct_pitch)

    async def set_progress_update_interval(self, millis: int) -> Mapping[str, Any]:
        return await self.set_status(progress_update_interval_millis=millis)

    def set_on_playback_status_update(self, callback: Optional[StatusCallback]) -> None:
        raise NotImplementedError


class AudioCapability:
    """Audio module of a host: global switches plus a sound factory."""

    async def set_is_enabled(self, enabled: bool) -> None:
        raise NotImplementedError

    async def set_audio_mode(self, mode: Mapping[str, Any]) -> None:
        raise NotImplementedError

    def create_sound(self) -> SoundCapability:
        raise NotImplementedError


@dataclass
class Host:
    """Bundle of capabilities handed to suites."""

    name: str
    filesystem: FileSystemCapability
    audio: AudioCapability


HostFactory = Callable[[Mapping[str, Any]], Host]


class HostManager:
    """Registry for host factories keyed by type."""

    def __init__(self) -> None:
        self._factories: Dict[str, HostFactory] = {}

    def register(self, kind: str, factory: HostFactory) -> None:
        if kind in self._factories:
            raise ValueError(f"Host type '{kind}' already registered")
        self._factories[kind] = factory

    def create(self, kind: str, options: Optional[Mapping[str, Any]] = None) -> Host:
        try:
            factory = self._factories[kind]
        except KeyError as exc:
            raise KeyError(f"No host registered for type={kind!r}") from exc
        return factory(dict(options or {}))

    def kinds(self) -> Iterable[str]:
        return tuple(self._factories.keys())

    def __contains__(self, kind: str) -> bool:
        return kind in self._factories


host_manager = HostManager()
