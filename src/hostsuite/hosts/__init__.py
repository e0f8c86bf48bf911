"""Host capability exports."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from .base import (
    Asset,
    AudioCapability,
    DownloadResult,
    FileInfo,
    FileSystemCapability,
    Host,
    HostManager,
    SoundCapability,
    host_manager,
)
from .local import LocalFileSystem
from .simulated import SimulatedAudio, SimulatedSound

__all__ = [
    "Asset",
    "AudioCapability",
    "DownloadResult",
    "FileInfo",
    "FileSystemCapability",
    "Host",
    "HostManager",
    "LocalFileSystem",
    "SimulatedAudio",
    "SimulatedSound",
    "SoundCapability",
    "create_local_host",
    "host_manager",
    "register_builtin_hosts",
]

DEFAULT_SANDBOX = ".hostsuite-sandbox"


def create_local_host(options: Mapping[str, Any]) -> Host:
    """Local disk sandbox plus the simulated audio module."""

    root = Path(options.get("root") or DEFAULT_SANDBOX)
    filesystem = LocalFileSystem(
        root,
        download_timeout=float(options.get("download_timeout", 30.0)),
    )
    audio = SimulatedAudio(
        duration_ms=float(options.get("sound_duration_ms", 5000.0)),
        load_latency=float(options.get("load_latency", 0.02)),
        start_latency=float(options.get("start_latency", 0.02)),
    )
    return Host(name="local", filesystem=filesystem, audio=audio)


def register_builtin_hosts(manager: HostManager = host_manager) -> None:
    if "local" not in manager:
        manager.register("local", create_local_host)
