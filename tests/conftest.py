from pathlib import Path

import pytest

from hostsuite import bootstrap
from hostsuite.hosts import Host, LocalFileSystem, SimulatedAudio
from hostsuite.log_config import configure_logging


@pytest.fixture(scope="session", autouse=True)
def setup_hostsuite() -> None:
    """Quiet logging and load plugins once for the entire test session."""

    configure_logging(verbose=False)
    bootstrap()


@pytest.fixture
def sandbox(tmp_path: Path) -> Path:
    root = tmp_path / "sandbox"
    root.mkdir()
    return root


@pytest.fixture
def local_host(sandbox: Path) -> Host:
    return Host(
        name="local",
        filesystem=LocalFileSystem(sandbox),
        audio=SimulatedAudio(duration_ms=5000, load_latency=0.0, start_latency=0.01),
    )
