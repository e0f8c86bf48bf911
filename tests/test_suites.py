import hashlib

import httpx
import pytest

from hostsuite.core import PlanError, PollConfig, SuiteBuilder, TestRunner
from hostsuite.hosts import Host, LocalFileSystem, SimulatedAudio
from hostsuite.suites import catalog
from hostsuite.suites import filesystem as filesystem_suite

AVATAR_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(200)) * 16
TEXT_BYTES = b"hello from the mock transport\n"


def _run(host: Host, names, selector=None):
    builder = SuiteBuilder(host=host, poll_config=PollConfig(interval=0.02, max_retries=100))
    for name in names:
        catalog.resolve(name).register(builder)
    return TestRunner(default_timeout=5.0, selector=selector).run(builder.build())


def _failures(results) -> list:
    return [(result.path, result.error) for result in results if not result.passed]


def test_catalog_lists_builtin_suites() -> None:
    assert set(catalog.names()) >= {"filesystem", "audio"}
    assert catalog.resolve("audio").description


def test_catalog_rejects_unknown_references() -> None:
    with pytest.raises(PlanError, match="Unknown suite"):
        catalog.resolve("nope")
    with pytest.raises(PlanError, match="Cannot import"):
        catalog.resolve("hostsuite_missing.module")
    with pytest.raises(PlanError, match="does not name a callable"):
        catalog.resolve("hostsuite.suites.audio:NAME")


def test_catalog_resolves_module_references() -> None:
    entry = catalog.resolve("hostsuite.suites.filesystem")
    assert entry.name == "filesystem"
    assert entry.register is filesystem_suite.register


def test_audio_suite_passes_on_simulated_host(local_host) -> None:
    results = _run(local_host, ["audio"])
    assert _failures(results) == []
    assert len(results) == 27
    assert "Audio instances > Audio.set_rate > rejects negative rate" in {result.path for result in results}


def test_filesystem_suite_passes_offline(local_host) -> None:
    results = _run(local_host, ["filesystem"], selector=lambda path, tags: "network" not in tags)
    assert _failures(results) == []
    assert len(results) == 8


def test_filesystem_download_cases_pass_with_mock_transport(sandbox, monkeypatch) -> None:
    monkeypatch.setattr(filesystem_suite, "AVATAR_MD5", hashlib.md5(AVATAR_BYTES).hexdigest())
    monkeypatch.setattr(filesystem_suite, "AVATAR_SIZE", len(AVATAR_BYTES))
    monkeypatch.setattr(filesystem_suite, "TEXT_MD5", hashlib.md5(TEXT_BYTES).hexdigest())
    monkeypatch.setattr(filesystem_suite, "TEXT_CONTENTS", TEXT_BYTES.decode("utf-8"))
    bodies = {filesystem_suite.AVATAR_URL: AVATAR_BYTES, filesystem_suite.TEXT_URL: TEXT_BYTES}

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=bodies[str(request.url)])

    host = Host(
        name="mocked",
        filesystem=LocalFileSystem(sandbox, transport=httpx.MockTransport(handler)),
        audio=SimulatedAudio(),
    )
    results = _run(host, ["filesystem"], selector=lambda path, tags: "network" in tags)
    assert _failures(results) == []
    assert len(results) == 3


def test_filesystem_download_reports_md5_mismatch(sandbox) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"not the avatar")

    host = Host(
        name="mocked",
        filesystem=LocalFileSystem(sandbox, transport=httpx.MockTransport(handler)),
        audio=SimulatedAudio(),
    )
    results = _run(host, ["filesystem"], selector=lambda path, tags: "network" in tags)
    assert {result.status for result in results} == {"failed"}
