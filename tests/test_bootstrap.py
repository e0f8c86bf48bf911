import sys

import pytest

import hostsuite
from hostsuite.core import PlanError
from hostsuite.hosts import host_manager
from hostsuite.suites import catalog


@pytest.fixture
def fresh_bootstrap(monkeypatch):
    monkeypatch.setattr(hostsuite, "_BOOTSTRAPPED", False)
    monkeypatch.setattr(hostsuite, "_plugins", [])
    yield
    sys.modules.pop("hostsuite_test_plugin", None)


def test_bootstrap_registers_builtins(fresh_bootstrap, monkeypatch) -> None:
    monkeypatch.delenv(hostsuite.PLUGINS_ENV, raising=False)
    hostsuite.bootstrap()
    assert "local" in host_manager
    assert {"filesystem", "audio"} <= set(catalog.names())
    assert hostsuite.loaded_plugins() == []


def test_bootstrap_loads_plugins_once(fresh_bootstrap, tmp_path, monkeypatch) -> None:
    plugin = tmp_path / "hostsuite_test_plugin.py"
    plugin.write_text("CALLS = []\n\ndef register():\n    CALLS.append('registered')\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setenv(hostsuite.PLUGINS_ENV, "hostsuite_test_plugin, ")
    hostsuite.bootstrap()
    hostsuite.bootstrap()
    assert sys.modules["hostsuite_test_plugin"].CALLS == ["registered"]
    assert hostsuite.loaded_plugins() == ["hostsuite_test_plugin"]


def test_bootstrap_rejects_broken_plugins(fresh_bootstrap, tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(hostsuite.PLUGINS_ENV, "hostsuite_missing_plugin")
    with pytest.raises(PlanError, match="Cannot import plugin"):
        hostsuite.bootstrap()
    (tmp_path / "hostsuite_test_plugin.py").write_text("VALUE = 1\n", encoding="utf-8")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setenv(hostsuite.PLUGINS_ENV, "hostsuite_test_plugin")
    with pytest.raises(PlanError, match="does not define register"):
        hostsuite.bootstrap()
