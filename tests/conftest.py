"""Pytest fixtures for rich-cores tests."""

import copy
import io
import time

import pytest
from rich.console import Console

from rich_cores.app import Application
from rich_cores.config import DEFAULT_CONFIG
from rich_cores.core import CoreView


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config dir at a temp directory and clear env overrides."""
    config_home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("RICH_CORES_THEME", raising=False)
    monkeypatch.delenv("RICH_CORES_REFRESH", raising=False)
    return config_home / "rich-cores"


@pytest.fixture
def console():
    """A Console that renders plain text into a buffer."""
    return Console(file=io.StringIO(), width=120, height=40, color_system=None, force_terminal=False)


@pytest.fixture
def app(console):
    return Application(console=console, config=copy.deepcopy(DEFAULT_CONFIG))


@pytest.fixture
def view(app):
    v = CoreView(app, "Servers")
    yield v
    v.destroy()


@pytest.fixture
def actions(view):
    """Record every action the view fires.

    Set ``actions.claim`` to a set of keys the host should claim.
    """

    class Recorder(list):
        claim: set = set()

    recorder = Recorder()

    def on_action(action, payload):
        recorder.append((action, payload))
        return action == "keypress" and payload.get("key") in recorder.claim

    view.set_action_callback(on_action)
    return recorder


@pytest.fixture
def drain(app):
    """Process queued UI updates until ``predicate()`` holds or time runs out."""

    def drain_until(predicate, timeout=2.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            app.process_pending()
            if predicate():
                return True
            time.sleep(0.01)
        app.process_pending()
        return predicate()

    return drain_until
