"""
Screen store and request effects tests.
"""

import json

import pytest

from backend.web import screens
from backend.web.effects import RequestEffects
from backend.web.screens import ScreenStore


def test_create_and_get_returns_same_state():
    store = ScreenStore(ttl_seconds=60)
    state = store.create()
    assert store.get(state.screen_id) is state
    assert store.get(None) is None
    assert store.get("unknown") is None
    assert len(store) == 1


def test_screens_have_distinct_ids_and_tokens():
    store = ScreenStore()
    a, b = store.create(), store.create()
    assert a.screen_id != b.screen_id
    assert a.csrf_token != b.csrf_token


def test_discard_unmounts_and_forgets_password():
    store = ScreenStore()
    state = store.create()
    state.password = "pw"

    store.discard(state.screen_id)

    assert state.mounted is False
    assert state.password == ""
    assert store.get(state.screen_id) is None
    # Discarding twice is harmless
    store.discard(state.screen_id)


def test_expired_screen_is_discarded(monkeypatch: pytest.MonkeyPatch):
    now = {"t": 1_000}
    monkeypatch.setattr(screens, "_now", lambda: now["t"])
    store = ScreenStore(ttl_seconds=10)
    state = store.create()

    now["t"] += 5
    assert store.get(state.screen_id) is state  # slides expiry to 1015
    now["t"] += 9
    assert store.get(state.screen_id) is state
    now["t"] += 11
    assert store.get(state.screen_id) is None
    assert state.mounted is False
    assert len(store) == 0


def test_hx_trigger_single_and_multiple_toasts():
    effects = RequestEffects()
    assert effects.hx_trigger() is None

    effects.show_success("Login successful! 🎉")
    header = effects.hx_trigger()
    # Header values must be latin-1 encodable
    header.encode("latin-1")
    assert json.loads(header) == {"showMessage": {"message": "Login successful! 🎉", "type": "success"}}

    effects.show_error("Server error")
    payload = json.loads(effects.hx_trigger())["showMessage"]
    assert [p["type"] for p in payload] == ["success", "error"]


def test_navigator_records_target():
    effects = RequestEffects()
    effects.navigate_to("/")
    assert effects.redirect_to == "/"


def test_create_sweeps_abandoned_screens(monkeypatch: pytest.MonkeyPatch):
    now = {"t": 1_000}
    monkeypatch.setattr(screens, "_now", lambda: now["t"])
    store = ScreenStore(ttl_seconds=10)
    abandoned = store.create()
    abandoned.password = "hunter2"

    now["t"] += 10_000
    for _ in range(5):
        store.create()

    assert len(store) == 5
    assert abandoned.mounted is False
    assert abandoned.password == ""


def test_get_sweeps_on_interval(monkeypatch: pytest.MonkeyPatch):
    now = {"t": 1_000}
    monkeypatch.setattr(screens, "_now", lambda: now["t"])
    store = ScreenStore(ttl_seconds=10, sweep_interval=30)
    abandoned = store.create()
    kept = store.create()

    now["t"] += 20
    # Expired but not yet swept: the interval has not passed
    assert store.get("unknown") is None
    assert len(store) == 2

    now["t"] += 15
    assert store.get(None) is None
    assert len(store) == 0
    assert abandoned.mounted is False and kept.mounted is False
