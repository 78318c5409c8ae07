import pytest

from conftest import coin
from data.machine import (
    Event, EventType, TrackerState, TrackerStore, state_from_dict, state_to_dict, transition,
)
from data.models import FetchState, SortMode, WalletSession


def test_initial_state():
    state = TrackerState()
    assert state.session == WalletSession(address="", connected=False)
    assert state.fetch_state is FetchState.IDLE
    assert state.snapshot == ()
    assert state.sort_mode is SortMode.PRICE


def test_connect_then_disconnect():
    state = transition(TrackerState(), Event(EventType.CONNECT_SUCCESS, {"address": "abc"}))
    assert state.session == WalletSession(address="abc", connected=True)
    state = transition(state, Event(EventType.DISCONNECT))
    assert state.session == WalletSession(address="", connected=False)


def test_connect_fail_without_reset_keeps_session():
    connected = TrackerState(session=WalletSession.connected_as("abc"))
    state = transition(connected, Event(EventType.CONNECT_FAIL, {"notice": "missing", "reset": False}))
    assert state.session.connected
    assert state.notice == "missing"


def test_connect_fail_with_reset_disconnects():
    connected = TrackerState(session=WalletSession.connected_as("abc"))
    state = transition(connected, Event(EventType.CONNECT_FAIL, {"notice": "no address", "reset": True}))
    assert state.session == WalletSession.disconnected()


def test_fetch_cycle_to_ready():
    records = (coin("btc", 1.0, 1.0),)
    state = transition(TrackerState(), Event(EventType.FETCH_START))
    assert state.fetch_state is FetchState.LOADING
    state = transition(state, Event(EventType.FETCH_SUCCESS, {"snapshot": records}))
    assert state.fetch_state is FetchState.READY
    assert state.snapshot == records


def test_fetch_fail_keeps_last_snapshot():
    records = (coin("btc", 1.0, 1.0),)
    state = TrackerState(fetch_state=FetchState.LOADING, snapshot=records)
    state = transition(state, Event(EventType.FETCH_FAIL, {"error": "boom"}))
    assert state.fetch_state is FetchState.FAILED
    assert state.snapshot == records
    assert state.fetch_error == "boom"


def test_sort_change_does_not_touch_fetch():
    state = transition(TrackerState(), Event(EventType.SORT_CHANGE, {"mode": "volume"}))
    assert state.sort_mode is SortMode.VOLUME
    assert state.fetch_state is FetchState.IDLE


def test_transition_returns_new_state():
    before = TrackerState()
    after = transition(before, Event(EventType.CONNECT_SUCCESS, {"address": "abc"}))
    assert before.session.connected is False
    assert after is not before


def test_session_invariant_enforced():
    with pytest.raises(ValueError):
        WalletSession(address="", connected=True)
    with pytest.raises(ValueError):
        WalletSession(address="abc", connected=False)


def test_store_dispatch_and_reset():
    store = TrackerStore()
    store.dispatch(Event(EventType.FETCH_START))
    assert store.state.fetch_state is FetchState.LOADING
    store.reset()
    assert store.state == TrackerState()


def test_store_dict_restores_full_state():
    state = TrackerState(
        session=WalletSession.connected_as("abc"),
        fetch_state=FetchState.FAILED,
        snapshot=(coin("btc", 50000.0, 1e9), coin("new", None, None, cap=None)),
        sort_mode=SortMode.VOLUME,
        fetch_error="rate limited",
    )
    data = state_to_dict(state)
    assert data["snapshot"][1]["current_price"] is None
    assert state_from_dict(data) == state


def test_missing_store_data_is_initial_state():
    assert state_from_dict(None) == TrackerState()
    assert state_from_dict({}) == TrackerState()
