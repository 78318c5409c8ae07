"""
data/machine.py
The tracker as an explicit finite-state machine.

TrackerState bundles everything the page shows (wallet session, fetch state,
snapshot, sort mode, last notice). transition() is a pure function from
(state, event) to the next state; TrackerStore holds the current state and is
the only place it is replaced. The wallet and fetch layers dispatch events into
a shared store instead of mutating each other.

Each browser tab keeps its own state as a dict (state_to_dict) in a dcc.Store;
callbacks rebuild a short-lived store from it, so no state is shared between
clients or threads.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any, Optional

from data.models import CoinRecord, FetchState, MarketSnapshot, SortMode, WalletSession

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    CONNECT_SUCCESS = "connect-success"
    CONNECT_FAIL = "connect-fail"
    DISCONNECT = "disconnect"
    FETCH_START = "fetch-start"
    FETCH_SUCCESS = "fetch-success"
    FETCH_FAIL = "fetch-fail"
    SORT_CHANGE = "sort-change"


@dataclass(frozen=True)
class Event:
    type: EventType
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TrackerState:
    session: WalletSession = field(default_factory=WalletSession.disconnected)
    fetch_state: FetchState = FetchState.IDLE
    snapshot: MarketSnapshot = ()
    sort_mode: SortMode = SortMode.PRICE
    notice: Optional[str] = None       # last wallet error shown to the user
    fetch_error: Optional[str] = None  # last fetch failure, for the view


# ── Transition function ────────────────────────────────────────────────────────

def transition(state: TrackerState, event: Event) -> TrackerState:
    """
    Return the state that follows `state` after `event`. Never mutates `state`.

    Payloads:
        CONNECT_SUCCESS: {"address": str}
        CONNECT_FAIL:    {"notice": str, "reset": bool}
        FETCH_SUCCESS:   {"snapshot": MarketSnapshot}
        FETCH_FAIL:      {"error": str}
        SORT_CHANGE:     {"mode": SortMode | str}
    """
    kind = event.type
    payload = event.payload

    if kind is EventType.CONNECT_SUCCESS:
        return replace(state, session=WalletSession.connected_as(payload["address"]), notice=None)

    if kind is EventType.CONNECT_FAIL:
        # An absent extension leaves the session untouched; a failing one resets it.
        session = WalletSession.disconnected() if payload.get("reset", True) else state.session
        return replace(state, session=session, notice=payload.get("notice"))

    if kind is EventType.DISCONNECT:
        return replace(state, session=WalletSession.disconnected(), notice=None)

    if kind is EventType.FETCH_START:
        return replace(state, fetch_state=FetchState.LOADING, fetch_error=None)

    if kind is EventType.FETCH_SUCCESS:
        return replace(state, fetch_state=FetchState.READY, snapshot=tuple(payload["snapshot"]))

    if kind is EventType.FETCH_FAIL:
        return replace(state, fetch_state=FetchState.FAILED, fetch_error=payload.get("error"))

    if kind is EventType.SORT_CHANGE:
        return replace(state, sort_mode=SortMode.parse(payload["mode"]))

    raise ValueError(f"Unknown event type: {kind!r}")


# ── Serialization ──────────────────────────────────────────────────────────────

# Keys a fetch cycle owns; everything else belongs to the user actions.
FETCH_FIELDS = ("fetch_state", "snapshot", "fetch_error")


def state_to_dict(state: TrackerState) -> dict:
    """JSON-safe form of `state`, as kept in the browser's dcc.Store."""
    return {
        "session":     {"address": state.session.address, "connected": state.session.connected},
        "fetch_state": state.fetch_state.value,
        "snapshot":    [asdict(r) for r in state.snapshot],
        "sort_mode":   state.sort_mode.value,
        "notice":      state.notice,
        "fetch_error": state.fetch_error,
    }


def state_from_dict(data: Optional[dict]) -> TrackerState:
    """Inverse of state_to_dict(). Empty or missing data is the initial state."""
    if not data:
        return TrackerState()
    session = data.get("session") or {}
    return TrackerState(
        session=WalletSession(address=session.get("address") or "",
                              connected=bool(session.get("connected"))),
        fetch_state=FetchState(data.get("fetch_state") or FetchState.IDLE.value),
        snapshot=tuple(CoinRecord(**r) for r in data.get("snapshot") or ()),
        sort_mode=SortMode.parse(data.get("sort_mode") or SortMode.PRICE.value),
        notice=data.get("notice"),
        fetch_error=data.get("fetch_error"),
    )


# ── Store ──────────────────────────────────────────────────────────────────────

class TrackerStore:
    """Holds the current TrackerState and applies events to it."""

    def __init__(self, initial: Optional[TrackerState] = None):
        self._state = initial or TrackerState()

    @property
    def state(self) -> TrackerState:
        return self._state

    def dispatch(self, event: Event) -> TrackerState:
        self._state = transition(self._state, event)
        logger.debug(f"{event.type.value} → session={self._state.session.connected} "
                      f"fetch={self._state.fetch_state.value} rows={len(self._state.snapshot)}")
        return self._state

    def reset(self) -> None:
        self._state = TrackerState()
