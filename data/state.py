"""
data/state.py
Module-level shared settings plus the per-client Tracker.

Only read-only configuration lives at module level (FETCH_OPTIONS, set by
app.py at startup). Wallet session, fetch state, snapshot and sort mode belong
to one browser tab: callbacks rebuild a Tracker from that tab's dcc.Store with
load_tracker() and write tracker.to_dict() back.
"""

import logging
from typing import Optional

from data.errors import WalletError
from data.fetch import MarketDataFetcher
from data.machine import (
    FETCH_FIELDS, Event, EventType, TrackerState, TrackerStore, state_from_dict, state_to_dict,
)
from data.models import FetchState, MarketSnapshot, SortMode, WalletSession
from data.process import apply_sort
from data.wallet import ExtensionLookup, WalletSessionManager

logger = logging.getLogger(__name__)

# Keyword arguments for MarketDataFetcher (url, timeout, http); set by app.py.
FETCH_OPTIONS: dict = {}


def configure(**fetch_options) -> dict:
    FETCH_OPTIONS.clear()
    FETCH_OPTIONS.update(fetch_options)
    return FETCH_OPTIONS


def _no_extension():
    return None


class _StartOnly:
    """Fetch trigger that only publishes LOADING; the request runs later."""

    def __init__(self, fetcher: MarketDataFetcher):
        self.fetcher = fetcher

    def fetch(self):
        self.fetcher.start()


class Tracker:
    """
    One client's state: three read-only projections (session, fetch state +
    snapshot, sort mode) and three actions (connect, disconnect, set_sort_mode).
    No action raises; failures become state.

    Args:
        state:       Starting state; the initial (disconnected) state if omitted.
        lookup:      Wallet extension lookup.
        defer_fetch: If True, a successful connect only publishes LOADING and the
                     request is left to resolve_fetch(), so the page can render
                     LOADING before the response arrives.
        **fetch_options: Passed to MarketDataFetcher (url, timeout, http).
    """

    def __init__(
        self,
        state: Optional[TrackerState] = None,
        lookup: ExtensionLookup = _no_extension,
        defer_fetch: bool = False,
        **fetch_options,
    ):
        self.store = TrackerStore(state)
        self.fetcher = MarketDataFetcher(self.store, **fetch_options)
        trigger = _StartOnly(self.fetcher) if defer_fetch else self.fetcher
        self.wallet = WalletSessionManager(self.store, trigger, lookup)

    # ── Projections ───────────────────────────────────────────────────────────

    @property
    def state(self) -> TrackerState:
        return self.store.state

    @property
    def session(self) -> WalletSession:
        return self.state.session

    @property
    def fetch_state(self) -> FetchState:
        return self.state.fetch_state

    @property
    def snapshot(self) -> MarketSnapshot:
        return self.state.snapshot

    @property
    def sort_mode(self) -> SortMode:
        return self.state.sort_mode

    @property
    def notice(self) -> Optional[str]:
        return self.state.notice

    def visible_rows(self) -> MarketSnapshot:
        """Sorted snapshot, or nothing at all while no wallet is connected."""
        if not self.session.connected:
            return ()
        return apply_sort(self.sort_mode, self.snapshot)

    def to_dict(self) -> dict:
        return state_to_dict(self.state)

    def fetch_result(self) -> dict:
        """Only the fetch-owned keys of to_dict(), for patching a client store."""
        data = self.to_dict()
        return {key: data[key] for key in FETCH_FIELDS}

    # ── Actions ───────────────────────────────────────────────────────────────

    def connect(self, lookup: Optional[ExtensionLookup] = None) -> bool:
        """Connect the wallet (and start one fetch on success). Returns success."""
        try:
            self.wallet.connect(lookup)
        except WalletError as e:
            logger.info(f"Connect failed: {type(e).__name__}")
            return False
        return True

    def disconnect(self) -> None:
        self.wallet.disconnect()

    def set_sort_mode(self, mode) -> SortMode:
        self.store.dispatch(Event(EventType.SORT_CHANGE, {"mode": mode}))
        return self.sort_mode

    def resolve_fetch(self) -> FetchState:
        """Run the request of a fetch cycle started with defer_fetch=True."""
        return self.fetcher.resolve()


def load_tracker(data: Optional[dict]) -> Tracker:
    """Rebuild a client's Tracker from its dcc.Store data."""
    return Tracker(state_from_dict(data), defer_fetch=True, **FETCH_OPTIONS)
