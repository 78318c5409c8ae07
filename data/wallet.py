"""
data/wallet.py
Wallet session manager. Wraps the browser wallet extension (ArConnect's
window.arweaveWallet) behind a small protocol so the connect flow can run
server-side on whatever the browser reported.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional, Protocol

from data.errors import ExtensionUnavailable, NoActiveAddress, WalletError, WalletRejected
from data.machine import Event, EventType, TrackerStore
from data.models import WalletSession

logger = logging.getLogger(__name__)

ACCESS_PERMISSIONS = ("ACCESS_ADDRESS",)


class WalletExtension(Protocol):
    def connect(self, permissions: Iterable[str]) -> None: ...

    def get_active_address(self) -> Optional[str]: ...


# Returns the extension if it is present in the environment, else None.
ExtensionLookup = Callable[[], Optional[WalletExtension]]


class FetchTrigger(Protocol):
    def fetch(self): ...


# ── Browser bridge ─────────────────────────────────────────────────────────────

class ReportedWallet:
    """
    WalletExtension built from what the clientside callback saw in the browser:
    {"available": bool, "address": str | None, "error": str | None}.
    """

    def __init__(self, report: dict):
        self.report = report or {}

    @classmethod
    def lookup_for(cls, report: Optional[dict]) -> ExtensionLookup:
        """Extension lookup that yields None when the browser had no extension."""
        def lookup():
            if not report or not report.get("available"):
                return None
            return cls(report)
        return lookup

    def connect(self, permissions: Iterable[str]) -> None:
        error = self.report.get("error")
        if error:
            raise RuntimeError(error)

    def get_active_address(self) -> Optional[str]:
        return self.report.get("address")


# ── Session manager ────────────────────────────────────────────────────────────

class WalletSessionManager:
    """
    Owns the connect/disconnect transitions of the wallet session. A successful
    connect calls `fetcher.fetch()` exactly once.
    """

    def __init__(self, store: TrackerStore, fetcher: FetchTrigger, lookup: ExtensionLookup):
        self.store = store
        self.fetcher = fetcher
        self.lookup = lookup

    @property
    def session(self) -> WalletSession:
        return self.store.state.session

    def connect(self, lookup: Optional[ExtensionLookup] = None) -> WalletSession:
        """
        Request address access from the extension and record the active address.

        Args:
            lookup: Overrides the manager's extension lookup for this call.

        Raises:
            ExtensionUnavailable: no extension; session left unchanged.
            NoActiveAddress:      extension gave no address; session reset.
            WalletRejected:       extension raised; session reset.
        """
        extension = (lookup or self.lookup)()
        if extension is None:
            logger.warning("Wallet extension is not installed or enabled.")
            raise self._fail(ExtensionUnavailable(), reset=False)

        try:
            extension.connect(list(ACCESS_PERMISSIONS))
            address = extension.get_active_address()
        except Exception as e:
            logger.error(f"Failed to connect wallet: {e}")
            raise self._fail(WalletRejected(str(e)), reset=True) from e

        if not address:
            logger.error("Wallet returned no active address.")
            raise self._fail(NoActiveAddress(), reset=True)

        self.store.dispatch(Event(EventType.CONNECT_SUCCESS, {"address": address}))
        logger.info(f"Wallet connected: {self.session.short_address}")
        self.fetcher.fetch()
        return self.session

    def _fail(self, error: WalletError, reset: bool) -> WalletError:
        """Record the failed connect attempt and hand back the error to raise."""
        self.store.dispatch(Event(EventType.CONNECT_FAIL, {"notice": error.notice, "reset": reset}))
        return error

    def disconnect(self) -> WalletSession:
        """Client-side reset only; an in-flight fetch keeps running."""
        self.store.dispatch(Event(EventType.DISCONNECT))
        logger.info("Wallet disconnected.")
        return self.session
