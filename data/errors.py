"""
data/errors.py
Failure taxonomy. Wallet errors surface as a user-facing notice; fetch errors
are logged and turned into the FAILED fetch state.
"""


class TrackerError(Exception):
    """Base class for every recoverable tracker failure."""


# ── Wallet ─────────────────────────────────────────────────────────────────────

class WalletError(TrackerError):
    notice = "Failed to connect wallet. Please try again."


class ExtensionUnavailable(WalletError):
    notice = "ArConnect extension is not installed or enabled."


class NoActiveAddress(WalletError):
    notice = "Failed to get an active address from the wallet. Please try again."


class WalletRejected(WalletError):
    """The extension itself raised during connect (e.g. permission denied)."""


# ── Market data ────────────────────────────────────────────────────────────────

class FetchFailed(TrackerError):
    notice = "Unable to load market data."
