"""
data/models.py
Plain value types shared by the wallet, fetch and sort layers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SortMode(str, Enum):
    PRICE = "price"
    VOLUME = "volume"

    @classmethod
    def parse(cls, value) -> "SortMode":
        """Accept a SortMode or its string value (as sent by the dropdown)."""
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


class FetchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class WalletSession:
    """Connection status of the browser wallet. Connected iff address is set."""

    address: str = ""
    connected: bool = False

    def __post_init__(self):
        if self.connected != bool(self.address):
            raise ValueError("connected must be True exactly when address is non-empty")

    @classmethod
    def disconnected(cls) -> "WalletSession":
        return cls()

    @classmethod
    def connected_as(cls, address: str) -> "WalletSession":
        return cls(address=address, connected=True)

    @property
    def short_address(self) -> str:
        if len(self.address) <= 12:
            return self.address
        return f"{self.address[:6]}…{self.address[-4:]}"


def _to_number(value) -> Optional[float]:
    if value is None:
        return None
    return float(value)


@dataclass(frozen=True)
class CoinRecord:
    id: str
    name: str
    current_price: Optional[float]
    market_cap: Optional[float]
    total_volume: Optional[float]

    @classmethod
    def from_api(cls, obj: dict) -> "CoinRecord":
        """
        Build a record from one CoinGecko /coins/markets object.
        Extra keys are ignored; JSON nulls in numeric fields are kept as None.

        Raises:
            TypeError / ValueError if the object is not record-shaped.
        """
        if not isinstance(obj, dict):
            raise TypeError(f"expected an object, got {type(obj).__name__}")
        coin_id = obj.get("id")
        if not coin_id:
            raise ValueError("coin record is missing 'id'")
        return cls(
            id=str(coin_id),
            name=str(obj.get("name") or coin_id),
            current_price=_to_number(obj.get("current_price")),
            market_cap=_to_number(obj.get("market_cap")),
            total_volume=_to_number(obj.get("total_volume")),
        )


# API response order is preserved; sorting always produces a new tuple.
MarketSnapshot = tuple[CoinRecord, ...]
