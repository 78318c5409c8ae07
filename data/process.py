"""
data/process.py
Sorting and table preparation for the market snapshot.
Everything here is pure: inputs are never mutated.
"""

from typing import Iterable, Optional

import pandas as pd

from data.models import CoinRecord, MarketSnapshot, SortMode

# ── Sorting ────────────────────────────────────────────────────────────────────

# Record attribute each sort mode orders by (always highest first)
SORT_FIELDS: dict[SortMode, str] = {
    SortMode.PRICE:  "current_price",
    SortMode.VOLUME: "total_volume",
}


def sort_key(mode: SortMode, record: CoinRecord) -> float:
    """Numeric key for `record` under `mode`. Missing values count as 0."""
    value = getattr(record, SORT_FIELDS[mode])
    return value if value is not None else 0.0


def apply_sort(mode, snapshot: Iterable[CoinRecord]) -> MarketSnapshot:
    """
    Return a new snapshot ordered by `mode`, highest first.

    Ties keep their input order: sorted() is stable, including with reverse=True.

    Args:
        mode:     SortMode or its string value ("price" / "volume").
        snapshot: Records in their current order.

    Returns:
        New tuple of the same records.
    """
    mode = SortMode.parse(mode)
    return tuple(sorted(snapshot, key=lambda r: sort_key(mode, r), reverse=True))


# ── Display ────────────────────────────────────────────────────────────────────

TABLE_COLUMNS = ["#", "Name", "Price (USD)", "Market Cap (USD)", "Volume (USD)"]


def format_usd(value: Optional[float]) -> str:
    """
    Format a dollar amount the way en-US currency formatting does.

    Examples:
        50000      → "$50,000.00"
        1234.567   → "$1,234.57"
        -2.5       → "-$2.50"
        None       → "—"
    """
    if value is None or pd.isna(value):
        return "—"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def to_table_frame(snapshot: MarketSnapshot) -> pd.DataFrame:
    """
    Build the display table for `snapshot`, one row per coin in snapshot order.

    Returns:
        DataFrame with TABLE_COLUMNS plus an "id" column used as the row key.
    """
    if not snapshot:
        return pd.DataFrame(columns=["id", *TABLE_COLUMNS])

    df = pd.DataFrame([
        {
            "id": r.id,
            "Name": r.name,
            "current_price": r.current_price,
            "market_cap": r.market_cap,
            "total_volume": r.total_volume,
        }
        for r in snapshot
    ])
    df.insert(1, "#", range(1, len(df) + 1))
    df["Price (USD)"]      = df["current_price"].apply(format_usd)
    df["Market Cap (USD)"] = df["market_cap"].apply(format_usd)
    df["Volume (USD)"]     = df["total_volume"].apply(format_usd)
    return df[["id", *TABLE_COLUMNS]]
