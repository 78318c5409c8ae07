"""
components/market_table.py
Market section: sort dropdown, coin table and the loading / failure status line.
"""

from __future__ import annotations

from dash import dcc, html

from data.errors import FetchFailed
from data.models import FetchState, MarketSnapshot, SortMode
from data.process import TABLE_COLUMNS, to_table_frame

HEADER_BLUE  = "#3b5998"
HEADER_GREEN = "#4CAF50"
HEADER_RED   = "#FF6347"
MUTED        = "#7a90b0"

HIDDEN = {"display": "none"}
SECTION_STYLE = {"display": "block"}

_CELL = {"border": "1px solid #ddd", "padding": "8px", "textAlign": "left"}
_TH   = {**_CELL, "fontWeight": "bold", "color": "#fff"}

# Header background per column
HEADER_COLORS = {
    "#":                HEADER_BLUE,
    "Name":             HEADER_BLUE,
    "Price (USD)":      HEADER_GREEN,
    "Market Cap (USD)": HEADER_RED,
    "Volume (USD)":     HEADER_BLUE,
}

SORT_OPTIONS = [
    {"label": "Price (Highest)",  "value": SortMode.PRICE.value},
    {"label": "Volume (Highest)", "value": SortMode.VOLUME.value},
]

LOADING_TEXT = "Loading crypto prices..."
FAILED_TEXT  = FetchFailed.notice


def build_market_section() -> html.Div:
    """Static market section; contents are filled in by market_view()."""
    return html.Div(id="market-section", style=HIDDEN, children=[
        html.Div(className="controls", children=[
            html.Label("Sort By: ", htmlFor="sort-option"),
            dcc.Dropdown(
                id="sort-option",
                options=SORT_OPTIONS,
                value=SortMode.PRICE.value,
                clearable=False,
                style={"width": "220px"},
            ),
        ]),
        dcc.Loading(type="circle", color=HEADER_GREEN, children=[
            html.Div(id="market-table"),
        ]),
        html.P(id="market-status", style={"color": MUTED}),
    ])


def make_table(rows: MarketSnapshot) -> html.Table:
    """
    Render the coin table for already-sorted rows.

    Args:
        rows: Records in display order.

    Returns:
        html.Table with one header row and one row per coin.
    """
    df = to_table_frame(rows)

    header = html.Thead(html.Tr([
        html.Th(col, style={**_TH, "backgroundColor": HEADER_COLORS[col]})
        for col in TABLE_COLUMNS
    ]))

    body = html.Tbody([
        html.Tr(key=row["id"], children=[
            html.Td(row[col], style=_price_cell(col)) for col in TABLE_COLUMNS
        ])
        for _, row in df.iterrows()
    ])

    return html.Table(
        style={"width": "100%", "borderCollapse": "collapse", "marginTop": "20px"},
        children=[header, body],
    )


def _price_cell(col: str) -> dict:
    if col == "Price (USD)":
        return {**_CELL, "backgroundColor": "#000", "color": "#fff"}
    return _CELL


def status_text(fetch_state: FetchState, has_rows: bool) -> str:
    if fetch_state is FetchState.LOADING:
        return LOADING_TEXT
    if fetch_state is FetchState.FAILED and not has_rows:
        return FAILED_TEXT
    return ""


def market_view(connected: bool, fetch_state: FetchState, rows: MarketSnapshot) -> dict:
    """
    Property values for the market section.
    Nothing is shown unless a wallet is connected, whatever the fetch did.
    """
    if not connected:
        return {
            ("market-section", "style"):    HIDDEN,
            ("market-table",   "children"): None,
            ("market-status",  "children"): "",
        }

    show_table = fetch_state is not FetchState.LOADING and len(rows) > 0
    return {
        ("market-section", "style"):    SECTION_STYLE,
        ("market-table",   "children"): make_table(rows) if show_table else None,
        ("market-status",  "children"): status_text(fetch_state, bool(rows)),
    }

