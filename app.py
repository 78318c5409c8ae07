"""
app.py — Crypto Price Tracker
Entry point. Initializes Dash, configures fetch settings, defines layout,
wires callbacks. Keep this file thin — state logic lives in data/, widgets in
components/.

Each browser tab keeps its own tracker state in dcc.Store "store-tracker".
Callbacks chain as: user action → store-tracker (+ fetch request) →
fetch → store-tracker patch → view.
"""

import os
import uuid
import logging

from dash import Dash, dcc, html, Input, Output, State, Patch, callback, ctx, no_update
from dotenv import load_dotenv

from data.fetch import MARKET_DATA_TIMEOUT, MARKET_DATA_URL
from data.machine import TrackerState, state_to_dict
from data.wallet import ReportedWallet
import data.state as _state  # shared runtime settings (avoids circular imports)

load_dotenv()
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

# ── Configuration ──────────────────────────────────────────────────────────────
HOST  = os.getenv("DASH_HOST", "127.0.0.1")
PORT  = int(os.getenv("DASH_PORT", "8050"))
DEBUG = os.getenv("DASH_DEBUG", "false").lower() in ("1", "true", "yes")

# ── Populate shared settings (BEFORE importing components) ────────────────────
_state.configure(url=MARKET_DATA_URL, timeout=MARKET_DATA_TIMEOUT)

# ── Component modules (importing registers their callbacks with Dash) ─────────
from components.wallet import build_wallet_panel, wallet_view              # noqa: E402
from components.market_table import build_market_section, market_view      # noqa: E402

# ══════════════════════════════════════════════════════════════════════════════
# APP
# ══════════════════════════════════════════════════════════════════════════════

app = Dash(
    __name__,
    title="Crypto Price Tracker",
    suppress_callback_exceptions=True,
)

# ══════════════════════════════════════════════════════════════════════════════
# LAYOUT
# ══════════════════════════════════════════════════════════════════════════════

TITLE_STYLE = {"textAlign": "center", "marginBottom": "20px",
               "backgroundColor": "#4CAF50", "color": "#fff"}
INTRO_STYLE = {"fontSize": "18px", "color": "#555", "maxWidth": "600px",
               "margin": "0 auto", "textAlign": "center", "marginBottom": "20px"}

app.layout = html.Main(id="app-wrapper", style={"padding": "20px", "fontFamily": "'Arial', sans-serif"}, children=[
    html.H1("Crypto Price Tracker", style=TITLE_STYLE),
    html.P(
        "Welcome to Crypto Price Tracker. Track real-time prices and sort "
        "cryptocurrency data based on your preferences!",
        style=INTRO_STYLE,
    ),
    build_wallet_panel(),
    build_market_section(),

    # ── Per-tab state ─────────────────────────────────────────────
    dcc.Store(id="store-tracker", data=state_to_dict(TrackerState())),
    dcc.Store(id="store-fetch-request"),
])

# ══════════════════════════════════════════════════════════════════════════════
# CALLBACKS
# ══════════════════════════════════════════════════════════════════════════════

# Every property the view callback writes, in output order
VIEW_OUTPUTS = [
    ("connect-button", "style"),
    ("connected-box",  "style"),
    ("wallet-address", "children"),
    ("wallet-notice",  "children"),
    ("login-alert",    "style"),
    ("market-section", "style"),
    ("market-table",   "children"),
    ("market-status",  "children"),
]


def handle_action(tracker, trigger, wallet_report, sort_value) -> bool:
    """
    Apply the user action identified by `trigger` to the tracker.

    Returns:
        True when a connect succeeded and a fetch cycle is waiting to run.
    """
    if trigger == "store-wallet-report" and wallet_report:
        return tracker.connect(ReportedWallet.lookup_for(wallet_report))
    if trigger == "disconnect-button":
        tracker.disconnect()
    elif trigger == "sort-option" and sort_value:
        tracker.set_sort_mode(sort_value)
    return False


def resolve_fetch(tracker_data: dict) -> dict:
    """Run a started fetch cycle for one client; returns the fetch-owned keys."""
    tracker = _state.load_tracker(tracker_data)
    tracker.resolve_fetch()
    return tracker.fetch_result()


def render_view(tracker) -> tuple:
    """Project the tracker's current state onto VIEW_OUTPUTS."""
    values = {
        **wallet_view(tracker.session, tracker.notice),
        **market_view(tracker.session.connected, tracker.fetch_state, tracker.visible_rows()),
    }
    return tuple(values[key] for key in VIEW_OUTPUTS)


@callback(
    Output("store-tracker",       "data"),
    Output("store-fetch-request", "data"),
    Input("store-wallet-report",  "data"),
    Input("disconnect-button",    "n_clicks"),
    Input("sort-option",          "value"),
    State("store-tracker",        "data"),
    prevent_initial_call=True,
)
def apply_action(wallet_report, _disconnect_clicks, sort_value, tracker_data):
    """Route connect / disconnect / sort into this tab's tracker state."""
    tracker = _state.load_tracker(tracker_data)
    fetch_pending = handle_action(tracker, ctx.triggered_id, wallet_report, sort_value)
    request = {"nonce": uuid.uuid4().hex} if fetch_pending else no_update
    return tracker.to_dict(), request


@callback(
    Output("store-tracker", "data", allow_duplicate=True),
    Input("store-fetch-request", "data"),
    State("store-tracker", "data"),
    prevent_initial_call=True,
)
def run_fetch(_request, tracker_data):
    """
    Resolve the fetch cycle a connect started. Only the fetch-owned keys are
    patched, so a disconnect or sort change made meanwhile is kept; whichever
    fetch resolves last writes the snapshot.
    """
    patch = Patch()
    for key, value in resolve_fetch(tracker_data).items():
        patch[key] = value
    return patch


@callback(
    *[Output(cid, prop) for cid, prop in VIEW_OUTPUTS],
    Input("store-tracker", "data"),
)
def update_view(tracker_data):
    """Re-render the page from this tab's tracker state."""
    return render_view(_state.load_tracker(tracker_data))


# ══════════════════════════════════════════════════════════════════════════════
# ENTRY POINT
# ══════════════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    logger.info(f"Market data endpoint: {MARKET_DATA_URL}")
    app.run(debug=DEBUG, host=HOST, port=PORT)
