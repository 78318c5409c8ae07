"""
components/wallet.py
Wallet controls: connect / disconnect buttons, the connected-address line, the
login alert, and the clientside bridge to the ArConnect browser extension.
"""

from __future__ import annotations

from dash import clientside_callback, dcc, html, Input, Output

from data.models import WalletSession

BLUE     = "#0070f3"
TOMATO   = "#FF6347"
ALERT_BG = "#ffcccc"
ALERT_FG = "#d8000c"

HIDDEN = {"display": "none"}

_BUTTON = {
    "padding": "10px 20px",
    "fontSize": "16px",
    "color": "#fff",
    "border": "none",
    "borderRadius": "5px",
    "cursor": "pointer",
}

CONNECT_BUTTON_STYLE    = {**_BUTTON, "backgroundColor": BLUE}
DISCONNECT_BUTTON_STYLE = {**_BUTTON, "backgroundColor": TOMATO}
CONNECTED_BOX_STYLE     = {"textAlign": "center", "marginTop": "10px"}
ALERT_STYLE = {
    "textAlign": "center",
    "marginTop": "20px",
    "padding": "10px",
    "backgroundColor": ALERT_BG,
    "color": ALERT_FG,
    "borderRadius": "5px",
}

LOGIN_REQUIRED = (
    "You must log in to your Arweave wallet first to view the latest prices "
    "and crypto volume."
)

# ── Browser bridge ─────────────────────────────────────────────────────────────

# Runs in the browser: asks window.arweaveWallet for address access and reports
# what happened. The server side turns the report into a data.wallet.ReportedWallet.
CONNECT_WALLET_JS = """
async function(n_clicks) {
    if (!n_clicks) {
        return window.dash_clientside.no_update;
    }
    const wallet = window.arweaveWallet;
    if (!wallet) {
        return {available: false, address: null, error: null, nonce: n_clicks};
    }
    try {
        await wallet.connect(["ACCESS_ADDRESS"]);
        const address = await wallet.getActiveAddress();
        return {available: true, address: address || null, error: null, nonce: n_clicks};
    } catch (e) {
        return {available: true, address: null, error: String(e), nonce: n_clicks};
    }
}
"""

clientside_callback(
    CONNECT_WALLET_JS,
    Output("store-wallet-report", "data"),
    Input("connect-button", "n_clicks"),
    prevent_initial_call=True,
)

# ── Layout ─────────────────────────────────────────────────────────────────────


def build_wallet_panel() -> html.Div:
    """Static wallet controls; visibility is driven by wallet_view()."""
    return html.Div(id="wallet-panel", className="controls", children=[
        html.Button("Connect Arweave Wallet", id="connect-button", n_clicks=0,
                    style=CONNECT_BUTTON_STYLE),
        html.Div(id="connected-box", style=HIDDEN, children=[
            html.P(id="wallet-address"),
            html.Button("Disconnect Arweave Wallet", id="disconnect-button", n_clicks=0,
                        style=DISCONNECT_BUTTON_STYLE),
        ]),
        html.Div(id="wallet-notice", className="wallet-notice", style={"color": ALERT_FG}),
        html.Div(id="login-alert", style=ALERT_STYLE,
                 children=html.P(html.Strong(LOGIN_REQUIRED))),
        dcc.Store(id="store-wallet-report"),
    ])


def wallet_view(session: WalletSession, notice: str | None) -> dict:
    """
    Property values for the wallet controls in the given session.

    Returns:
        Dict keyed by (component id, property).
    """
    connected = session.connected
    return {
        ("connect-button", "style"): HIDDEN if connected else CONNECT_BUTTON_STYLE,
        ("connected-box",  "style"): CONNECTED_BOX_STYLE if connected else HIDDEN,
        ("wallet-address", "children"): (
            f"Your Arweave wallet is connected: {session.short_address}" if connected else ""
        ),
        ("wallet-notice",  "children"): notice or "",
        ("login-alert",    "style"): HIDDEN if connected else ALERT_STYLE,
    }
