"""
data/fetch.py
Market data fetcher: one CoinGecko /coins/markets request per fetch cycle.
Failures never raise; they are logged and recorded as the FAILED fetch state.
"""

import os
import logging
from typing import Optional

import requests
from dotenv import load_dotenv

from data.errors import FetchFailed
from data.machine import Event, EventType, TrackerStore
from data.models import CoinRecord, FetchState, MarketSnapshot

logger = logging.getLogger(__name__)

load_dotenv()  # loads MARKET_DATA_URL / MARKET_DATA_TIMEOUT from .env file

# ── Constants ──────────────────────────────────────────────────────────────────
MARKET_DATA_URL = os.getenv("MARKET_DATA_URL", "https://api.coingecko.com/api/v3/coins/markets")
VS_CURRENCY = "usd"


def _env_timeout() -> Optional[float]:
    raw = os.getenv("MARKET_DATA_TIMEOUT", "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric MARKET_DATA_TIMEOUT={raw!r}; requests will not time out.")
        return None


# Not applied by the fetcher itself; app.py passes it in as the outer timeout.
MARKET_DATA_TIMEOUT = _env_timeout()

# ── Payload validation ─────────────────────────────────────────────────────────

def parse_markets_payload(payload) -> MarketSnapshot:
    """
    Validate a decoded /coins/markets response and convert it to a snapshot.

    Args:
        payload: Decoded JSON body.

    Returns:
        Tuple of CoinRecord in response order.

    Raises:
        FetchFailed if the payload is not an array of coin objects.
    """
    if not isinstance(payload, list):
        # CoinGecko answers rate limits and bad requests with an object body
        raise FetchFailed(f"API response is not an array: {str(payload)[:200]}")
    try:
        return tuple(CoinRecord.from_api(item) for item in payload)
    except (TypeError, ValueError) as e:
        raise FetchFailed(f"Malformed coin record in API response: {e}") from e


# ── Fetcher ────────────────────────────────────────────────────────────────────

class MarketDataFetcher:
    """
    Runs fetch cycles against the market-data endpoint and publishes the result
    into a TrackerStore.

    Args:
        store:   Shared store; a private one is created if omitted.
        http:    Anything with a requests-compatible `get` (module or Session).
        url:     Endpoint URL.
        timeout: Seconds passed to `get`; None means wait indefinitely.
    """

    def __init__(
        self,
        store: Optional[TrackerStore] = None,
        http=requests,
        url: str = MARKET_DATA_URL,
        timeout: Optional[float] = None,
    ):
        self.store = store or TrackerStore()
        self.http = http
        self.url = url
        self.timeout = timeout
        self.last_error: Optional[FetchFailed] = None

    @property
    def state(self) -> FetchState:
        return self.store.state.fetch_state

    @property
    def snapshot(self) -> MarketSnapshot:
        return self.store.state.snapshot

    def fetch(self) -> FetchState:
        """
        Run one full fetch cycle: start() then resolve().
        Concurrent cycles are not deduplicated: whichever resolves last wins.
        """
        self.start()
        return self.resolve()

    def start(self) -> None:
        """Publish LOADING. Called before the request goes out."""
        self.store.dispatch(Event(EventType.FETCH_START))

    def resolve(self) -> FetchState:
        """
        Perform the request and publish READY or FAILED. Always reaches one of
        the two; never raises.
        """
        try:
            resp = self.http.get(self.url, params={"vs_currency": VS_CURRENCY}, timeout=self.timeout)
            if resp.status_code >= 400:
                # The body decides; CoinGecko error bodies are objects, not arrays
                logger.warning(f"Market data endpoint answered HTTP {resp.status_code}")
            snapshot = parse_markets_payload(resp.json())
        except FetchFailed as e:
            return self._fail(e)
        except (requests.RequestException, ValueError) as e:
            # ValueError covers JSON decode errors from resp.json()
            return self._fail(FetchFailed(f"Error fetching data: {e}"))
        except Exception as e:
            logger.exception("Unexpected error during market data fetch")
            return self._fail(FetchFailed(f"Unexpected error: {e}"))

        self.last_error = None
        self.store.dispatch(Event(EventType.FETCH_SUCCESS, {"snapshot": snapshot}))
        logger.info(f"Fetched {len(snapshot)} coins from {self.url}.")
        return FetchState.READY

    def _fail(self, error: FetchFailed) -> FetchState:
        self.last_error = error
        logger.error(f"Market data fetch failed: {error}")
        self.store.dispatch(Event(EventType.FETCH_FAIL, {"error": str(error)}))
        return FetchState.FAILED
