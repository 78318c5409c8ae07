"""Shared fixtures: sample coins, a fake HTTP client and a fake wallet extension."""

import pytest

from data.machine import TrackerStore
from data.models import CoinRecord


def coin(coin_id, price, volume, cap=0.0, name=None):
    return CoinRecord(id=coin_id, name=name or coin_id.title(), current_price=price,
                      market_cap=cap, total_volume=volume)


BTC_JSON = {"id": "btc", "current_price": 50000, "total_volume": 1e9,
            "market_cap": 1e12, "name": "Bitcoin"}


class FakeResponse:
    def __init__(self, payload=None, status=200, json_error=None):
        self.payload = payload
        self.status_code = status
        self.json_error = json_error

    def json(self):
        if self.json_error:
            raise self.json_error
        return self.payload


class FakeHttp:
    """requests-compatible `get` that replays queued responses or exceptions."""

    def __init__(self, *results, on_get=None):
        self.results = list(results)
        self.calls = []
        self.on_get = on_get

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.on_get:
            self.on_get()
        result = self.results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


class FakeWallet:
    def __init__(self, address="abc", error=None):
        self.address = address
        self.error = error
        self.permissions = None

    def connect(self, permissions):
        self.permissions = list(permissions)
        if self.error:
            raise self.error

    def get_active_address(self):
        return self.address


class CountingFetcher:
    def __init__(self):
        self.calls = 0

    def fetch(self):
        self.calls += 1


@pytest.fixture
def store():
    return TrackerStore()


@pytest.fixture
def snapshot():
    return (
        coin("eth", 3000.0, 5e8),
        coin("btc", 50000.0, 1e9),
        coin("doge", 0.1, 5e8),
        coin("sol", 3000.0, 2e8),
    )
