# tests/conftest.py
import copy
from unittest.mock import MagicMock

import httpx
import pytest
import requests
from fastapi.testclient import TestClient

import main
from config import Settings, get_settings

STOCK_DOCS = {
    "overview": {"Symbol": "AAPL", "Name": "Apple Inc", "Beta": "1.24", "EPS": "6.57", "50DayMovingAverage": "215.3"},
    "income_statement": {
        "symbol": "AAPL",
        "quarterlyReports": [
            {"fiscalDateEnding": "2024-06-30", "totalRevenue": "85777000000"},
            {"fiscalDateEnding": "2024-03-31", "totalRevenue": "90753000000"},
        ],
    },
    "news_sentiment": {
        "items": "3",
        "feed": [
            {"title": "Apple beats", "overall_sentiment_score": 0.3},
            {"title": "Apple flat", "overall_sentiment_score": 0.1},
            {"title": "Apple unscored"},
        ],
    },
    "quote": {"c": 227.52, "d": 1.1, "dp": 0.49, "h": 228.3, "l": 225.1, "o": 226.0, "pc": 226.42, "v": 12000000},
    "recommendations": [
        {"period": "2024-07-01", "buy": 24, "hold": 7, "sell": 1, "strongBuy": 12, "strongSell": 0},
        {"period": "2024-06-01", "buy": 22, "hold": 8, "sell": 1, "strongBuy": 11, "strongSell": 0},
    ],
    "candles": {"s": "ok", "t": [1719792000, 1719878400], "o": [216.7, 218.9], "h": [219.3, 221.0],
                "l": [215.5, 218.1], "c": [218.9, 220.3], "v": [60402900, 58046200]},
}

AV_FUNCTIONS = {
    "OVERVIEW": "overview",
    "INCOME_STATEMENT": "income_statement",
    "NEWS_SENTIMENT": "news_sentiment",
}

FINNHUB_PATHS = {
    "/api/v1/quote": "quote",
    "/api/v1/stock/recommendation": "recommendations",
    "/api/v1/stock/candle": "candles",
}


def make_settings(**overrides) -> Settings:
    values = {"alpha_vantage_api_key": "av-test-key", "finnhub_api_key": "fh-test-key"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeUpstream:
    """
    httpx MockTransport handler standing in for both providers.

    `failures` maps a source name to "transport", "status" or "parse".
    """

    def __init__(self, docs=None, failures=None):
        self.docs = copy.deepcopy(STOCK_DOCS)
        self.docs.update(docs or {})
        self.failures = failures or {}
        self.calls = []

    def source_for(self, request: httpx.Request) -> str:
        if request.url.path in FINNHUB_PATHS:
            return FINNHUB_PATHS[request.url.path]
        return AV_FUNCTIONS[request.url.params["function"]]

    def handler(self, request: httpx.Request) -> httpx.Response:
        source = self.source_for(request)
        self.calls.append((source, request))
        failure = self.failures.get(source)
        if failure == "transport":
            raise httpx.ConnectError("connection refused", request=request)
        if failure == "status":
            return httpx.Response(503, json={"error": "service unavailable"})
        if failure == "parse":
            return httpx.Response(200, content=b"<html>rate limited</html>")
        return httpx.Response(200, json=self.docs[source])

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def requested(self, source: str) -> httpx.Request:
        return next(req for src, req in self.calls if src == source)


def make_session(payload=None, status_code=200, json_error=None, get_error=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    session = MagicMock(spec=requests.Session)
    if get_error is not None:
        session.get.side_effect = get_error
    else:
        session.get.return_value = response
    return session


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def session():
    return make_session(payload={"metadata": "Top gainers, losers, and most actively traded US tickers"})


@pytest.fixture
def api(settings, upstream, session):
    async def fake_http_client():
        async with upstream.client() as client:
            yield client

    main.app.dependency_overrides[get_settings] = lambda: settings
    main.app.dependency_overrides[main.get_http_client] = fake_http_client
    main.app.dependency_overrides[main.get_requests_session] = lambda: session
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()
