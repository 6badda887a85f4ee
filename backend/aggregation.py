# backend/aggregation.py
"""
The two request handlers behind the HTTP routes.

`build_*` functions are pure: they turn already-fetched documents into the
response payload. `get_*` functions check preconditions, fetch, and build.
"""

from typing import Any, Dict, Optional

import httpx
import requests

import normalize
import providers
from config import Settings
from errors import ClientInputError, UpstreamFailure
from logger import setup_logger

logger = setup_logger(__name__)


def build_market_movers(data: Any) -> Dict[str, Any]:
    return {
        "topGainers": normalize.movers_list(data, "top_gainers"),
        "mostActive": normalize.movers_list(data, "most_actively_traded"),
    }


def build_stock_bundle(sources: providers.StockSources) -> Dict[str, Any]:
    feed = normalize.news_feed(sources.news_sentiment)
    return {
        "overview": sources.overview,
        "incomeStatement": normalize.income_statement(sources.income_statement),
        "news": feed,
        "avgNewsSentiment": normalize.average_sentiment(feed),
        "quote": sources.quote,
        "recommendations": normalize.recommendations(sources.recommendations),
        "chartData": sources.candles,
        "flags": {
            "isUnusualVolume": normalize.is_unusual_volume(sources.quote),
        },
    }


def get_market_movers(settings: Settings, session: requests.Session) -> Dict[str, Any]:
    api_key = settings.require_alpha_vantage_key()
    try:
        data = providers.fetch_market_movers(session, settings, api_key)
    except UpstreamFailure as e:
        logger.error(f"Error fetching market movers: {e.detail}")
        raise UpstreamFailure("Failed to fetch market movers", source=e.source, cause=e.cause) from e
    return build_market_movers(data)


async def get_stock_bundle(symbol: Optional[str], settings: Settings, client: httpx.AsyncClient,
                           now: Optional[float] = None) -> Dict[str, Any]:
    symbol = (symbol or "").strip()
    if not symbol:
        raise ClientInputError("Missing stock symbol")
    alpha_key, finnhub_key = settings.require_all_keys()

    try:
        sources = await providers.fetch_stock_sources(client, settings, symbol, alpha_key, finnhub_key, now=now)
    except UpstreamFailure as e:
        logger.error(f"Error fetching stock data for {symbol}: {e.detail}")
        raise UpstreamFailure("Failed to fetch stock data", source=e.source, cause=e.cause) from e
    return build_stock_bundle(sources)
