# backend/providers.py
"""
Transport for the two upstream providers (Alpha Vantage, Finnhub).

Nothing here shapes the documents: each function returns the parsed JSON body
exactly as received, or raises UpstreamFailure naming the resource that failed.
The market snapshot is a single blocking call through a requests session; the
per-symbol documents are fetched concurrently with an httpx.AsyncClient.
"""

import asyncio
import time
from typing import Any, NamedTuple, Optional

import httpx
import requests

from config import Settings
from errors import UpstreamFailure
from logger import setup_logger

logger = setup_logger(__name__)

ONE_YEAR_SECONDS = 31_536_000


class StockSources(NamedTuple):
    """One slot per upstream resource of the per-symbol bundle."""
    overview: Any
    income_statement: Any
    news_sentiment: Any
    quote: Any
    recommendations: Any
    candles: Any


# ---- Alpha Vantage market snapshot (blocking) ----
def fetch_market_movers(session: requests.Session, settings: Settings, api_key: str) -> Any:
    source = "top_gainers_losers"
    params = {"function": "TOP_GAINERS_LOSERS", "apikey": api_key}
    try:
        resp = session.get(settings.alpha_vantage_base, params=params)
    except requests.RequestException as e:
        raise UpstreamFailure(f"{source} request failed", source=source, cause=e) from e
    if not resp.ok:
        raise UpstreamFailure(f"{source} returned {resp.status_code}", source=source)
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamFailure(f"{source} body could not be parsed", source=source, cause=e) from e


# ---- per-symbol bundle (concurrent) ----
def build_stock_requests(client: httpx.AsyncClient, settings: Settings, symbol: str,
                         alpha_key: str, finnhub_key: str, now: Optional[float] = None) -> StockSources:
    to_ts = int(time.time() if now is None else now)
    from_ts = to_ts - ONE_YEAR_SECONDS
    av = settings.alpha_vantage_base
    fh = settings.finnhub_base.rstrip("/")
    return StockSources(
        overview=client.build_request("GET", av, params={"function": "OVERVIEW", "symbol": symbol, "apikey": alpha_key}),
        income_statement=client.build_request("GET", av, params={"function": "INCOME_STATEMENT", "symbol": symbol, "apikey": alpha_key}),
        news_sentiment=client.build_request("GET", av, params={"function": "NEWS_SENTIMENT", "tickers": symbol, "apikey": alpha_key}),
        quote=client.build_request("GET", f"{fh}/quote", params={"symbol": symbol, "token": finnhub_key}),
        recommendations=client.build_request("GET", f"{fh}/stock/recommendation", params={"symbol": symbol, "token": finnhub_key}),
        candles=client.build_request("GET", f"{fh}/stock/candle", params={
            "symbol": symbol, "resolution": "D", "from": from_ts, "to": to_ts, "token": finnhub_key,
        }),
    )


async def _send(client: httpx.AsyncClient, source: str, request: httpx.Request) -> httpx.Response:
    try:
        response = await client.send(request, stream=True)
    except httpx.HTTPError as e:
        raise UpstreamFailure(f"{source} request failed", source=source, cause=e) from e
    if not response.is_success:
        await response.aclose()
        cause = httpx.HTTPStatusError(f"HTTP {response.status_code}", request=request, response=response)
        raise UpstreamFailure(f"{source} returned {response.status_code}", source=source, cause=cause)
    return response


async def _read_json(source: str, response: httpx.Response) -> Any:
    try:
        await response.aread()
        return response.json()
    except (httpx.HTTPError, ValueError) as e:
        raise UpstreamFailure(f"{source} body could not be parsed", source=source, cause=e) from e


def _first_upstream_failure(group: BaseExceptionGroup) -> Optional[UpstreamFailure]:
    for exc in group.exceptions:
        if isinstance(exc, UpstreamFailure):
            return exc
    return None


async def _close_all(responses):
    for response in responses:
        await response.aclose()


async def fetch_stock_sources(client: httpx.AsyncClient, settings: Settings, symbol: str,
                              alpha_key: str, finnhub_key: str, now: Optional[float] = None) -> StockSources:
    """
    Fetch all six per-symbol documents, all or nothing.

    Phase one waits for every transport response (status and headers), phase
    two reads and parses every body. A failure in either phase cancels the
    sibling tasks and surfaces as a single UpstreamFailure.
    """
    reqs = build_stock_requests(client, settings, symbol, alpha_key, finnhub_key, now=now)
    logger.info(f"Fetching {len(reqs)} upstream documents for {symbol}")

    sent = {}
    try:
        async with asyncio.TaskGroup() as tg:
            for source, request in zip(StockSources._fields, reqs):
                sent[source] = tg.create_task(_send(client, source, request))
    except BaseExceptionGroup as group:
        await _close_all(t.result() for t in sent.values()
                         if t.done() and not t.cancelled() and t.exception() is None)
        failure = _first_upstream_failure(group)
        if failure is None:
            raise
        raise failure
    responses = StockSources(*(sent[source].result() for source in StockSources._fields))

    try:
        async with asyncio.TaskGroup() as tg:
            parsed = [tg.create_task(_read_json(source, response))
                      for source, response in zip(StockSources._fields, responses)]
    except BaseExceptionGroup as group:
        failure = _first_upstream_failure(group)
        if failure is None:
            raise
        raise failure
    finally:
        await _close_all(responses)

    return StockSources(*(t.result() for t in parsed))
