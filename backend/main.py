# backend/main.py
from typing import AsyncIterator, Iterator, Optional

import httpx
import requests
import uvicorn
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

import aggregation
from config import Settings, get_settings
from errors import LanzaBullsError, lanza_bulls_error_handler
from logger import setup_logger
from models import MoversResponse, StockBundle

logger = setup_logger(__name__)

app = FastAPI(title="LANZA BULLS backend")

origins = get_settings().cors_origins
app.add_middleware(CORSMiddleware, allow_origins=origins, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])
app.add_exception_handler(LanzaBullsError, lanza_bulls_error_handler)


def get_requests_session() -> Iterator[requests.Session]:
    with requests.Session() as session:
        yield session


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=None) as client:
        yield client


@app.get("/health")
def health(): return {"status": "ok"}

@app.get("/market-movers", response_model=MoversResponse)
def market_movers(settings: Settings = Depends(get_settings),
                  session: requests.Session = Depends(get_requests_session)):
    return aggregation.get_market_movers(settings, session)

@app.get("/stock-data", response_model=StockBundle)
async def stock_data(symbol: Optional[str] = None,
                     settings: Settings = Depends(get_settings),
                     client: httpx.AsyncClient = Depends(get_http_client)):
    return await aggregation.get_stock_bundle(symbol, settings, client)


def run():
    settings = get_settings()
    for name in (__name__, "aggregation", "providers"):
        setup_logger(name, settings.log_level)
    logger.info(f"LANZA BULLS server listening on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
