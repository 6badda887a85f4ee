# backend/models.py
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class MoversResponse(BaseModel):
    topGainers: List[Any] = Field(default_factory=list, description="Top gainers, at most 20, upstream order")
    mostActive: List[Any] = Field(default_factory=list, description="Most actively traded, at most 20, upstream order")


class Flags(BaseModel):
    isUnusualVolume: bool = Field(description="Current volume above 10,000,000 shares")


class StockBundle(BaseModel):
    overview: Any = Field(default=None, description="Company overview as returned upstream")
    incomeStatement: Any = Field(default_factory=dict, description="Most recent quarterly report")
    news: List[Any] = Field(default_factory=list, description="News sentiment feed")
    avgNewsSentiment: Optional[str] = Field(default=None, description="Mean sentiment score, 2 decimals; null without news")
    quote: Any = Field(default=None, description="Real-time quote as returned upstream")
    recommendations: Any = Field(default_factory=dict, description="Most recent analyst recommendation")
    chartData: Any = Field(default=None, description="One year of daily candles as returned upstream")
    flags: Flags
