"""
Market data models returned by the data provider.

The provider speaks camelCase JSON; fields are exposed in snake_case.
Every field except ``symbol`` is optional because coverage differs per
instrument (indices have no P/E, coins have no employees).
"""
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


# Large figures arrive either as raw numbers or pre-formatted strings ("2.9T")
Figure = Union[float, str]


class _ProviderModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Quote(_ProviderModel):
    """Price and valuation snapshot for one symbol"""
    symbol: str
    price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None
    volume: Optional[Figure] = None
    avg_volume: Optional[Figure] = None
    market_cap: Optional[Figure] = None

    # Valuation
    pe: Optional[float] = None
    forward_pe: Optional[float] = Field(None, alias="forwardPE")
    ps: Optional[float] = None
    pb: Optional[float] = None
    peg_ratio: Optional[float] = None
    target_low: Optional[float] = None
    target_high: Optional[float] = None
    recommendation: Optional[str] = None
    enterprise_value: Optional[Figure] = None

    # Financials
    revenue: Optional[Figure] = None
    net_income: Optional[Figure] = None
    gross_margin: Optional[float] = None
    operating_margin: Optional[float] = None
    net_margin: Optional[float] = None
    ebitda: Optional[Figure] = None
    eps: Optional[Figure] = None
    book_value: Optional[Figure] = None
    debt_to_equity: Optional[Figure] = None
    roe: Optional[float] = None

    # Profile
    name: Optional[str] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    employees: Optional[Union[int, str]] = None

    # Fixed income
    yield_: Optional[float] = Field(None, alias="yield")
    maturity_date: Optional[str] = None

    @property
    def is_up(self) -> bool:
        return (self.change or 0.0) >= 0


class NewsItem(_ProviderModel):
    """Headline attached to a provider response"""
    title: str = ""
    publisher: str = ""
    link: str = ""
    published: str = ""  # already display-formatted by the provider


class ProviderResponse(_ProviderModel):
    """Body of ``GET /ticker``"""
    data: List[Quote] = Field(default_factory=list)
    news: List[NewsItem] = Field(default_factory=list)
    error: Optional[str] = None

    @field_validator("data", "news", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value

    def first_quote(self) -> Optional[Quote]:
        return self.data[0] if self.data else None
