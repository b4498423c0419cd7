from __future__ import annotations

import math
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .constants import SUPPORTED_CURRENCIES


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuoteRequest(_CamelModel):
    """Validated ``/quote`` query: baseCurrency, quoteCurrency, baseAmount."""

    base_currency: str
    quote_currency: str
    base_amount: float

    @field_validator("base_currency", "quote_currency", mode="before")
    @classmethod
    def normalize_currency(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("base_currency", "quote_currency")
    @classmethod
    def supported_currency(cls, v: str, info: ValidationInfo) -> str:
        supported = (info.context or {}).get("supported_currencies", SUPPORTED_CURRENCIES)
        if v not in supported:
            raise PydanticCustomError(
                "unsupported_currency",
                "Unsupported currency: {currency}. Supported: {supported}",
                {"currency": v, "supported": ", ".join(supported)},
            )
        return v

    @field_validator("base_amount")
    @classmethod
    def positive_amount(cls, v: float) -> float:
        if not math.isfinite(v) or v < 1:
            raise PydanticCustomError(
                "invalid_amount", "Base amount must be a positive number"
            )
        return v


class QuoteOut(_CamelModel):
    exchange_rate: float
    quote_amount: float


class DebugInfo(_CamelModel):
    raw_quote_amount: float
    rounding_policy: str
    response_time_ms: float
    cached: bool
    total_requests: int


class ExpiryInfo(_CamelModel):
    key: str
    is_expired: bool
    ms_until_expiration: int


class CacheInfo(_CamelModel):
    size: int
    capacity: int
    utilization_percentage: float
    most_recently_cached: Optional[str] = None
    least_recently_cached: Optional[str] = None
    cache_order: List[str] = Field(default_factory=list)
    expiry_data: List[ExpiryInfo] = Field(default_factory=list)


class QuoteResult(QuoteOut):
    """Quote plus the diagnostics attached in debug mode."""

    cached: bool = Field(False, exclude=True)
    debug_info: Optional[DebugInfo] = None
    cache_info: Optional[CacheInfo] = None
