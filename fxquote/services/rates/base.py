from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping


class RateFetcher(ABC):
    """Source of a currency -> rate table relative to ``reference_currency``.

    ``fetch_rates`` returns units of each currency per 1 unit of the reference
    currency and raises RateFetchError when the source is unusable.
    """

    reference_currency: str = "USD"

    @abstractmethod
    def fetch_rates(self) -> Mapping[str, float]:
        raise NotImplementedError
