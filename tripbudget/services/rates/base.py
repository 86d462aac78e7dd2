"""Rate provider abstraction.

A provider answers "how many units of `to` for one unit of `from`" and raises
RateLookupError when it cannot; callers decide how to degrade.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol


class RateProvider(ABC):
    @abstractmethod
    def get_rate(self, from_currency: str, to_currency: str) -> float:
        """Return units of to_currency per 1 unit of from_currency."""
        raise NotImplementedError


class SupportsRateLookup(Protocol):
    def get_rate(self, from_currency: str, to_currency: str) -> float: ...
