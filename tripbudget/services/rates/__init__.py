from .base import RateProvider, SupportsRateLookup
from .cache_service import RateCacheService, build_rate_cache_service
from .conversion import ConversionResult, compute_conversion
from .providers import FrankfurterRateProvider, StaticRateProvider, make_rate_provider

__all__ = [
    "RateProvider",
    "SupportsRateLookup",
    "RateCacheService",
    "build_rate_cache_service",
    "ConversionResult",
    "compute_conversion",
    "FrankfurterRateProvider",
    "StaticRateProvider",
    "make_rate_provider",
]
