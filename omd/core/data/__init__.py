"""Routing data layer: rate limiting, result cache and providers."""

from omd.core.data.cache import ResultCache
from omd.core.data.clock import monotonic_ms
from omd.core.data.ratelimit import Bucket, TokenBucketRateLimiter

__all__ = ["Bucket", "ResultCache", "TokenBucketRateLimiter", "monotonic_ms"]
