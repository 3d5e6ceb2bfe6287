"""令牌桶速率限制器.

每个数据源一个令牌桶，懒加载创建，按需连续补充令牌：

    elapsed = now - last_refill
    tokens = min(max_requests, tokens + elapsed / window_ms * max_requests)

没有后台定时器，只有在访问桶时才会补充。内部保留小数精度，
只有 ``get_remaining`` 会向下取整。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from threading import Lock

from omd.core.data.clock import Clock, monotonic_ms
from omd.core.models.provider import RateLimitConfig


@dataclass
class Bucket:
    """单个数据源的令牌桶状态."""

    tokens: float
    last_refill: float
    config: RateLimitConfig

    def refill(self, now: float) -> None:
        elapsed = max(0.0, now - self.last_refill)
        refill_amount = elapsed / self.config.window_ms * self.config.max_requests
        self.tokens = min(float(self.config.max_requests), self.tokens + refill_amount)
        self.last_refill = now


class TokenBucketRateLimiter:
    """按数据源名称管理令牌桶."""

    def __init__(self, clock: Clock = monotonic_ms):
        """初始化速率限制器.

        Args:
            clock: 返回毫秒时间戳的时钟函数
        """
        self._clock = clock
        self._buckets: dict[str, Bucket] = {}
        self._lock = Lock()

    def _get_bucket(self, key: str, config: RateLimitConfig) -> Bucket:
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = Bucket(tokens=float(config.max_requests), last_refill=self._clock(), config=config)
            self._buckets[key] = bucket
        return bucket

    def _refilled(self, key: str, config: RateLimitConfig) -> Bucket:
        bucket = self._get_bucket(key, config)
        bucket.refill(self._clock())
        return bucket

    def can_request(self, key: str, config: RateLimitConfig) -> bool:
        """补充令牌后判断是否至少有一个令牌可用."""
        with self._lock:
            return self._refilled(key, config).tokens >= 1

    def consume_token(self, key: str, config: RateLimitConfig) -> bool:
        """补充令牌后尝试消耗一个令牌.

        Returns:
            成功消耗返回True；令牌不足时返回False且不修改令牌数
        """
        with self._lock:
            bucket = self._refilled(key, config)
            if bucket.tokens < 1:
                return False
            bucket.tokens -= 1
            return True

    def get_remaining(self, key: str, config: RateLimitConfig) -> int:
        """返回当前可用令牌数(向下取整)，仅用于展示."""
        with self._lock:
            return math.floor(self._refilled(key, config).tokens)

    def reset_bucket(self, key: str) -> None:
        """丢弃指定数据源的令牌桶状态."""
        with self._lock:
            self._buckets.pop(key, None)

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._buckets
