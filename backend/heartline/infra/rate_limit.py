"""Redis-backed fixed-window rate limiting."""

from __future__ import annotations

import math
import time
from typing import Optional

from heartline.infra.redis import redis_client
from heartline.obs import metrics as obs_metrics


async def allow(
	kind: str,
	actor_id: str,
	*,
	limit: int,
	window_seconds: int = 60,
	now: Optional[float] = None,
) -> bool:
	"""Return True when the operation is still within the allowed budget."""

	if limit <= 0:
		return False
	now = now or time.time()
	window = max(1, int(window_seconds))
	slot = int(math.floor(now / window))
	key = f"rl:{kind}:{actor_id}:{slot}:{window}"
	async with redis_client.pipeline(transaction=True) as pipe:
		pipe.incr(key)
		pipe.expire(key, window)
		count, _ = await pipe.execute()
	return int(count) <= limit


class RateLimitExceeded(Exception):
	"""Raised when the rate limit has been hit."""

	status_code = 429

	def __init__(self, reason: str = "rate_limited") -> None:
		super().__init__(reason)
		self.reason = reason


async def enforce(kind: str, actor_id: str, *, limit: int, window_seconds: int = 60) -> None:
	if not await allow(kind, actor_id, limit=limit, window_seconds=window_seconds):
		obs_metrics.inc_rate_limited(kind)
		raise RateLimitExceeded(f"{kind}_rate_limited")
