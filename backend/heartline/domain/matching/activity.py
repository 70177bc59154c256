"""Engagement counter bookkeeping.

Scores only ever move through relative increments so concurrent updates
from different requests never overwrite each other.
"""

from __future__ import annotations

import logging

import asyncpg

from heartline.infra.postgres import get_pool
from heartline.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

SWIPE_POINTS = 1
MESSAGE_POINTS = 5


async def bump_activity(conn: asyncpg.Connection, amount: int, *user_ids: str) -> None:
	if amount <= 0:
		raise ValueError("activity increments must be positive")
	ids = sorted({str(uid) for uid in user_ids})
	if not ids:
		return
	await conn.execute(
		"UPDATE users SET activity_score = activity_score + $2 WHERE id = ANY($1::uuid[])",
		ids,
		amount,
	)


async def bump_activity_later(amount: int, *user_ids: str) -> None:
	"""Apply an increment outside the caller's transaction; failures are logged, not raised."""
	try:
		pool = await get_pool()
		async with pool.acquire() as conn:
			await bump_activity(conn, amount, *user_ids)
	except Exception:
		obs_metrics.inc_activity_bump_failure()
		logger.exception("activity_bump_failed", extra={"amount": amount, "user_ids": list(user_ids)})
