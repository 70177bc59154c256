"""Block checks and moderation rate limits shared by other feature areas."""

from __future__ import annotations

import asyncpg

from heartline.domain.moderation.exceptions import SelfModeration, UserNotFound
from heartline.infra import rate_limit
from heartline.settings import settings


async def enforce_block_limits(user_id: str) -> None:
	await rate_limit.enforce("block", user_id, limit=settings.block_per_minute, window_seconds=60)


async def enforce_report_limits(user_id: str) -> None:
	await rate_limit.enforce("report", user_id, limit=settings.report_per_hour, window_seconds=3600)


def guard_not_self(user_id: str, target_id: str, *, action: str) -> None:
	if str(user_id) == str(target_id):
		raise SelfModeration(f"self_{action}")


async def ensure_user_exists(conn: asyncpg.Connection, user_id: str) -> None:
	row = await conn.fetchrow("SELECT 1 FROM users WHERE id = $1", user_id)
	if not row:
		raise UserNotFound()


async def is_blocked_either_way(conn: asyncpg.Connection, user_a: str, user_b: str) -> bool:
	row = await conn.fetchrow(
		"""
		SELECT 1 FROM blocks
		WHERE (blocker_id = $1 AND blocked_id = $2)
		   OR (blocker_id = $2 AND blocked_id = $1)
		LIMIT 1
		""",
		user_a,
		user_b,
	)
	return row is not None
