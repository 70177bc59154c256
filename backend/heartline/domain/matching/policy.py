"""Policy helpers and guard checks for swipes."""

from __future__ import annotations

from typing import Optional

import asyncpg

from heartline.domain.matching.exceptions import AlreadyInteracted, SelfSwipe, TargetNotFound
from heartline.domain.moderation import policy as moderation_policy
from heartline.infra import rate_limit
from heartline.settings import settings


async def enforce_swipe_limits(user_id: str) -> None:
	await rate_limit.enforce("swipe", user_id, limit=settings.swipe_per_minute, window_seconds=60)


def guard_not_self(actor_id: str, target_id: str) -> None:
	if str(actor_id) == str(target_id):
		raise SelfSwipe()


async def ensure_target_available(conn: asyncpg.Connection, actor_id: str, target_id: str) -> None:
	"""The target must exist and share no block with the actor.

	Blocked targets are reported as missing so a block is never revealed.
	"""
	row = await conn.fetchrow("SELECT 1 FROM users WHERE id = $1", target_id)
	if not row:
		raise TargetNotFound()
	if await moderation_policy.is_blocked_either_way(conn, actor_id, target_id):
		raise TargetNotFound()


async def find_swipe(conn: asyncpg.Connection, actor_id: str, target_id: str) -> Optional[asyncpg.Record]:
	return await conn.fetchrow(
		"SELECT id, actor_id, target_id, kind, created_at FROM swipes WHERE actor_id = $1 AND target_id = $2",
		actor_id,
		target_id,
	)


async def ensure_not_swiped(conn: asyncpg.Connection, actor_id: str, target_id: str) -> None:
	if await find_swipe(conn, actor_id, target_id):
		raise AlreadyInteracted()
