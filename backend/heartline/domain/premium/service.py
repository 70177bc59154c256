"""Premium-only features: seeing pending likes and boosting discovery rank."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import asyncpg

from heartline.domain.common.ids import as_user_id
from heartline.domain.common.schemas import Page, PageParams
from heartline.domain.identity.exceptions import UserNotFound
from heartline.domain.identity.models import SubscriptionTier
from heartline.domain.identity.schemas import UserSummary
from heartline.domain.identity.scoring import age_on
from heartline.domain.premium.exceptions import BoostActive, PremiumRequired
from heartline.domain.premium.schemas import Admirer, BoostOut, BoostRequest
from heartline.infra.auth import AuthenticatedUser
from heartline.infra.postgres import get_pool
from heartline.obs import metrics as obs_metrics
from heartline.settings import settings

logger = logging.getLogger(__name__)


async def require_premium(conn: asyncpg.Connection, user_id: str, *, for_update: bool = False) -> None:
	lock = " FOR UPDATE" if for_update else ""
	tier = await conn.fetchval(f"SELECT subscription_tier FROM users WHERE id = $1{lock}", user_id)
	if tier is None:
		raise UserNotFound()
	if tier != SubscriptionTier.PREMIUM.value:
		raise PremiumRequired()


_ADMIRERS_WHERE = """
s.target_id = $1
AND s.kind = 'LIKE'
AND NOT EXISTS (SELECT 1 FROM swipes mine WHERE mine.actor_id = $1 AND mine.target_id = s.actor_id)
AND NOT EXISTS (
	SELECT 1 FROM blocks b
	WHERE (b.blocker_id = $1 AND b.blocked_id = s.actor_id)
	   OR (b.blocker_id = s.actor_id AND b.blocked_id = $1)
)
"""


async def who_liked_me(auth_user: AuthenticatedUser, params: PageParams) -> Page[Admirer]:
	user_id = as_user_id(auth_user.id)
	today = datetime.now(timezone.utc).date()
	pool = await get_pool()
	async with pool.acquire() as conn:
		await require_premium(conn, user_id)
		total = await conn.fetchval(f"SELECT COUNT(*) FROM swipes s WHERE {_ADMIRERS_WHERE}", user_id)
		rows = await conn.fetch(
			f"""
			SELECT u.id, u.name, u.date_of_birth, s.created_at AS liked_at,
				(SELECT p.url FROM user_photos p WHERE p.user_id = u.id ORDER BY p.position LIMIT 1) AS photo
			FROM swipes s
			JOIN users u ON u.id = s.actor_id
			WHERE {_ADMIRERS_WHERE}
			ORDER BY s.created_at DESC, s.id DESC
			LIMIT $2 OFFSET $3
			""",
			user_id,
			params.limit,
			params.offset,
		)
	items = [
		Admirer(
			user=UserSummary(id=r["id"], name=r["name"], age=age_on(r["date_of_birth"], today), photo=r["photo"]),
			liked_at=r["liked_at"],
		)
		for r in rows
	]
	return Page[Admirer].build(items, params=params, total=int(total or 0))


async def apply_boost(auth_user: AuthenticatedUser, payload: BoostRequest) -> BoostOut:
	user_id = as_user_id(auth_user.id)
	minutes = payload.duration_minutes or settings.boost_default_minutes
	pool = await get_pool()
	async with pool.acquire() as conn:
		async with conn.transaction():
			# the row lock serialises concurrent boost requests from one user
			await require_premium(conn, user_id, for_update=True)
			active = await conn.fetchval(
				"SELECT 1 FROM boosts WHERE user_id = $1 AND ends_at > NOW() LIMIT 1",
				user_id,
			)
			if active:
				raise BoostActive()
			starts_at = datetime.now(timezone.utc)
			row = await conn.fetchrow(
				"""
				INSERT INTO boosts (id, user_id, starts_at, ends_at)
				VALUES ($1, $2, $3, $4)
				RETURNING id, starts_at, ends_at
				""",
				uuid4(),
				user_id,
				starts_at,
				starts_at + timedelta(minutes=minutes),
			)
	obs_metrics.inc_boost()
	logger.info("boost_applied", extra={"user_id": user_id, "minutes": minutes})
	return BoostOut(id=row["id"], starts_at=row["starts_at"], ends_at=row["ends_at"])
