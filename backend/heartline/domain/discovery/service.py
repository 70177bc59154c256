"""Discovery feed: candidate exclusion, filtering and ranking."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import asyncpg

from heartline.domain.common.errors import ValidationFailed
from heartline.domain.common.ids import as_user_id
from heartline.domain.common.schemas import Page
from heartline.domain.discovery.schemas import DiscoverQuery
from heartline.domain.identity.models import Photo, Prompt, User
from heartline.domain.identity.profile_service import to_profile_card
from heartline.domain.identity.schemas import ProfileCard
from heartline.domain.identity.scoring import birth_date_bounds
from heartline.infra.auth import AuthenticatedUser
from heartline.infra.postgres import get_pool

# Every candidate must pass these; $1 is always the requester.
_BASE_CONDITIONS = (
	"u.id <> $1",
	"u.date_of_birth IS NOT NULL",
	"NOT EXISTS (SELECT 1 FROM swipes s WHERE s.actor_id = $1 AND s.target_id = u.id)",
	"""NOT EXISTS (
		SELECT 1 FROM matches m
		WHERE (m.user_one_id = $1 AND m.user_two_id = u.id)
		   OR (m.user_two_id = $1 AND m.user_one_id = u.id)
	)""",
	"""NOT EXISTS (
		SELECT 1 FROM blocks b
		WHERE (b.blocker_id = $1 AND b.blocked_id = u.id)
		   OR (b.blocker_id = u.id AND b.blocked_id = $1)
	)""",
)

_BOOSTED = "EXISTS (SELECT 1 FROM boosts bo WHERE bo.user_id = u.id AND bo.starts_at <= NOW() AND bo.ends_at > NOW())"

_ORDER_BY = f"{_BOOSTED} DESC, u.profile_score DESC, u.activity_score DESC, u.created_at DESC, u.id"


def build_filters(user_id: str, query: DiscoverQuery, today: date) -> Tuple[str, List[Any]]:
	"""Return the WHERE clause and its bind values for a discovery query."""
	if query.min_age > query.max_age:
		raise ValidationFailed("invalid_age_range", message="minAge must not exceed maxAge")
	earliest_exclusive, latest_inclusive = birth_date_bounds(query.min_age, query.max_age, today)
	conditions = list(_BASE_CONDITIONS)
	params: List[Any] = [user_id]

	def bind(value: Any) -> str:
		params.append(value)
		return f"${len(params)}"

	conditions.append(f"u.date_of_birth > {bind(earliest_exclusive)}")
	conditions.append(f"u.date_of_birth <= {bind(latest_inclusive)}")
	if query.gender is not None:
		conditions.append(f"u.gender = {bind(query.gender.value)}")
	if query.dating_intent is not None:
		conditions.append(f"u.dating_intent = {bind(query.dating_intent.value)}")
	if query.city:
		conditions.append(f"LOWER(u.city) = LOWER({bind(query.city.strip())})")
	if query.state:
		conditions.append(f"LOWER(u.state) = LOWER({bind(query.state.strip())})")
	return " AND ".join(conditions), params


async def _attach_content(conn: asyncpg.Connection, users: List[User]) -> None:
	if not users:
		return
	ids = [str(u.id) for u in users]
	photos: Dict[str, List[Photo]] = defaultdict(list)
	prompts: Dict[str, List[Prompt]] = defaultdict(list)
	for row in await conn.fetch(
		"SELECT id, user_id, url, position FROM user_photos WHERE user_id = ANY($1::uuid[]) ORDER BY user_id, position",
		ids,
	):
		photos[str(row["user_id"])].append(Photo.from_record(row))
	for row in await conn.fetch(
		"SELECT id, user_id, question, answer FROM prompts WHERE user_id = ANY($1::uuid[]) ORDER BY user_id, created_at, id",
		ids,
	):
		prompts[str(row["user_id"])].append(Prompt.from_record(row))
	for user in users:
		user.photos = photos.get(str(user.id), [])
		user.prompts = prompts.get(str(user.id), [])


async def discover(
	auth_user: AuthenticatedUser,
	query: DiscoverQuery,
	*,
	today: Optional[date] = None,
) -> Page[ProfileCard]:
	today = today or datetime.now(timezone.utc).date()
	where, params = build_filters(as_user_id(auth_user.id), query, today)
	pool = await get_pool()
	async with pool.acquire() as conn:
		total = await conn.fetchval(f"SELECT COUNT(*) FROM users u WHERE {where}", *params)
		rows = await conn.fetch(
			f"""
			SELECT u.*
			FROM users u
			WHERE {where}
			ORDER BY {_ORDER_BY}
			LIMIT ${len(params) + 1} OFFSET ${len(params) + 2}
			""",
			*params,
			query.limit,
			query.offset,
		)
		users = [User.from_record(row) for row in rows]
		await _attach_content(conn, users)
	cards = [to_profile_card(user, today=today) for user in users]
	return Page[ProfileCard].build(cards, params=query, total=int(total or 0))
