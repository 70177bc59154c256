"""Swipe recording, match detection and match listing.

A swipe and the match it may complete are written in one transaction. The
transaction first takes an advisory lock named after the canonical pair, so
two opposite-direction likes on the same pair run one after the other and the
second always sees the first. The unique constraint on the canonical pair is
still the final arbiter: losing that insert means the match already exists.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional, Tuple
from uuid import UUID, uuid4

import asyncpg

from heartline.domain.common.ids import as_user_id
from heartline.domain.common.schemas import Page, PageParams
from heartline.domain.identity.schemas import UserSummary
from heartline.domain.identity.scoring import age_on
from heartline.domain.matching import activity, audit, policy
from heartline.domain.matching.exceptions import AlreadyInteracted, TargetNotFound
from heartline.domain.matching.models import Match, MatchPair, Swipe, SwipeOutcome, SwipeType
from heartline.domain.matching.schemas import MatchSummary, SwipeOut, SwipeResult
from heartline.infra.auth import AuthenticatedUser
from heartline.infra.postgres import get_pool
from heartline.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


async def _lock_pair(conn: asyncpg.Connection, pair: MatchPair) -> None:
	await conn.execute("SELECT pg_advisory_xact_lock(hashtextextended($1, 0))", pair.lock_name)


async def _insert_swipe(conn: asyncpg.Connection, actor_id: str, target_id: str, kind: SwipeType) -> Swipe:
	try:
		row = await conn.fetchrow(
			"""
			INSERT INTO swipes (id, actor_id, target_id, kind)
			VALUES ($1, $2, $3, $4)
			RETURNING id, actor_id, target_id, kind, created_at
			""",
			uuid4(),
			actor_id,
			target_id,
			kind.value,
		)
	except asyncpg.UniqueViolationError:
		raise AlreadyInteracted() from None
	except asyncpg.ForeignKeyViolationError:
		raise TargetNotFound() from None
	return Swipe.from_record(row)


async def _create_match(conn: asyncpg.Connection, pair: MatchPair) -> Tuple[Match, bool]:
	"""Insert the match for ``pair`` or return the one that already exists.

	The insert runs in a savepoint so a unique violation leaves the enclosing
	transaction (and its swipe) intact.
	"""
	try:
		async with conn.transaction():
			row = await conn.fetchrow(
				"""
				INSERT INTO matches (id, user_one_id, user_two_id)
				VALUES ($1, $2, $3)
				RETURNING id, user_one_id, user_two_id, created_at
				""",
				uuid4(),
				str(pair.user_one_id),
				str(pair.user_two_id),
			)
		return Match.from_record(row), True
	except asyncpg.UniqueViolationError:
		obs_metrics.inc_match_race()
		row = await conn.fetchrow(
			"""
			SELECT id, user_one_id, user_two_id, created_at
			FROM matches
			WHERE user_one_id = $1 AND user_two_id = $2
			""",
			str(pair.user_one_id),
			str(pair.user_two_id),
		)
		return Match.from_record(row), False


async def record_swipe(auth_user: AuthenticatedUser, target_user_id: UUID | str, kind: SwipeType) -> SwipeOutcome:
	actor_id = as_user_id(auth_user.id)
	target_id = as_user_id(target_user_id)
	policy.guard_not_self(actor_id, target_id)
	await policy.enforce_swipe_limits(actor_id)

	pair = MatchPair.from_participants(actor_id, target_id)
	match: Optional[Match] = None
	created = False
	pool = await get_pool()
	async with pool.acquire() as conn:
		async with conn.transaction():
			await _lock_pair(conn, pair)
			await policy.ensure_target_available(conn, actor_id, target_id)
			await policy.ensure_not_swiped(conn, actor_id, target_id)
			swipe = await _insert_swipe(conn, actor_id, target_id, kind)
			if kind is SwipeType.LIKE:
				reverse = await policy.find_swipe(conn, target_id, actor_id)
				if reverse is not None and reverse["kind"] == SwipeType.LIKE.value:
					match, created = await _create_match(conn, pair)

	audit.inc_swipe(kind.value)
	if created:
		audit.inc_match_created()
	await activity.bump_activity_later(activity.SWIPE_POINTS, actor_id, target_id)
	await _emit_audit(swipe, match, created)
	return SwipeOutcome(swipe=swipe, matched=match is not None, match=match, match_created=created)


async def _emit_audit(swipe: Swipe, match: Optional[Match], created: bool) -> None:
	try:
		await audit.log_swipe_event(
			"swipe.recorded",
			{"actor_id": str(swipe.actor_id), "target_id": str(swipe.target_id), "kind": swipe.kind.value},
		)
		if match is not None and created:
			await audit.log_match_event(
				"match.created",
				{"match_id": str(match.id), "user_one_id": str(match.user_one_id), "user_two_id": str(match.user_two_id)},
			)
	except Exception:
		logger.exception("swipe_audit_failed", extra={"swipe_id": str(swipe.id)})


def to_swipe_result(outcome: SwipeOutcome) -> SwipeResult:
	swipe = outcome.swipe
	return SwipeResult(
		swipe=SwipeOut(
			id=swipe.id,
			actor_id=swipe.actor_id,
			target_id=swipe.target_id,
			type=swipe.kind,
			created_at=swipe.created_at,
		),
		match=outcome.matched,
		match_id=outcome.match.id if outcome.match else None,
	)


_MATCHES_SQL = """
SELECT m.id AS match_id,
	m.created_at AS matched_at,
	c.id AS conversation_id,
	c.updated_at AS last_message_at,
	o.id AS other_id,
	o.name AS other_name,
	o.date_of_birth AS other_dob,
	(SELECT p.url FROM user_photos p WHERE p.user_id = o.id ORDER BY p.position LIMIT 1) AS other_photo
FROM matches m
JOIN users o ON o.id = CASE WHEN m.user_one_id = $1 THEN m.user_two_id ELSE m.user_one_id END
LEFT JOIN conversations c ON c.match_id = m.id
WHERE (m.user_one_id = $1 OR m.user_two_id = $1)
ORDER BY m.created_at DESC, m.id DESC
LIMIT $2 OFFSET $3
"""


def _record_to_match_summary(record, today: date) -> MatchSummary:
	return MatchSummary(
		match_id=record["match_id"],
		conversation_id=record["conversation_id"],
		matched_at=record["matched_at"],
		last_message_at=record["last_message_at"],
		other_user=UserSummary(
			id=record["other_id"],
			name=record["other_name"],
			age=age_on(record["other_dob"], today),
			photo=record["other_photo"],
		),
	)


async def list_matches(auth_user: AuthenticatedUser, params: PageParams) -> Page[MatchSummary]:
	user_id = as_user_id(auth_user.id)
	today = datetime.now(timezone.utc).date()
	pool = await get_pool()
	async with pool.acquire() as conn:
		total = await conn.fetchval(
			"SELECT COUNT(*) FROM matches WHERE user_one_id = $1 OR user_two_id = $1",
			user_id,
		)
		rows = await conn.fetch(_MATCHES_SQL, user_id, params.limit, params.offset)
	items = [_record_to_match_summary(row, today) for row in rows]
	return Page[MatchSummary].build(items, params=params, total=int(total or 0))


async def get_match(conn: asyncpg.Connection, match_id: UUID | str) -> Optional[Match]:
	row = await conn.fetchrow(
		"SELECT id, user_one_id, user_two_id, created_at FROM matches WHERE id = $1",
		str(match_id),
	)
	return Match.from_record(row) if row else None
