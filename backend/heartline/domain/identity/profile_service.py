"""Profile editing: fields, prompts and photos.

Every mutation runs in one transaction that first locks the owner's ``users``
row, so limits (5 photos, 3 prompts) hold under concurrent requests and the
stored completion score is always recomputed from the committed state.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

import asyncpg

from heartline.domain.common.ids import as_user_id
from heartline.domain.identity import policy, schemas
from heartline.domain.identity.exceptions import (
	EmptyProfileUpdate,
	InvalidPhotoOrder,
	PhotoLimitReached,
	PhotoMinimumReached,
	PhotoNotFound,
	PromptLimitReached,
	PromptNotFound,
	UserNotFound,
)
from heartline.domain.identity.models import MAX_PHOTOS, MAX_PROMPTS, PHOTO_DELETE_FLOOR, Photo, Prompt, User
from heartline.domain.identity.scoring import age_on, compute_profile_score
from heartline.infra.postgres import get_pool

logger = logging.getLogger(__name__)

_PROFILE_COLUMNS = (
	"name",
	"bio",
	"date_of_birth",
	"gender",
	"gender_preference",
	"dating_intent",
	"city",
	"state",
	"latitude",
	"longitude",
)


def _today() -> date:
	return datetime.now(timezone.utc).date()


async def load_user(conn: asyncpg.Connection, user_id: str) -> Optional[User]:
	row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", user_id)
	if not row:
		return None
	user = User.from_record(row)
	photo_rows = await conn.fetch(
		"SELECT id, user_id, url, position FROM user_photos WHERE user_id = $1 ORDER BY position",
		user_id,
	)
	prompt_rows = await conn.fetch(
		"SELECT id, user_id, question, answer FROM prompts WHERE user_id = $1 ORDER BY created_at, id",
		user_id,
	)
	user.photos = [Photo.from_record(r) for r in photo_rows]
	user.prompts = [Prompt.from_record(r) for r in prompt_rows]
	return user


def _photos_out(photos: List[Photo]) -> List[schemas.PhotoOut]:
	return [schemas.PhotoOut(id=p.id, url=p.url, position=p.position) for p in photos]


def _prompts_out(prompts: List[Prompt]) -> List[schemas.PromptOut]:
	return [schemas.PromptOut(id=p.id, question=p.question, answer=p.answer) for p in prompts]


def to_profile_out(user: User, *, today: Optional[date] = None) -> schemas.ProfileOut:
	return schemas.ProfileOut(
		id=user.id,
		email=user.email,
		name=user.name,
		bio=user.bio,
		date_of_birth=user.date_of_birth,
		age=age_on(user.date_of_birth, today or _today()),
		gender=user.gender,
		gender_preference=user.gender_preference,
		dating_intent=user.dating_intent,
		city=user.city,
		state=user.state,
		latitude=user.latitude,
		longitude=user.longitude,
		profile_score=user.profile_score,
		activity_score=user.activity_score,
		role=user.role,
		subscription_tier=user.subscription_tier,
		created_at=user.created_at,
		photos=_photos_out(user.photos),
		prompts=_prompts_out(user.prompts),
	)


def to_profile_card(user: User, *, today: Optional[date] = None) -> schemas.ProfileCard:
	return schemas.ProfileCard(
		id=user.id,
		name=user.name,
		age=age_on(user.date_of_birth, today or _today()),
		bio=user.bio,
		gender=user.gender,
		dating_intent=user.dating_intent,
		city=user.city,
		state=user.state,
		profile_score=user.profile_score,
		activity_score=user.activity_score,
		photos=_photos_out(user.photos),
		prompts=_prompts_out(user.prompts),
	)


async def _lock_user(conn: asyncpg.Connection, user_id: str) -> None:
	row = await conn.fetchrow("SELECT id FROM users WHERE id = $1 FOR UPDATE", user_id)
	if not row:
		raise UserNotFound()


async def refresh_profile_score(conn: asyncpg.Connection, user_id: str) -> int:
	"""Recompute and store the completion score from the rows visible to ``conn``."""
	row = await conn.fetchrow(
		"""
		SELECT u.bio, u.date_of_birth, u.gender, u.gender_preference, u.dating_intent, u.city,
			(SELECT COUNT(*) FROM user_photos p WHERE p.user_id = u.id) AS photo_count,
			(SELECT COUNT(*) FROM prompts q WHERE q.user_id = u.id) AS prompt_count
		FROM users u
		WHERE u.id = $1
		""",
		user_id,
	)
	if not row:
		raise UserNotFound()
	score = compute_profile_score(
		dict(row),
		photo_count=int(row["photo_count"]),
		prompt_count=int(row["prompt_count"]),
	)
	await conn.execute(
		"UPDATE users SET profile_score = $2, updated_at = NOW() WHERE id = $1",
		user_id,
		score,
	)
	return score


async def get_profile(user_id: str) -> schemas.ProfileOut:
	user_id = as_user_id(user_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		user = await load_user(conn, user_id)
	if user is None:
		raise UserNotFound()
	return to_profile_out(user)


async def update_profile(user_id: str, payload: schemas.ProfileUpdateRequest) -> schemas.ProfileOut:
	user_id = as_user_id(user_id)
	changes = payload.model_dump(exclude_unset=True)
	if not changes:
		raise EmptyProfileUpdate()
	policy.guard_date_of_birth(changes.get("date_of_birth"), _today())

	columns = [col for col in _PROFILE_COLUMNS if col in changes]
	values = [changes[col].value if isinstance(changes[col], Enum) else changes[col] for col in columns]
	assignments = ", ".join(f"{col} = ${idx}" for idx, col in enumerate(columns, start=2))

	pool = await get_pool()
	async with pool.acquire() as conn:
		async with conn.transaction():
			await _lock_user(conn, user_id)
			await conn.execute(
				f"UPDATE users SET {assignments}, updated_at = NOW() WHERE id = $1",
				user_id,
				*values,
			)
			await refresh_profile_score(conn, user_id)
			user = await load_user(conn, user_id)
	logger.info("profile_updated", extra={"user_id": user_id, "fields": columns})
	return to_profile_out(user)


async def add_prompt(user_id: str, payload: schemas.PromptCreateRequest) -> schemas.PromptOut:
	user_id = as_user_id(user_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		async with conn.transaction():
			await _lock_user(conn, user_id)
			count = await conn.fetchval("SELECT COUNT(*) FROM prompts WHERE user_id = $1", user_id)
			if int(count) >= MAX_PROMPTS:
				raise PromptLimitReached()
			row = await conn.fetchrow(
				"""
				INSERT INTO prompts (id, user_id, question, answer)
				VALUES ($1, $2, $3, $4)
				RETURNING id, user_id, question, answer
				""",
				uuid4(),
				user_id,
				payload.question,
				payload.answer,
			)
			await refresh_profile_score(conn, user_id)
	prompt = Prompt.from_record(row)
	return schemas.PromptOut(id=prompt.id, question=prompt.question, answer=prompt.answer)


async def update_prompt(user_id: str, prompt_id: UUID, payload: schemas.PromptUpdateRequest) -> schemas.PromptOut:
	user_id = as_user_id(user_id)
	changes = payload.model_dump(exclude_unset=True, exclude_none=True)
	if not changes:
		raise EmptyProfileUpdate()
	pool = await get_pool()
	async with pool.acquire() as conn:
		row = await conn.fetchrow(
			"""
			UPDATE prompts
			SET question = COALESCE($3, question),
				answer = COALESCE($4, answer),
				updated_at = NOW()
			WHERE id = $1 AND user_id = $2
			RETURNING id, user_id, question, answer
			""",
			str(prompt_id),
			user_id,
			changes.get("question"),
			changes.get("answer"),
		)
	if not row:
		raise PromptNotFound()
	prompt = Prompt.from_record(row)
	return schemas.PromptOut(id=prompt.id, question=prompt.question, answer=prompt.answer)


async def delete_prompt(user_id: str, prompt_id: UUID) -> None:
	user_id = as_user_id(user_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		async with conn.transaction():
			await _lock_user(conn, user_id)
			deleted = await conn.fetchval(
				"DELETE FROM prompts WHERE id = $1 AND user_id = $2 RETURNING id",
				str(prompt_id),
				user_id,
			)
			if deleted is None:
				raise PromptNotFound()
			await refresh_profile_score(conn, user_id)


async def add_photo(user_id: str, payload: schemas.PhotoCreateRequest) -> schemas.PhotoOut:
	user_id = as_user_id(user_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		async with conn.transaction():
			await _lock_user(conn, user_id)
			count = int(await conn.fetchval("SELECT COUNT(*) FROM user_photos WHERE user_id = $1", user_id))
			if count >= MAX_PHOTOS:
				raise PhotoLimitReached()
			position = count if payload.position is None else min(payload.position, count)
			if position < count:
				await conn.execute(
					"UPDATE user_photos SET position = position + 1 WHERE user_id = $1 AND position >= $2",
					user_id,
					position,
				)
			row = await conn.fetchrow(
				"""
				INSERT INTO user_photos (id, user_id, url, position)
				VALUES ($1, $2, $3, $4)
				RETURNING id, user_id, url, position
				""",
				uuid4(),
				user_id,
				str(payload.url),
				position,
			)
			await refresh_profile_score(conn, user_id)
	photo = Photo.from_record(row)
	return schemas.PhotoOut(id=photo.id, url=photo.url, position=photo.position)


async def delete_photo(user_id: str, photo_id: UUID) -> None:
	user_id = as_user_id(user_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		async with conn.transaction():
			await _lock_user(conn, user_id)
			row = await conn.fetchrow(
				"SELECT position FROM user_photos WHERE id = $1 AND user_id = $2",
				str(photo_id),
				user_id,
			)
			if not row:
				raise PhotoNotFound()
			count = int(await conn.fetchval("SELECT COUNT(*) FROM user_photos WHERE user_id = $1", user_id))
			if count <= PHOTO_DELETE_FLOOR:
				raise PhotoMinimumReached()
			await conn.execute("DELETE FROM user_photos WHERE id = $1", str(photo_id))
			await conn.execute(
				"UPDATE user_photos SET position = position - 1 WHERE user_id = $1 AND position > $2",
				user_id,
				row["position"],
			)
			await refresh_profile_score(conn, user_id)


def validate_photo_order(current_ids: set[str], items: List[schemas.PhotoOrderItem]) -> None:
	"""The request must name every current photo once and use each slot 0..n-1 once."""
	requested_ids = [str(item.id) for item in items]
	positions = [item.position for item in items]
	n = len(current_ids)
	if len(requested_ids) != n or set(requested_ids) != current_ids:
		raise InvalidPhotoOrder()
	if sorted(positions) != list(range(n)):
		raise InvalidPhotoOrder()


async def reorder_photos(user_id: str, payload: schemas.PhotoOrderRequest) -> List[schemas.PhotoOut]:
	user_id = as_user_id(user_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		async with conn.transaction():
			await _lock_user(conn, user_id)
			rows = await conn.fetch("SELECT id FROM user_photos WHERE user_id = $1", user_id)
			validate_photo_order({str(r["id"]) for r in rows}, payload.photos)
			# positions are swapped freely; the (user_id, position) constraint is checked at commit
			await conn.executemany(
				"UPDATE user_photos SET position = $3 WHERE id = $1 AND user_id = $2",
				[(str(item.id), user_id, item.position) for item in payload.photos],
			)
			photo_rows = await conn.fetch(
				"SELECT id, user_id, url, position FROM user_photos WHERE user_id = $1 ORDER BY position",
				user_id,
			)
	return _photos_out([Photo.from_record(r) for r in photo_rows])
