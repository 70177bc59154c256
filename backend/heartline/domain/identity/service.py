"""Registration, login and account lookup."""

from __future__ import annotations

import logging
from uuid import uuid4

import asyncpg

from heartline.domain.identity import policy, profile_service, schemas
from heartline.domain.identity.exceptions import EmailTaken, InvalidCredentials
from heartline.domain.identity.models import User
from heartline.infra.auth import issue_access_token
from heartline.infra.password import check_needs_rehash, hash_password, verify_password
from heartline.infra.postgres import get_pool
from heartline.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


async def register(payload: schemas.RegisterRequest, *, ip_address: str) -> schemas.AuthResponse:
	email = policy.normalise_email(payload.email)
	await policy.enforce_register_rate(ip_address)
	password_hash = hash_password(payload.password)
	pool = await get_pool()
	async with pool.acquire() as conn:
		try:
			row = await conn.fetchrow(
				"""
				INSERT INTO users (id, email, password_hash, name)
				VALUES ($1, $2, $3, $4)
				RETURNING *
				""",
				uuid4(),
				email,
				password_hash,
				payload.name,
			)
		except asyncpg.UniqueViolationError:
			obs_metrics.inc_auth_event("register", "email_exists")
			raise EmailTaken() from None
	user = User.from_record(row)
	obs_metrics.inc_auth_event("register", "ok")
	logger.info("user_registered", extra={"user_id": str(user.id)})
	token = issue_access_token(str(user.id), user.role.value)
	return schemas.AuthResponse(token=token, user=profile_service.to_profile_out(user))


async def login(payload: schemas.LoginRequest) -> schemas.AuthResponse:
	email = policy.normalise_email(payload.email)
	await policy.enforce_login_rate(email)
	pool = await get_pool()
	async with pool.acquire() as conn:
		row = await conn.fetchrow("SELECT * FROM users WHERE email = $1", email)
		# Same error for unknown email and wrong password
		if not row or not verify_password(row["password_hash"], payload.password):
			obs_metrics.inc_auth_event("login", "invalid_credentials")
			raise InvalidCredentials()
		if check_needs_rehash(row["password_hash"]):
			await conn.execute(
				"UPDATE users SET password_hash = $2, updated_at = NOW() WHERE id = $1",
				row["id"],
				hash_password(payload.password),
			)
		user = await profile_service.load_user(conn, str(row["id"]))
	obs_metrics.inc_auth_event("login", "ok")
	token = issue_access_token(str(user.id), user.role.value)
	return schemas.AuthResponse(token=token, user=profile_service.to_profile_out(user))


async def get_me(user_id: str) -> schemas.ProfileOut:
	return await profile_service.get_profile(user_id)
