"""Policy guards and rate limits for account flows."""

from __future__ import annotations

from datetime import date

from heartline.domain.identity.exceptions import InvalidDateOfBirth
from heartline.infra import rate_limit
from heartline.settings import settings


def normalise_email(email: str) -> str:
	return email.strip().lower()


async def enforce_register_rate(ip_address: str) -> None:
	await rate_limit.enforce("register", ip_address or "unknown", limit=settings.auth_per_minute, window_seconds=60)


async def enforce_login_rate(email: str) -> None:
	await rate_limit.enforce("login", normalise_email(email), limit=settings.auth_per_minute, window_seconds=60)


def guard_date_of_birth(value: date | None, today: date) -> None:
	if value is not None and value > today:
		raise InvalidDateOfBirth()
