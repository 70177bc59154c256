"""Identifier normalisation applied at service entry points."""

from __future__ import annotations

from uuid import UUID

from heartline.domain.common.errors import ValidationFailed


def as_user_id(value: UUID | str, *, reason: str = "invalid_user_id") -> str:
	"""Return the canonical lowercase UUID string, or raise a 400 for anything else."""
	try:
		return str(UUID(str(value).strip()))
	except ValueError:
		raise ValidationFailed(reason) from None
