"""Domain models for swipes and matches."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class SwipeType(str, Enum):
	"""Direction-specific interest one user expresses in another."""

	LIKE = "LIKE"
	DISLIKE = "DISLIKE"


@dataclass(slots=True)
class Swipe:
	"""A directional interest. Written once, never updated or removed."""

	id: UUID
	actor_id: UUID
	target_id: UUID
	kind: SwipeType
	created_at: datetime

	@classmethod
	def from_record(cls, record) -> "Swipe":
		return cls(
			id=UUID(str(record["id"])),
			actor_id=UUID(str(record["actor_id"])),
			target_id=UUID(str(record["target_id"])),
			kind=SwipeType(record["kind"]),
			created_at=record["created_at"],
		)


@dataclass(slots=True, frozen=True)
class MatchPair:
	"""Canonical (sorted) form of an unordered user pair."""

	user_one_id: UUID
	user_two_id: UUID

	@classmethod
	def from_participants(cls, user_a: UUID | str, user_b: UUID | str) -> "MatchPair":
		first, second = sorted((UUID(str(user_a)), UUID(str(user_b))))
		return cls(user_one_id=first, user_two_id=second)

	@property
	def lock_name(self) -> str:
		return f"pair:{self.user_one_id}:{self.user_two_id}"

	def includes(self, user_id: UUID | str) -> bool:
		return UUID(str(user_id)) in (self.user_one_id, self.user_two_id)


@dataclass(slots=True)
class Match:
	id: UUID
	user_one_id: UUID
	user_two_id: UUID
	created_at: datetime

	@classmethod
	def from_record(cls, record) -> "Match":
		return cls(
			id=UUID(str(record["id"])),
			user_one_id=UUID(str(record["user_one_id"])),
			user_two_id=UUID(str(record["user_two_id"])),
			created_at=record["created_at"],
		)

	def includes(self, user_id: UUID | str) -> bool:
		return UUID(str(user_id)) in (self.user_one_id, self.user_two_id)

	def other(self, user_id: UUID | str) -> UUID:
		return self.user_two_id if UUID(str(user_id)) == self.user_one_id else self.user_one_id


@dataclass(slots=True)
class SwipeOutcome:
	swipe: Swipe
	matched: bool
	match: Optional[Match] = None
	match_created: bool = False
