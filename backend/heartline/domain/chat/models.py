"""Domain models for match conversations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple
from uuid import UUID

MESSAGE_MAX_LENGTH = 2000


@dataclass(slots=True)
class Conversation:
	"""A conversation owned by exactly one match; participants are the match pair."""

	id: UUID
	match_id: UUID
	user_one_id: UUID
	user_two_id: UUID
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_record(cls, record) -> "Conversation":
		return cls(
			id=UUID(str(record["id"])),
			match_id=UUID(str(record["match_id"])),
			user_one_id=UUID(str(record["user_one_id"])),
			user_two_id=UUID(str(record["user_two_id"])),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
		)

	def participants(self) -> Tuple[str, str]:
		return (str(self.user_one_id), str(self.user_two_id))

	def is_participant(self, user_id: UUID | str) -> bool:
		return UUID(str(user_id)) in (self.user_one_id, self.user_two_id)

	def other(self, user_id: UUID | str) -> str:
		one, two = self.participants()
		return two if UUID(str(user_id)) == self.user_one_id else one


@dataclass(slots=True)
class Message:
	id: UUID
	conversation_id: UUID
	sender_id: UUID
	content: str
	created_at: datetime
	read_at: Optional[datetime] = None

	@classmethod
	def from_record(cls, record) -> "Message":
		return cls(
			id=UUID(str(record["id"])),
			conversation_id=UUID(str(record["conversation_id"])),
			sender_id=UUID(str(record["sender_id"])),
			content=record["content"],
			created_at=record["created_at"],
			read_at=record["read_at"],
		)
