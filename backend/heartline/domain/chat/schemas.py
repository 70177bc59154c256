"""Pydantic schemas for conversations and messages."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import Field, field_validator

from heartline.domain.chat.models import MESSAGE_MAX_LENGTH, Conversation, Message
from heartline.domain.common.schemas import CamelModel


class SendMessageRequest(CamelModel):
	content: Annotated[str, Field(min_length=1, max_length=MESSAGE_MAX_LENGTH)]

	@field_validator("content", mode="before")
	@classmethod
	def strip_content(cls, value):
		return value.strip() if isinstance(value, str) else value


class MessageOut(CamelModel):
	id: UUID
	conversation_id: UUID
	sender_id: UUID
	content: str
	created_at: datetime
	read_at: Optional[datetime] = None

	@classmethod
	def from_model(cls, message: Message) -> "MessageOut":
		return cls(
			id=message.id,
			conversation_id=message.conversation_id,
			sender_id=message.sender_id,
			content=message.content,
			created_at=message.created_at,
			read_at=message.read_at,
		)


class ConversationOut(CamelModel):
	id: UUID
	match_id: UUID
	participants: list[UUID]
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_model(cls, conversation: Conversation) -> "ConversationOut":
		return cls(
			id=conversation.id,
			match_id=conversation.match_id,
			participants=[conversation.user_one_id, conversation.user_two_id],
			created_at=conversation.created_at,
			updated_at=conversation.updated_at,
		)


class ReadReceipt(CamelModel):
	conversation_id: UUID
	updated: int
