"""Conversation service: the messaging gate between matched users."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from heartline.domain.chat.exceptions import ConversationBlocked, ConversationNotFound, NotParticipant
from heartline.domain.chat.models import Conversation, Message
from heartline.domain.chat.schemas import ConversationOut, MessageOut, ReadReceipt, SendMessageRequest
from heartline.domain.common.ids import as_user_id
from heartline.domain.common.schemas import Page, PageParams
from heartline.domain.matching import activity
from heartline.domain.matching import service as matching_service
from heartline.domain.matching.exceptions import MatchNotFound
from heartline.domain.matching.models import Match
from heartline.domain.moderation import policy as moderation_policy
from heartline.infra import rate_limit
from heartline.infra.auth import AuthenticatedUser
from heartline.infra.postgres import get_pool
from heartline.obs import metrics as obs_metrics
from heartline.settings import settings

logger = logging.getLogger(__name__)

_CONVERSATION_SQL = """
SELECT c.id, c.match_id, c.created_at, c.updated_at, m.user_one_id, m.user_two_id
FROM conversations c
JOIN matches m ON m.id = c.match_id
"""


def _rows_affected(status: str) -> int:
	# asyncpg returns command tags like "UPDATE 3"
	try:
		return int(status.rsplit(" ", 1)[-1])
	except (ValueError, AttributeError):
		return 0


class ChatRepository:
	"""Repository backed by asyncpg."""

	async def get_match(self, match_id: str) -> Optional[Match]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			return await matching_service.get_match(conn, match_id)

	async def get_or_create_conversation(self, match: Match) -> Conversation:
		pool = await get_pool()
		async with pool.acquire() as conn:
			await conn.execute(
				"""
				INSERT INTO conversations (id, match_id)
				VALUES ($1, $2)
				ON CONFLICT (match_id) DO NOTHING
				""",
				uuid4(),
				str(match.id),
			)
			row = await conn.fetchrow(f"{_CONVERSATION_SQL} WHERE c.match_id = $1", str(match.id))
		return Conversation.from_record(row)

	async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			row = await conn.fetchrow(f"{_CONVERSATION_SQL} WHERE c.id = $1", conversation_id)
		return Conversation.from_record(row) if row else None

	async def is_blocked(self, user_a: str, user_b: str) -> bool:
		pool = await get_pool()
		async with pool.acquire() as conn:
			return await moderation_policy.is_blocked_either_way(conn, user_a, user_b)

	async def create_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
		pool = await get_pool()
		async with pool.acquire() as conn:
			async with conn.transaction():
				row = await conn.fetchrow(
					"""
					INSERT INTO messages (id, conversation_id, sender_id, content)
					VALUES ($1, $2, $3, $4)
					RETURNING id, conversation_id, sender_id, content, created_at, read_at
					""",
					uuid4(),
					conversation_id,
					sender_id,
					content,
				)
				await conn.execute(
					"UPDATE conversations SET updated_at = $2 WHERE id = $1",
					conversation_id,
					row["created_at"],
				)
		return Message.from_record(row)

	async def list_messages(self, conversation_id: str, *, limit: int, offset: int) -> Tuple[List[Message], int]:
		pool = await get_pool()
		async with pool.acquire() as conn:
			total = await conn.fetchval("SELECT COUNT(*) FROM messages WHERE conversation_id = $1", conversation_id)
			rows = await conn.fetch(
				"""
				SELECT id, conversation_id, sender_id, content, created_at, read_at
				FROM messages
				WHERE conversation_id = $1
				ORDER BY created_at ASC, id ASC
				LIMIT $2 OFFSET $3
				""",
				conversation_id,
				limit,
				offset,
			)
		return [Message.from_record(r) for r in rows], int(total or 0)

	async def mark_read(self, conversation_id: str, reader_id: str) -> int:
		pool = await get_pool()
		async with pool.acquire() as conn:
			status = await conn.execute(
				"""
				UPDATE messages
				SET read_at = NOW()
				WHERE conversation_id = $1 AND sender_id <> $2 AND read_at IS NULL
				""",
				conversation_id,
				reader_id,
			)
		return _rows_affected(status)


class ChatService:
	def __init__(self, repository: ChatRepository | None = None) -> None:
		self._repo = repository or ChatRepository()

	async def _gate(self, auth_user: AuthenticatedUser, conversation_id: UUID | str, *, check_blocks: bool = True) -> Conversation:
		conversation = await self._repo.get_conversation(str(conversation_id))
		if conversation is None:
			raise ConversationNotFound()
		user_id = as_user_id(auth_user.id)
		if not conversation.is_participant(user_id):
			raise NotParticipant()
		if check_blocks and await self._repo.is_blocked(user_id, conversation.other(user_id)):
			raise ConversationBlocked()
		return conversation

	async def open_conversation(self, auth_user: AuthenticatedUser, match_id: UUID | str) -> ConversationOut:
		match = await self._repo.get_match(str(match_id))
		if match is None:
			raise MatchNotFound()
		user_id = as_user_id(auth_user.id)
		if not match.includes(user_id):
			raise NotParticipant()
		if await self._repo.is_blocked(user_id, str(match.other(user_id))):
			raise ConversationBlocked()
		conversation = await self._repo.get_or_create_conversation(match)
		return ConversationOut.from_model(conversation)

	async def send_message(
		self,
		auth_user: AuthenticatedUser,
		conversation_id: UUID | str,
		payload: SendMessageRequest,
	) -> MessageOut:
		sender_id = as_user_id(auth_user.id)
		await rate_limit.enforce("message", sender_id, limit=settings.message_per_minute, window_seconds=60)
		try:
			conversation = await self._gate(auth_user, conversation_id)
		except (ConversationNotFound, NotParticipant, ConversationBlocked) as exc:
			obs_metrics.inc_message_reject(exc.reason)
			raise
		message = await self._repo.create_message(str(conversation.id), sender_id, payload.content)
		obs_metrics.inc_message_sent()
		await activity.bump_activity_later(activity.MESSAGE_POINTS, sender_id)
		return MessageOut.from_model(message)

	async def list_messages(
		self,
		auth_user: AuthenticatedUser,
		conversation_id: UUID | str,
		params: PageParams,
	) -> Page[MessageOut]:
		conversation = await self._gate(auth_user, conversation_id)
		messages, total = await self._repo.list_messages(
			str(conversation.id), limit=params.limit, offset=params.offset
		)
		items = [MessageOut.from_model(m) for m in messages]
		return Page[MessageOut].build(items, params=params, total=total)

	async def mark_read(self, auth_user: AuthenticatedUser, conversation_id: UUID | str) -> ReadReceipt:
		conversation = await self._gate(auth_user, conversation_id, check_blocks=False)
		updated = await self._repo.mark_read(str(conversation.id), as_user_id(auth_user.id))
		return ReadReceipt(conversation_id=conversation.id, updated=updated)


_SERVICE = ChatService()


async def open_conversation(auth_user: AuthenticatedUser, match_id: UUID | str) -> ConversationOut:
	return await _SERVICE.open_conversation(auth_user, match_id)


async def send_message(auth_user: AuthenticatedUser, conversation_id: UUID | str, payload: SendMessageRequest) -> MessageOut:
	return await _SERVICE.send_message(auth_user, conversation_id, payload)


async def list_messages(auth_user: AuthenticatedUser, conversation_id: UUID | str, params: PageParams) -> Page[MessageOut]:
	return await _SERVICE.list_messages(auth_user, conversation_id, params)


async def mark_read(auth_user: AuthenticatedUser, conversation_id: UUID | str) -> ReadReceipt:
	return await _SERVICE.mark_read(auth_user, conversation_id)
