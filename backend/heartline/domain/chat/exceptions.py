"""Domain-level exceptions for conversations and messages."""

from __future__ import annotations

from heartline.domain.common.errors import Forbidden, NotFound


class ConversationNotFound(NotFound):
    reason = "conversation_not_found"
    message = "Conversation not found"


class NotParticipant(Forbidden):
    reason = "not_participant"
    message = "You are not part of this conversation"


class ConversationBlocked(Forbidden):
    reason = "blocked"
    message = "Messaging is not available between these users"
