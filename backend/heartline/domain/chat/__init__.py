"""Chat domain exports."""

from .service import list_messages, mark_read, open_conversation, send_message

__all__ = [
	"list_messages",
	"mark_read",
	"open_conversation",
	"send_message",
]
