"""Messaging endpoints for matched users."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from heartline.api.envelope import Envelope, ok
from heartline.api.pagination import page_params
from heartline.domain.chat import service
from heartline.domain.chat.schemas import MessageOut, ReadReceipt, SendMessageRequest
from heartline.domain.common.schemas import Page, PageParams
from heartline.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/conversations", tags=["chat"])


@router.get("/{conversation_id}/messages", response_model=Envelope[Page[MessageOut]])
async def list_messages(
	conversation_id: UUID,
	params: PageParams = Depends(page_params),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.list_messages(auth_user, conversation_id, params))


@router.post(
	"/{conversation_id}/messages",
	response_model=Envelope[MessageOut],
	status_code=status.HTTP_201_CREATED,
)
async def send_message(
	conversation_id: UUID,
	payload: SendMessageRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.send_message(auth_user, conversation_id, payload), "Message sent.")


@router.post("/{conversation_id}/read", response_model=Envelope[ReadReceipt])
async def mark_read(
	conversation_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.mark_read(auth_user, conversation_id))
