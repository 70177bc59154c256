"""Match listing and conversation bootstrap."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from heartline.api.envelope import Envelope, ok
from heartline.api.pagination import page_params
from heartline.domain.chat import service as chat_service
from heartline.domain.chat.schemas import ConversationOut
from heartline.domain.common.schemas import Page, PageParams
from heartline.domain.matching import service
from heartline.domain.matching.schemas import MatchSummary
from heartline.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/matches", tags=["matching"])


@router.get("", response_model=Envelope[Page[MatchSummary]])
async def list_matches(
	params: PageParams = Depends(page_params),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.list_matches(auth_user, params))


@router.post("/{match_id}/conversation", response_model=Envelope[ConversationOut])
async def open_conversation(
	match_id: UUID,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await chat_service.open_conversation(auth_user, match_id))
