"""Premium features."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from heartline.api.envelope import Envelope, ok
from heartline.api.pagination import page_params
from heartline.domain.common.schemas import Page, PageParams
from heartline.domain.premium import service
from heartline.domain.premium.schemas import Admirer, BoostOut, BoostRequest
from heartline.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(prefix="/premium", tags=["premium"])


@router.get("/who-liked-me", response_model=Envelope[Page[Admirer]])
async def who_liked_me(
	params: PageParams = Depends(page_params),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.who_liked_me(auth_user, params))


@router.post("/boost", response_model=Envelope[BoostOut], status_code=status.HTTP_201_CREATED)
async def boost(
	payload: Optional[BoostRequest] = None,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.apply_boost(auth_user, payload or BoostRequest()), "Boost applied.")
