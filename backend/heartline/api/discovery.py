"""Discovery feed."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from heartline.api.envelope import Envelope, ok
from heartline.domain.common.schemas import PAGE_LIMIT_MAX, Page
from heartline.domain.discovery import service
from heartline.domain.discovery.schemas import (
	AGE_CEILING,
	AGE_FLOOR,
	DEFAULT_MAX_AGE,
	DEFAULT_MIN_AGE,
	DiscoverQuery,
)
from heartline.domain.identity.models import DatingIntent, Gender
from heartline.domain.identity.schemas import ProfileCard
from heartline.infra.auth import AuthenticatedUser, get_current_user

router = APIRouter(tags=["discovery"])


def discover_query(
	min_age: int = Query(default=DEFAULT_MIN_AGE, ge=AGE_FLOOR, le=AGE_CEILING, alias="minAge"),
	max_age: int = Query(default=DEFAULT_MAX_AGE, ge=AGE_FLOOR, le=AGE_CEILING, alias="maxAge"),
	gender: Optional[Gender] = Query(default=None),
	dating_intent: Optional[DatingIntent] = Query(default=None, alias="datingIntent"),
	city: Optional[str] = Query(default=None, max_length=100),
	state: Optional[str] = Query(default=None, max_length=100),
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=20, ge=1, le=PAGE_LIMIT_MAX),
) -> DiscoverQuery:
	return DiscoverQuery(
		min_age=min_age,
		max_age=max_age,
		gender=gender,
		dating_intent=dating_intent,
		city=city.strip() if city and city.strip() else None,
		state=state.strip() if state and state.strip() else None,
		page=page,
		limit=limit,
	)


@router.get("/discover", response_model=Envelope[Page[ProfileCard]])
async def discover(
	query: DiscoverQuery = Depends(discover_query),
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.discover(auth_user, query))
