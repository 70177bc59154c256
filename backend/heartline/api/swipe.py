"""Swipe endpoint: records a like/dislike and reports whether it produced a match."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from heartline.api.envelope import Envelope, ok
from heartline.domain.matching import audit, service
from heartline.domain.matching.exceptions import AlreadyInteracted, SelfSwipe, TargetNotFound
from heartline.domain.matching.models import SwipeType
from heartline.domain.matching.schemas import SwipeRequest, SwipeResult
from heartline.infra.auth import AuthenticatedUser, get_current_user
from heartline.infra.rate_limit import RateLimitExceeded

router = APIRouter(tags=["matching"])


@router.post("/swipe", response_model=Envelope[SwipeResult])
async def swipe(
	payload: SwipeRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	try:
		outcome = await service.record_swipe(auth_user, payload.target_user_id, payload.type)
	except (SelfSwipe, AlreadyInteracted, TargetNotFound, RateLimitExceeded) as exc:
		audit.inc_swipe_reject(exc.reason)
		raise
	message = "Liked user." if payload.type is SwipeType.LIKE else "Disliked user."
	if outcome.matched:
		message = "It's a match!"
	return ok(service.to_swipe_result(outcome), message)
