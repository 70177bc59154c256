"""Pydantic schemas for swipes and match listings."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from heartline.domain.common.schemas import CamelModel
from heartline.domain.identity.schemas import UserSummary
from heartline.domain.matching.models import SwipeType


class SwipeRequest(CamelModel):
	target_user_id: UUID = Field(..., description="User being swiped on")
	type: SwipeType


class SwipeOut(CamelModel):
	id: UUID
	actor_id: UUID
	target_id: UUID
	type: SwipeType
	created_at: datetime


class SwipeResult(CamelModel):
	swipe: SwipeOut
	match: bool
	match_id: Optional[UUID] = None


class MatchSummary(CamelModel):
	match_id: UUID
	conversation_id: Optional[UUID] = None
	matched_at: datetime
	last_message_at: Optional[datetime] = None
	other_user: UserSummary
