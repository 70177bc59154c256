"""Schemas for premium features."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import Field

from heartline.domain.common.schemas import CamelModel
from heartline.domain.identity.schemas import UserSummary

BOOST_MIN_MINUTES = 15
BOOST_MAX_MINUTES = 180


class BoostRequest(CamelModel):
	duration_minutes: Optional[Annotated[int, Field(ge=BOOST_MIN_MINUTES, le=BOOST_MAX_MINUTES)]] = None


class BoostOut(CamelModel):
	id: UUID
	starts_at: datetime
	ends_at: datetime


class Admirer(CamelModel):
	user: UserSummary
	liked_at: datetime
