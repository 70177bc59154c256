"""Schemas for the discovery feed."""

from __future__ import annotations

from typing import Annotated, Optional

from pydantic import Field

from heartline.domain.common.schemas import PageParams
from heartline.domain.identity.models import DatingIntent, Gender

AGE_FLOOR = 18
AGE_CEILING = 100
DEFAULT_MIN_AGE = 18
DEFAULT_MAX_AGE = 35


class DiscoverQuery(PageParams):
	min_age: Annotated[int, Field(ge=AGE_FLOOR, le=AGE_CEILING)] = DEFAULT_MIN_AGE
	max_age: Annotated[int, Field(ge=AGE_FLOOR, le=AGE_CEILING)] = DEFAULT_MAX_AGE
	gender: Optional[Gender] = None
	dating_intent: Optional[DatingIntent] = None
	city: Optional[Annotated[str, Field(max_length=100)]] = None
	state: Optional[Annotated[str, Field(max_length=100)]] = None
