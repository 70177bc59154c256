"""Pydantic schemas for account and profile flows."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import EmailStr, Field, HttpUrl, field_validator

from heartline.domain.common.schemas import CamelModel
from heartline.domain.identity.models import DatingIntent, Gender, GenderPreference, Role, SubscriptionTier

NameStr = Annotated[str, Field(min_length=2, max_length=80)]


def _strip(value):
	return value.strip() if isinstance(value, str) else value


class RegisterRequest(CamelModel):
	email: EmailStr
	password: Annotated[str, Field(min_length=8, max_length=72)]
	name: NameStr

	@field_validator("name", mode="before")
	@classmethod
	def strip_name(cls, value):
		return _strip(value)


class LoginRequest(CamelModel):
	email: EmailStr
	password: Annotated[str, Field(min_length=1, max_length=72)]


class PhotoOut(CamelModel):
	id: UUID
	url: str
	position: int


class PromptOut(CamelModel):
	id: UUID
	question: str
	answer: str


class ProfileOut(CamelModel):
	"""The owner's own view of their profile."""

	id: UUID
	email: str
	name: str
	bio: Optional[str] = None
	date_of_birth: Optional[date] = None
	age: Optional[int] = None
	gender: Optional[Gender] = None
	gender_preference: Optional[GenderPreference] = None
	dating_intent: Optional[DatingIntent] = None
	city: Optional[str] = None
	state: Optional[str] = None
	latitude: Optional[float] = None
	longitude: Optional[float] = None
	profile_score: int = 0
	activity_score: int = 0
	role: Role = Role.USER
	subscription_tier: SubscriptionTier = SubscriptionTier.FREE
	created_at: Optional[datetime] = None
	photos: List[PhotoOut] = Field(default_factory=list)
	prompts: List[PromptOut] = Field(default_factory=list)


class ProfileCard(CamelModel):
	"""What other users see. Exposes age, never the date of birth."""

	id: UUID
	name: str
	age: Optional[int] = None
	bio: Optional[str] = None
	gender: Optional[Gender] = None
	dating_intent: Optional[DatingIntent] = None
	city: Optional[str] = None
	state: Optional[str] = None
	profile_score: int = 0
	activity_score: int = 0
	photos: List[PhotoOut] = Field(default_factory=list)
	prompts: List[PromptOut] = Field(default_factory=list)


class UserSummary(CamelModel):
	id: UUID
	name: str
	age: Optional[int] = None
	photo: Optional[str] = None


class AuthResponse(CamelModel):
	token: str
	user: ProfileOut


class ProfileUpdateRequest(CamelModel):
	name: Optional[NameStr] = None
	bio: Optional[Annotated[str, Field(max_length=500)]] = None
	date_of_birth: Optional[date] = None
	gender: Optional[Gender] = None
	gender_preference: Optional[GenderPreference] = None
	dating_intent: Optional[DatingIntent] = None
	city: Optional[Annotated[str, Field(max_length=100)]] = None
	state: Optional[Annotated[str, Field(max_length=100)]] = None
	latitude: Optional[Annotated[float, Field(ge=-90, le=90)]] = None
	longitude: Optional[Annotated[float, Field(ge=-180, le=180)]] = None

	@field_validator("name", "bio", "city", "state", mode="before")
	@classmethod
	def strip_text(cls, value):
		return _strip(value)

	@field_validator("name")
	@classmethod
	def name_not_null(cls, value):
		if value is None:
			raise ValueError("name cannot be cleared")
		return value


class PromptCreateRequest(CamelModel):
	question: Annotated[str, Field(min_length=3, max_length=120)]
	answer: Annotated[str, Field(min_length=3, max_length=300)]

	@field_validator("question", "answer", mode="before")
	@classmethod
	def strip_text(cls, value):
		return _strip(value)


class PromptUpdateRequest(CamelModel):
	question: Optional[Annotated[str, Field(min_length=3, max_length=120)]] = None
	answer: Optional[Annotated[str, Field(min_length=3, max_length=300)]] = None

	@field_validator("question", "answer", mode="before")
	@classmethod
	def strip_text(cls, value):
		return _strip(value)


class PhotoCreateRequest(CamelModel):
	url: HttpUrl
	position: Optional[Annotated[int, Field(ge=0)]] = Field(default=None, alias="order")


class PhotoOrderItem(CamelModel):
	id: UUID
	position: Annotated[int, Field(ge=0)] = Field(alias="order")


class PhotoOrderRequest(CamelModel):
	photos: Annotated[List[PhotoOrderItem], Field(min_length=1, max_length=5)]
