"""Domain models for users and their profile content."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID


class Gender(str, Enum):
	MALE = "male"
	FEMALE = "female"
	OTHER = "other"


class GenderPreference(str, Enum):
	MALE = "male"
	FEMALE = "female"
	BOTH = "both"


class DatingIntent(str, Enum):
	LONG_TERM = "long_term"
	SHORT_TERM = "short_term"
	CASUAL = "casual"
	FRIENDSHIP = "friendship"
	NOT_SURE = "not_sure"


class Role(str, Enum):
	USER = "user"
	MODERATOR = "moderator"
	ADMIN = "admin"


class SubscriptionTier(str, Enum):
	FREE = "free"
	PREMIUM = "premium"


MAX_PHOTOS = 5
# Deleting is refused once a profile is down to this many photos.
PHOTO_DELETE_FLOOR = 2
MAX_PROMPTS = 3


@dataclass(slots=True)
class Photo:
	id: UUID
	user_id: UUID
	url: str
	position: int

	@classmethod
	def from_record(cls, record) -> "Photo":
		return cls(
			id=UUID(str(record["id"])),
			user_id=UUID(str(record["user_id"])),
			url=record["url"],
			position=int(record["position"]),
		)


@dataclass(slots=True)
class Prompt:
	id: UUID
	user_id: UUID
	question: str
	answer: str

	@classmethod
	def from_record(cls, record) -> "Prompt":
		return cls(
			id=UUID(str(record["id"])),
			user_id=UUID(str(record["user_id"])),
			question=record["question"],
			answer=record["answer"],
		)


@dataclass(slots=True)
class User:
	"""A registered user. The password hash never leaves the domain layer."""

	id: UUID
	email: str
	name: str
	password_hash: str = ""
	date_of_birth: Optional[date] = None
	gender: Optional[Gender] = None
	gender_preference: Optional[GenderPreference] = None
	dating_intent: Optional[DatingIntent] = None
	city: Optional[str] = None
	state: Optional[str] = None
	latitude: Optional[float] = None
	longitude: Optional[float] = None
	bio: Optional[str] = None
	profile_score: int = 0
	activity_score: int = 0
	role: Role = Role.USER
	subscription_tier: SubscriptionTier = SubscriptionTier.FREE
	created_at: Optional[datetime] = None
	updated_at: Optional[datetime] = None
	photos: List[Photo] = field(default_factory=list)
	prompts: List[Prompt] = field(default_factory=list)

	@property
	def is_premium(self) -> bool:
		return self.subscription_tier == SubscriptionTier.PREMIUM

	@classmethod
	def from_record(cls, record) -> "User":
		data = dict(record)
		return cls(
			id=UUID(str(data["id"])),
			email=data["email"],
			name=data["name"],
			password_hash=data.get("password_hash") or "",
			date_of_birth=data.get("date_of_birth"),
			gender=Gender(data["gender"]) if data.get("gender") else None,
			gender_preference=GenderPreference(data["gender_preference"]) if data.get("gender_preference") else None,
			dating_intent=DatingIntent(data["dating_intent"]) if data.get("dating_intent") else None,
			city=data.get("city"),
			state=data.get("state"),
			latitude=data.get("latitude"),
			longitude=data.get("longitude"),
			bio=data.get("bio"),
			profile_score=int(data.get("profile_score") or 0),
			activity_score=int(data.get("activity_score") or 0),
			role=Role(data.get("role") or "user"),
			subscription_tier=SubscriptionTier(data.get("subscription_tier") or "free"),
			created_at=data.get("created_at"),
			updated_at=data.get("updated_at"),
		)
