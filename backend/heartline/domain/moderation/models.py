"""Domain models for blocks and reports."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID


class ReportReason(str, Enum):
	SPAM = "spam"
	HARASSMENT = "harassment"
	FAKE_PROFILE = "fake_profile"
	INAPPROPRIATE_CONTENT = "inappropriate_content"
	UNDERAGE = "underage"
	OTHER = "other"


class ReportStatus(str, Enum):
	PENDING = "pending"
	REVIEWED = "reviewed"
	RESOLVED = "resolved"
	DISMISSED = "dismissed"


@dataclass(slots=True)
class Block:
	blocker_id: UUID
	blocked_id: UUID
	created_at: datetime

	@classmethod
	def from_record(cls, record) -> "Block":
		return cls(
			blocker_id=UUID(str(record["blocker_id"])),
			blocked_id=UUID(str(record["blocked_id"])),
			created_at=record["created_at"],
		)


@dataclass(slots=True)
class Report:
	id: UUID
	reporter_id: UUID
	reported_id: UUID
	reason: ReportReason
	details: Optional[str]
	status: ReportStatus
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_record(cls, record) -> "Report":
		return cls(
			id=UUID(str(record["id"])),
			reporter_id=UUID(str(record["reporter_id"])),
			reported_id=UUID(str(record["reported_id"])),
			reason=ReportReason(record["reason"]),
			details=record["details"],
			status=ReportStatus(record["status"]),
			created_at=record["created_at"],
			updated_at=record["updated_at"],
		)
