"""Pydantic schemas for blocks and reports."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import Field

from heartline.domain.common.schemas import CamelModel
from heartline.domain.moderation.models import Block, Report, ReportReason, ReportStatus


class BlockRequest(CamelModel):
	target_user_id: UUID


class BlockOut(CamelModel):
	blocker_id: UUID
	blocked_id: UUID
	created_at: datetime

	@classmethod
	def from_model(cls, block: Block) -> "BlockOut":
		return cls(blocker_id=block.blocker_id, blocked_id=block.blocked_id, created_at=block.created_at)


class ReportRequest(CamelModel):
	target_user_id: UUID
	reason: ReportReason
	details: Optional[Annotated[str, Field(max_length=1000)]] = None


class ReportOut(CamelModel):
	id: UUID
	reporter_id: UUID
	reported_id: UUID
	reason: ReportReason
	details: Optional[str] = None
	status: ReportStatus
	created_at: datetime
	updated_at: datetime

	@classmethod
	def from_model(cls, report: Report) -> "ReportOut":
		return cls(
			id=report.id,
			reporter_id=report.reporter_id,
			reported_id=report.reported_id,
			reason=report.reason,
			details=report.details,
			status=report.status,
			created_at=report.created_at,
			updated_at=report.updated_at,
		)


class ReportStatusUpdate(CamelModel):
	status: ReportStatus
