"""Blocking, reporting and staff report triage."""

from __future__ import annotations

import logging
from typing import Dict, Optional
from uuid import UUID, uuid4

from heartline.domain.common.ids import as_user_id
from heartline.domain.common.schemas import Page, PageParams
from heartline.domain.moderation import policy
from heartline.domain.moderation.exceptions import ReportNotFound
from heartline.domain.moderation.models import Block, Report, ReportStatus
from heartline.domain.moderation.schemas import BlockOut, ReportOut, ReportRequest
from heartline.infra.auth import AuthenticatedUser
from heartline.infra.postgres import get_pool
from heartline.infra.redis import redis_client
from heartline.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

MODERATION_STREAM = "x:moderation.events"


async def _log_event(event: str, fields: Dict[str, str]) -> None:
	try:
		await redis_client.xadd(MODERATION_STREAM, {"event": event, **fields}, maxlen=100_000, approximate=True)
	except Exception:
		logger.exception("moderation_audit_failed", extra={"event": event})


async def block_user(auth_user: AuthenticatedUser, target_id: UUID | str) -> BlockOut:
	blocker_id = as_user_id(auth_user.id)
	blocked_id = as_user_id(target_id, reason="invalid_target_user_id")
	policy.guard_not_self(blocker_id, blocked_id, action="block")
	await policy.enforce_block_limits(blocker_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		await policy.ensure_user_exists(conn, blocked_id)
		await conn.execute(
			"""
			INSERT INTO blocks (blocker_id, blocked_id)
			VALUES ($1, $2)
			ON CONFLICT (blocker_id, blocked_id) DO NOTHING
			""",
			blocker_id,
			blocked_id,
		)
		row = await conn.fetchrow(
			"SELECT blocker_id, blocked_id, created_at FROM blocks WHERE blocker_id = $1 AND blocked_id = $2",
			blocker_id,
			blocked_id,
		)
	obs_metrics.inc_block("block")
	await _log_event("block.created", {"blocker_id": blocker_id, "blocked_id": blocked_id})
	return BlockOut.from_model(Block.from_record(row))


async def unblock_user(auth_user: AuthenticatedUser, target_id: UUID | str) -> bool:
	blocker_id = as_user_id(auth_user.id)
	blocked_id = as_user_id(target_id, reason="invalid_target_user_id")
	await policy.enforce_block_limits(blocker_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		removed = await conn.fetchval(
			"DELETE FROM blocks WHERE blocker_id = $1 AND blocked_id = $2 RETURNING blocked_id",
			blocker_id,
			blocked_id,
		)
	if removed is not None:
		obs_metrics.inc_block("unblock")
		await _log_event("block.removed", {"blocker_id": blocker_id, "blocked_id": blocked_id})
	return removed is not None


async def report_user(auth_user: AuthenticatedUser, payload: ReportRequest) -> ReportOut:
	reporter_id = as_user_id(auth_user.id)
	reported_id = as_user_id(payload.target_user_id, reason="invalid_target_user_id")
	policy.guard_not_self(reporter_id, reported_id, action="report")
	await policy.enforce_report_limits(reporter_id)
	pool = await get_pool()
	async with pool.acquire() as conn:
		await policy.ensure_user_exists(conn, reported_id)
		row = await conn.fetchrow(
			"""
			INSERT INTO reports (id, reporter_id, reported_id, reason, details)
			VALUES ($1, $2, $3, $4, $5)
			RETURNING *
			""",
			uuid4(),
			reporter_id,
			reported_id,
			payload.reason.value,
			payload.details,
		)
	report = Report.from_record(row)
	obs_metrics.inc_report(report.reason.value)
	await _log_event("report.created", {"report_id": str(report.id), "reason": report.reason.value})
	return ReportOut.from_model(report)


async def list_reports(status: Optional[ReportStatus], params: PageParams) -> Page[ReportOut]:
	status_value = status.value if status else None
	pool = await get_pool()
	async with pool.acquire() as conn:
		total = await conn.fetchval(
			"SELECT COUNT(*) FROM reports WHERE ($1::text IS NULL OR status = $1)",
			status_value,
		)
		rows = await conn.fetch(
			"""
			SELECT * FROM reports
			WHERE ($1::text IS NULL OR status = $1)
			ORDER BY created_at DESC, id DESC
			LIMIT $2 OFFSET $3
			""",
			status_value,
			params.limit,
			params.offset,
		)
	items = [ReportOut.from_model(Report.from_record(r)) for r in rows]
	return Page[ReportOut].build(items, params=params, total=int(total or 0))


async def update_report_status(staff: AuthenticatedUser, report_id: UUID | str, status: ReportStatus) -> ReportOut:
	pool = await get_pool()
	async with pool.acquire() as conn:
		row = await conn.fetchrow(
			"UPDATE reports SET status = $2, updated_at = NOW() WHERE id = $1 RETURNING *",
			str(report_id),
			status.value,
		)
	if not row:
		raise ReportNotFound()
	await _log_event(
		"report.status",
		{"report_id": str(report_id), "status": status.value, "staff_id": str(staff.id)},
	)
	return ReportOut.from_model(Report.from_record(row))
