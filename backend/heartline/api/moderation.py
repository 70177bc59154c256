"""Blocking, reporting and the staff report queue."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from heartline.api.envelope import Envelope, ok
from heartline.api.pagination import page_params
from heartline.domain.common.schemas import Page, PageParams
from heartline.domain.moderation import service
from heartline.domain.moderation.models import ReportStatus
from heartline.domain.moderation.schemas import BlockOut, BlockRequest, ReportOut, ReportRequest, ReportStatusUpdate
from heartline.infra.auth import AuthenticatedUser, get_current_user, require_roles

router = APIRouter(prefix="/moderation", tags=["moderation"])

_staff_only = require_roles("admin", "moderator")


@router.post("/block", response_model=Envelope[BlockOut], status_code=status.HTTP_201_CREATED)
async def block_user(
	payload: BlockRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.block_user(auth_user, payload.target_user_id), "User blocked.")


@router.delete("/block/{user_id}", response_model=Envelope[dict])
async def unblock_user(user_id: UUID, auth_user: AuthenticatedUser = Depends(get_current_user)) -> Envelope:
	removed = await service.unblock_user(auth_user, user_id)
	return ok({"removed": removed}, "User unblocked." if removed else "User was not blocked.")


@router.post("/report", response_model=Envelope[ReportOut], status_code=status.HTTP_201_CREATED)
async def report_user(
	payload: ReportRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
) -> Envelope:
	return ok(await service.report_user(auth_user, payload), "Report submitted.")


@router.get("/admin/reports", response_model=Envelope[Page[ReportOut]])
async def list_reports(
	report_status: Optional[ReportStatus] = Query(default=None, alias="status"),
	params: PageParams = Depends(page_params),
	_: AuthenticatedUser = Depends(_staff_only),
) -> Envelope:
	return ok(await service.list_reports(report_status, params))


@router.patch("/admin/reports/{report_id}", response_model=Envelope[ReportOut])
async def update_report(
	report_id: UUID,
	payload: ReportStatusUpdate,
	staff: AuthenticatedUser = Depends(_staff_only),
) -> Envelope:
	return ok(await service.update_report_status(staff, report_id, payload.status), "Report updated.")
