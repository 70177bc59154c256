from datetime import datetime, timezone
from uuid import uuid4

import pytest

from heartline.domain.common.schemas import Page
from heartline.domain.moderation import service
from heartline.domain.moderation.exceptions import SelfModeration
from heartline.domain.moderation.schemas import BlockOut, ReportOut

USER = "ffffffff-1111-1111-1111-111111111111"


def _report(status="pending"):
    now = datetime.now(timezone.utc)
    return ReportOut(
        id=uuid4(),
        reporter_id=uuid4(),
        reported_id=uuid4(),
        reason="spam",
        status=status,
        created_at=now,
        updated_at=now,
    )


@pytest.mark.asyncio
async def test_block_and_unblock(monkeypatch, api_client):
    target = uuid4()

    async def fake_block(auth_user, target_id):
        return BlockOut(blocker_id=auth_user.id, blocked_id=target_id, created_at=datetime.now(timezone.utc))

    async def fake_unblock(auth_user, target_id):
        return True

    monkeypatch.setattr(service, "block_user", fake_block)
    monkeypatch.setattr(service, "unblock_user", fake_unblock)

    blocked = await api_client.post(
        "/api/v1/moderation/block", json={"targetUserId": str(target)}, headers={"X-User-Id": USER}
    )
    assert blocked.status_code == 201
    assert blocked.json()["data"]["blockedId"] == str(target)

    unblocked = await api_client.delete(f"/api/v1/moderation/block/{target}", headers={"X-User-Id": USER})
    assert unblocked.json()["data"] == {"removed": True}


@pytest.mark.asyncio
async def test_report_self_is_rejected(monkeypatch, api_client):
    async def fake_report(auth_user, payload):
        raise SelfModeration("self_report")

    monkeypatch.setattr(service, "report_user", fake_report)

    response = await api_client.post(
        "/api/v1/moderation/report",
        json={"targetUserId": USER, "reason": "spam"},
        headers={"X-User-Id": USER},
    )
    assert response.status_code == 400
    assert response.json()["reason"] == "self_report"


@pytest.mark.asyncio
async def test_admin_reports_require_staff_role(api_client):
    response = await api_client.get("/api/v1/moderation/admin/reports", headers={"X-User-Id": USER})
    assert response.status_code == 403
    assert response.json()["message"] == "insufficient_role"


@pytest.mark.asyncio
async def test_moderator_lists_and_updates_reports(monkeypatch, api_client):
    seen = {}

    async def fake_list(status, params):
        seen["status"] = status
        return Page[ReportOut].build([_report()], params=params, total=1)

    async def fake_update(staff, report_id, status):
        seen["staff"] = staff.role
        return _report(status=status)

    monkeypatch.setattr(service, "list_reports", fake_list)
    monkeypatch.setattr(service, "update_report_status", fake_update)
    headers = {"X-User-Id": USER, "X-User-Role": "moderator"}

    listed = await api_client.get("/api/v1/moderation/admin/reports", params={"status": "pending"}, headers=headers)
    assert listed.status_code == 200
    assert seen["status"].value == "pending"
    assert listed.json()["data"]["total"] == 1

    updated = await api_client.patch(
        f"/api/v1/moderation/admin/reports/{uuid4()}", json={"status": "resolved"}, headers=headers
    )
    assert updated.json()["data"]["status"] == "resolved"
    assert seen["staff"] == "moderator"
