from datetime import date
from uuid import uuid4

import pytest

from heartline.domain.identity import profile_service
from heartline.domain.identity.exceptions import PhotoMinimumReached, PromptLimitReached, PromptNotFound
from heartline.domain.identity.schemas import PhotoOut, ProfileOut, PromptOut

USER = "dddddddd-1111-1111-1111-111111111111"


def _profile(**overrides):
    data = {"id": USER, "email": "dee@example.com", "name": "Dee", "profile_score": 72}
    data.update(overrides)
    return ProfileOut(**data)


@pytest.mark.asyncio
async def test_get_me(monkeypatch, api_client):
    async def fake_get_profile(user_id):
        assert user_id == USER
        return _profile()

    monkeypatch.setattr(profile_service, "get_profile", fake_get_profile)

    response = await api_client.get("/api/v1/users/me", headers={"X-User-Id": USER})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["profileScore"] == 72
    assert "passwordHash" not in data


@pytest.mark.asyncio
async def test_patch_profile_passes_only_sent_fields(monkeypatch, api_client):
    seen = {}

    async def fake_update(user_id, payload):
        seen["fields"] = payload.model_dump(exclude_unset=True)
        return _profile(date_of_birth=date(1994, 3, 3))

    monkeypatch.setattr(profile_service, "update_profile", fake_update)

    response = await api_client.patch(
        "/api/v1/users/profile",
        json={"dateOfBirth": "1994-03-03", "datingIntent": "long_term"},
        headers={"X-User-Id": USER},
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Profile updated."
    assert set(seen["fields"]) == {"date_of_birth", "dating_intent"}


@pytest.mark.asyncio
async def test_add_prompt_limit(monkeypatch, api_client):
    async def fake_add(user_id, payload):
        raise PromptLimitReached()

    monkeypatch.setattr(profile_service, "add_prompt", fake_add)

    response = await api_client.post(
        "/api/v1/users/prompts",
        json={"question": "Perfect Sunday?", "answer": "Market, then a long lunch."},
        headers={"X-User-Id": USER},
    )

    assert response.status_code == 400
    assert response.json()["reason"] == "prompt_limit"


@pytest.mark.asyncio
async def test_update_and_delete_prompt(monkeypatch, api_client):
    prompt_id = uuid4()

    async def fake_update(user_id, pid, payload):
        return PromptOut(id=pid, question="Q?", answer=payload.answer)

    async def fake_delete(user_id, pid):
        raise PromptNotFound()

    monkeypatch.setattr(profile_service, "update_prompt", fake_update)
    monkeypatch.setattr(profile_service, "delete_prompt", fake_delete)

    updated = await api_client.patch(
        f"/api/v1/users/prompts/{prompt_id}", json={"answer": "Tacos"}, headers={"X-User-Id": USER}
    )
    assert updated.json()["data"]["answer"] == "Tacos"

    deleted = await api_client.delete(f"/api/v1/users/prompts/{prompt_id}", headers={"X-User-Id": USER})
    assert deleted.status_code == 404


@pytest.mark.asyncio
async def test_photo_endpoints(monkeypatch, api_client):
    photo_id = uuid4()

    async def fake_add(user_id, payload):
        return PhotoOut(id=photo_id, url=str(payload.url), position=payload.position or 0)

    async def fake_delete(user_id, pid):
        raise PhotoMinimumReached()

    async def fake_reorder(user_id, payload):
        return [PhotoOut(id=item.id, url="https://cdn.example/a.jpg", position=item.position) for item in payload.photos]

    monkeypatch.setattr(profile_service, "add_photo", fake_add)
    monkeypatch.setattr(profile_service, "delete_photo", fake_delete)
    monkeypatch.setattr(profile_service, "reorder_photos", fake_reorder)

    added = await api_client.post(
        "/api/v1/users/photos", json={"url": "https://cdn.example/a.jpg", "order": 1}, headers={"X-User-Id": USER}
    )
    assert added.status_code == 201
    assert added.json()["data"]["position"] == 1

    bad_url = await api_client.post("/api/v1/users/photos", json={"url": "not a url"}, headers={"X-User-Id": USER})
    assert bad_url.status_code == 400

    deleted = await api_client.delete(f"/api/v1/users/photos/{photo_id}", headers={"X-User-Id": USER})
    assert deleted.status_code == 400
    assert deleted.json()["reason"] == "photo_minimum"

    reordered = await api_client.put(
        "/api/v1/users/photos/order",
        json={"photos": [{"id": str(photo_id), "order": 0}]},
        headers={"X-User-Id": USER},
    )
    assert reordered.status_code == 200
    assert reordered.json()["data"][0]["position"] == 0


@pytest.mark.asyncio
async def test_malformed_dev_user_id_is_a_validation_failure(api_client):
    response = await api_client.get("/api/v1/users/me", headers={"X-User-Id": "not-a-uuid"})

    assert response.status_code == 400
    body = response.json()
    assert body["status"] == "fail"
    assert body["reason"] == "invalid_user_id"
