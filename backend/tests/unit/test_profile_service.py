from contextlib import asynccontextmanager
from datetime import date, timedelta
from uuid import uuid4

import pytest

from heartline.domain.common.errors import ValidationFailed
from heartline.domain.identity import policy, profile_service
from heartline.domain.identity.exceptions import (
    EmptyProfileUpdate,
    InvalidDateOfBirth,
    InvalidPhotoOrder,
    PhotoLimitReached,
    PhotoMinimumReached,
    PhotoNotFound,
    PromptLimitReached,
    PromptNotFound,
)
from heartline.domain.identity.schemas import (
    PhotoCreateRequest,
    PhotoOrderItem,
    ProfileUpdateRequest,
    PromptCreateRequest,
)
from heartline.domain.identity.scoring import FIELD_POINTS

USER_ID = "11111111-1111-1111-1111-111111111111"


class PhotoConnection:
    """Fake connection covering the user_photos statements used by the photo flows."""

    def __init__(self, photo_count: int) -> None:
        self.photos = [
            {"id": uuid4(), "user_id": USER_ID, "url": f"https://cdn.example/{i}.jpg", "position": i}
            for i in range(photo_count)
        ]
        self.scores: list[int] = []
        self.in_transaction = False

    @asynccontextmanager
    async def transaction(self):
        self.in_transaction = True
        try:
            yield
        finally:
            self.in_transaction = False

    async def fetchrow(self, sql, *args):
        if "FOR UPDATE" in sql:
            return {"id": USER_ID}
        if "SELECT position FROM user_photos" in sql:
            photo = next((p for p in self.photos if str(p["id"]) == args[0]), None)
            return {"position": photo["position"]} if photo else None
        if "AS photo_count" in sql:
            return {
                "bio": "hello",
                "date_of_birth": None,
                "gender": None,
                "gender_preference": None,
                "dating_intent": None,
                "city": None,
                "photo_count": len(self.photos),
                "prompt_count": 0,
            }
        if "INSERT INTO user_photos" in sql:
            photo_id, user_id, url, position = args
            row = {"id": photo_id, "user_id": user_id, "url": url, "position": position}
            self.photos.append(row)
            return row
        raise AssertionError(sql)

    async def fetchval(self, sql, *args):
        assert "COUNT(*) FROM user_photos" in sql
        return len(self.photos)

    async def execute(self, sql, *args):
        assert self.in_transaction
        if sql.startswith("DELETE FROM user_photos"):
            self.photos = [p for p in self.photos if str(p["id"]) != args[0]]
        elif "position = position - 1" in sql:
            for photo in self.photos:
                if photo["position"] > args[1]:
                    photo["position"] -= 1
        elif "position = position + 1" in sql:
            for photo in self.photos:
                if photo["position"] >= args[1]:
                    photo["position"] += 1
        elif "SET profile_score" in sql:
            self.scores.append(args[1])
        else:
            raise AssertionError(sql)
        return "OK"


@pytest.fixture
def photo_conn(monkeypatch):
    holder = {}

    class Pool:
        @asynccontextmanager
        async def acquire(self):
            yield holder["conn"]

    async def fake_get_pool():
        return Pool()

    monkeypatch.setattr(profile_service, "get_pool", fake_get_pool)

    def _make(count: int) -> PhotoConnection:
        holder["conn"] = PhotoConnection(count)
        return holder["conn"]

    return _make


@pytest.mark.asyncio
async def test_delete_photo_refused_at_two(photo_conn):
    conn = photo_conn(2)
    with pytest.raises(PhotoMinimumReached):
        await profile_service.delete_photo(USER_ID, conn.photos[0]["id"])
    assert len(conn.photos) == 2


@pytest.mark.asyncio
async def test_delete_photo_compacts_positions(photo_conn):
    conn = photo_conn(4)
    removed = conn.photos[1]["id"]

    await profile_service.delete_photo(USER_ID, removed)

    assert sorted(p["position"] for p in conn.photos) == [0, 1, 2]
    assert removed not in {p["id"] for p in conn.photos}
    # bio 10 + 3 photos * 6
    assert conn.scores == [28]


@pytest.mark.asyncio
async def test_delete_unknown_photo(photo_conn):
    photo_conn(3)
    with pytest.raises(PhotoNotFound):
        await profile_service.delete_photo(USER_ID, uuid4())


@pytest.mark.asyncio
async def test_add_photo_shifts_later_positions(photo_conn):
    conn = photo_conn(3)
    first_id = conn.photos[0]["id"]

    out = await profile_service.add_photo(
        USER_ID, PhotoCreateRequest(url="https://cdn.example/new.jpg", order=0)
    )

    assert out.position == 0
    by_id = {p["id"]: p["position"] for p in conn.photos}
    assert by_id[first_id] == 1
    assert sorted(by_id.values()) == [0, 1, 2, 3]
    assert conn.scores == [34]


@pytest.mark.asyncio
async def test_add_photo_clamps_position(photo_conn):
    photo_conn(2)
    out = await profile_service.add_photo(USER_ID, PhotoCreateRequest(url="https://cdn.example/x.jpg", order=9))
    assert out.position == 2


@pytest.mark.asyncio
async def test_add_photo_limit(photo_conn):
    photo_conn(5)
    with pytest.raises(PhotoLimitReached):
        await profile_service.add_photo(USER_ID, PhotoCreateRequest(url="https://cdn.example/x.jpg"))


def _items(pairs):
    return [PhotoOrderItem(id=photo_id, order=position) for photo_id, position in pairs]


def test_photo_order_accepts_permutation():
    ids = [uuid4() for _ in range(3)]
    profile_service.validate_photo_order({str(i) for i in ids}, _items(zip(ids, (2, 0, 1))))


@pytest.mark.parametrize(
    "build",
    [
        lambda ids: zip(ids[:2], (0, 1)),  # missing a photo
        lambda ids: zip(ids, (0, 0, 1)),  # duplicate slot
        lambda ids: zip(ids, (0, 1, 3)),  # out of range
        lambda ids: zip([ids[0], ids[0], ids[1]], (0, 1, 2)),  # duplicate id
        lambda ids: zip([ids[0], ids[1], uuid4()], (0, 1, 2)),  # foreign photo
    ],
)
def test_photo_order_rejects_invalid_orders(build):
    ids = [uuid4() for _ in range(3)]
    with pytest.raises(InvalidPhotoOrder):
        profile_service.validate_photo_order({str(i) for i in ids}, _items(build(ids)))


@pytest.mark.asyncio
async def test_update_profile_requires_a_field():
    with pytest.raises(EmptyProfileUpdate):
        await profile_service.update_profile(USER_ID, ProfileUpdateRequest())


def test_future_date_of_birth_is_rejected():
    today = date(2024, 6, 15)
    with pytest.raises(InvalidDateOfBirth):
        policy.guard_date_of_birth(today + timedelta(days=1), today)
    policy.guard_date_of_birth(today, today)
    policy.guard_date_of_birth(None, today)


def test_profile_update_cannot_clear_name():
    with pytest.raises(ValueError):
        ProfileUpdateRequest(name=None)
    assert ProfileUpdateRequest(dateOfBirth="1995-05-01").date_of_birth == date(1995, 5, 1)


class PromptConnection:
    """Fake connection covering the prompt and profile-field statements."""

    def __init__(self, prompt_count: int) -> None:
        self.user = {"id": USER_ID, "email": "pat@example.com", "name": "Pat", "profile_score": 0}
        self.prompts = [
            {"id": uuid4(), "user_id": USER_ID, "question": f"Question {i}?", "answer": f"Answer {i}"}
            for i in range(prompt_count)
        ]
        self.scores: list[int] = []
        self.statements: list[str] = []
        self.in_transaction = False

    @asynccontextmanager
    async def transaction(self):
        self.in_transaction = True
        try:
            yield
        finally:
            self.in_transaction = False

    async def fetchrow(self, sql, *args):
        assert args[0] == USER_ID or "INSERT INTO prompts" in sql
        if "FOR UPDATE" in sql:
            return {"id": USER_ID}
        if "AS photo_count" in sql:
            fields = {name: self.user.get(name) for name in FIELD_POINTS}
            return {**fields, "photo_count": 0, "prompt_count": len(self.prompts)}
        if "INSERT INTO prompts" in sql:
            prompt_id, user_id, question, answer = args
            row = {"id": prompt_id, "user_id": user_id, "question": question, "answer": answer}
            self.prompts.append(row)
            self.statements.append("insert_prompt")
            return row
        if sql.startswith("SELECT * FROM users"):
            return dict(self.user)
        raise AssertionError(sql)

    async def fetchval(self, sql, *args):
        if "COUNT(*) FROM prompts" in sql:
            return len(self.prompts)
        if sql.startswith("DELETE FROM prompts"):
            before = len(self.prompts)
            self.prompts = [p for p in self.prompts if str(p["id"]) != args[0]]
            return args[0] if len(self.prompts) < before else None
        raise AssertionError(sql)

    async def fetch(self, sql, *args):
        if "FROM prompts" in sql:
            return list(self.prompts)
        if "FROM user_photos" in sql:
            return []
        raise AssertionError(sql)

    async def execute(self, sql, *args):
        assert self.in_transaction
        assert args[0] == USER_ID
        if "SET profile_score" in sql:
            self.user["profile_score"] = args[1]
            self.scores.append(args[1])
            self.statements.append("score")
        elif sql.startswith("UPDATE users SET"):
            assignments = sql[len("UPDATE users SET "):].split(", updated_at")[0]
            for assignment, value in zip(assignments.split(", "), args[1:]):
                self.user[assignment.split(" = ")[0]] = value
            self.statements.append("update_columns")
        else:
            raise AssertionError(sql)
        return "OK"


@pytest.fixture
def prompt_conn(monkeypatch):
    holder = {}

    class Pool:
        @asynccontextmanager
        async def acquire(self):
            yield holder["conn"]

    async def fake_get_pool():
        return Pool()

    monkeypatch.setattr(profile_service, "get_pool", fake_get_pool)

    def _make(count: int = 0) -> PromptConnection:
        holder["conn"] = PromptConnection(count)
        return holder["conn"]

    return _make


def _prompt() -> PromptCreateRequest:
    return PromptCreateRequest(question="Best taco in town?", answer="Al pastor on Fifth")


@pytest.mark.asyncio
async def test_fourth_prompt_is_refused_without_insert(prompt_conn):
    conn = prompt_conn(3)

    with pytest.raises(PromptLimitReached) as exc_info:
        await profile_service.add_prompt(USER_ID, _prompt())

    assert exc_info.value.reason == "prompt_limit"
    assert "insert_prompt" not in conn.statements
    assert len(conn.prompts) == 3
    assert conn.scores == []


@pytest.mark.asyncio
async def test_add_and_delete_prompt_rescore_profile(prompt_conn):
    conn = prompt_conn()

    out = await profile_service.add_prompt(USER_ID, _prompt())
    assert out.answer == "Al pastor on Fifth"
    assert conn.scores == [10]

    await profile_service.delete_prompt(USER_ID, out.id)
    assert conn.prompts == []
    assert conn.scores == [10, 0]


@pytest.mark.asyncio
async def test_delete_unknown_prompt(prompt_conn):
    conn = prompt_conn(1)
    with pytest.raises(PromptNotFound):
        await profile_service.delete_prompt(USER_ID, uuid4())
    assert conn.scores == []


@pytest.mark.asyncio
async def test_update_profile_rescores_after_column_update(prompt_conn):
    conn = prompt_conn(1)

    out = await profile_service.update_profile(USER_ID, ProfileUpdateRequest(bio="Trail runner", city="Austin"))

    assert conn.statements == ["update_columns", "score"]
    # bio 10 + city 10 + one prompt 10
    assert conn.scores == [30]
    assert out.profile_score == 30
    assert out.bio == "Trail runner"
    assert out.city == "Austin"
    assert len(out.prompts) == 1


@pytest.mark.asyncio
async def test_profile_ids_are_normalised(prompt_conn):
    conn = prompt_conn()

    out = await profile_service.get_profile(USER_ID.upper())
    assert str(out.id) == USER_ID

    with pytest.raises(ValidationFailed) as exc_info:
        await profile_service.add_prompt("not-a-uuid", _prompt())
    assert exc_info.value.reason == "invalid_user_id"
    assert conn.statements == []
