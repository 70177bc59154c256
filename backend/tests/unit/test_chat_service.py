from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest

from heartline.domain.chat.exceptions import ConversationBlocked, ConversationNotFound, NotParticipant
from heartline.domain.chat.models import Conversation, Message
from heartline.domain.chat.schemas import SendMessageRequest
from heartline.domain.chat.service import ChatService
from heartline.domain.common.schemas import PageParams
from heartline.domain.matching import activity
from heartline.domain.matching.exceptions import MatchNotFound
from heartline.domain.matching.models import Match
from heartline.infra.auth import AuthenticatedUser
from heartline.infra.rate_limit import RateLimitExceeded
from heartline.settings import settings

ALICE = "aaaaaaaa-0000-0000-0000-000000000001"
BOB = "bbbbbbbb-0000-0000-0000-000000000002"
EVE = "eeeeeeee-0000-0000-0000-000000000003"


class FakeRepo:
    def __init__(self) -> None:
        now = datetime.now(timezone.utc)
        self.match = Match(id=uuid4(), user_one_id=UUID(ALICE), user_two_id=UUID(BOB), created_at=now)
        self.conversation = Conversation(
            id=uuid4(),
            match_id=self.match.id,
            user_one_id=self.match.user_one_id,
            user_two_id=self.match.user_two_id,
            created_at=now,
            updated_at=now,
        )
        self.blocked: set[frozenset[str]] = set()
        self.messages: list[Message] = []
        self.conversations_created = 0

    async def get_match(self, match_id: str):
        return self.match if match_id == str(self.match.id) else None

    async def get_or_create_conversation(self, match: Match) -> Conversation:
        self.conversations_created += 1
        return self.conversation

    async def get_conversation(self, conversation_id: str):
        return self.conversation if conversation_id == str(self.conversation.id) else None

    async def is_blocked(self, user_a: str, user_b: str) -> bool:
        return frozenset((str(user_a), str(user_b))) in self.blocked

    async def create_message(self, conversation_id: str, sender_id: str, content: str) -> Message:
        message = Message(
            id=uuid4(),
            conversation_id=UUID(conversation_id),
            sender_id=UUID(sender_id),
            content=content,
            created_at=datetime.now(timezone.utc),
        )
        self.messages.append(message)
        return message

    async def list_messages(self, conversation_id: str, *, limit: int, offset: int):
        return self.messages[offset : offset + limit], len(self.messages)

    async def mark_read(self, conversation_id: str, reader_id: str) -> int:
        unread = [m for m in self.messages if str(m.sender_id) != reader_id and m.read_at is None]
        for message in unread:
            message.read_at = datetime.now(timezone.utc)
        return len(unread)


@pytest.fixture
def bumps(monkeypatch):
    calls: list[tuple] = []

    async def fake_bump(amount, *user_ids):
        calls.append((amount, *user_ids))

    monkeypatch.setattr(activity, "bump_activity_later", fake_bump)
    return calls


@pytest.mark.asyncio
async def test_participant_sends_message_and_gains_activity(bumps):
    repo = FakeRepo()
    service = ChatService(repository=repo)

    out = await service.send_message(
        AuthenticatedUser(id=ALICE),
        repo.conversation.id,
        SendMessageRequest(content="  hey there  "),
    )

    assert out.content == "hey there"
    assert str(out.sender_id) == ALICE
    assert bumps == [(activity.MESSAGE_POINTS, ALICE)]


@pytest.mark.asyncio
async def test_non_participant_cannot_send(bumps):
    repo = FakeRepo()
    service = ChatService(repository=repo)

    with pytest.raises(NotParticipant):
        await service.send_message(AuthenticatedUser(id=EVE), repo.conversation.id, SendMessageRequest(content="hi"))
    assert repo.messages == []
    assert bumps == []


@pytest.mark.asyncio
async def test_blocked_pair_cannot_send(bumps):
    repo = FakeRepo()
    repo.blocked.add(frozenset((ALICE, BOB)))
    service = ChatService(repository=repo)

    with pytest.raises(ConversationBlocked):
        await service.send_message(AuthenticatedUser(id=BOB), repo.conversation.id, SendMessageRequest(content="hi"))
    assert repo.messages == []


@pytest.mark.asyncio
async def test_unknown_conversation(bumps):
    service = ChatService(repository=FakeRepo())
    with pytest.raises(ConversationNotFound):
        await service.send_message(AuthenticatedUser(id=ALICE), uuid4(), SendMessageRequest(content="hi"))


@pytest.mark.asyncio
async def test_open_conversation_gate():
    repo = FakeRepo()
    service = ChatService(repository=repo)

    out = await service.open_conversation(AuthenticatedUser(id=BOB), repo.match.id)
    assert out.id == repo.conversation.id

    with pytest.raises(NotParticipant):
        await service.open_conversation(AuthenticatedUser(id=EVE), repo.match.id)
    with pytest.raises(MatchNotFound):
        await service.open_conversation(AuthenticatedUser(id=ALICE), uuid4())

    repo.blocked.add(frozenset((ALICE, BOB)))
    with pytest.raises(ConversationBlocked):
        await service.open_conversation(AuthenticatedUser(id=ALICE), repo.match.id)
    assert repo.conversations_created == 1


@pytest.mark.asyncio
async def test_list_and_mark_read(bumps):
    repo = FakeRepo()
    service = ChatService(repository=repo)
    alice, bob = AuthenticatedUser(id=ALICE), AuthenticatedUser(id=BOB)

    for text in ("one", "two", "three"):
        await service.send_message(alice, repo.conversation.id, SendMessageRequest(content=text))
    await service.send_message(bob, repo.conversation.id, SendMessageRequest(content="reply"))

    page = await service.list_messages(bob, repo.conversation.id, PageParams(page=1, limit=2))
    assert [m.content for m in page.items] == ["one", "two"]
    assert page.total == 4
    assert page.total_pages == 2

    receipt = await service.mark_read(bob, repo.conversation.id)
    assert receipt.updated == 3
    # bob's own message stays unread
    assert [m.read_at is None for m in repo.messages] == [False, False, False, True]

    with pytest.raises(NotParticipant):
        await service.mark_read(AuthenticatedUser(id=EVE), repo.conversation.id)


@pytest.mark.asyncio
async def test_message_rate_limit(bumps, monkeypatch):
    monkeypatch.setattr(settings, "message_per_minute", 1)
    repo = FakeRepo()
    service = ChatService(repository=repo)
    alice = AuthenticatedUser(id=ALICE)

    await service.send_message(alice, repo.conversation.id, SendMessageRequest(content="first"))
    with pytest.raises(RateLimitExceeded):
        await service.send_message(alice, repo.conversation.id, SendMessageRequest(content="second"))
    assert len(repo.messages) == 1


def test_message_content_is_trimmed_and_bounded():
    with pytest.raises(ValueError):
        SendMessageRequest(content="   ")
    with pytest.raises(ValueError):
        SendMessageRequest(content="x" * 2001)
    assert SendMessageRequest(content="x" * 2000).content == "x" * 2000


def test_conversation_participants_compare_as_uuids():
    conversation = FakeRepo().conversation
    assert conversation.is_participant(ALICE.upper())
    assert conversation.is_participant(UUID(BOB))
    assert conversation.other(ALICE.upper()) == BOB
    assert not conversation.is_participant(EVE)


@pytest.mark.asyncio
async def test_upper_case_user_id_passes_every_gate(bumps):
    repo = FakeRepo()
    service = ChatService(repository=repo)
    alice = AuthenticatedUser(id=ALICE.upper())

    opened = await service.open_conversation(alice, repo.match.id)
    sent = await service.send_message(alice, opened.id, SendMessageRequest(content="hello"))
    page = await service.list_messages(alice, opened.id, PageParams())
    receipt = await service.mark_read(AuthenticatedUser(id=BOB.upper()), opened.id)

    assert str(sent.sender_id) == ALICE
    assert bumps == [(activity.MESSAGE_POINTS, ALICE)]
    assert page.total == 1
    assert receipt.updated == 1


@pytest.mark.asyncio
async def test_blocks_apply_to_upper_case_user_ids(bumps):
    repo = FakeRepo()
    repo.blocked.add(frozenset((ALICE, BOB)))
    service = ChatService(repository=repo)

    with pytest.raises(ConversationBlocked):
        await service.send_message(
            AuthenticatedUser(id=BOB.upper()), repo.conversation.id, SendMessageRequest(content="hi")
        )
