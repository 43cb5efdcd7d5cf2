"""Unit tests for ConversationService ownership and soft deletion."""

from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from redflag.domain.auth.model.value import UserId
from redflag.domain.conversation.model.conversation import Conversation, ConversationId, Role
from redflag.domain.conversation.service.conversation import ConversationService
from redflag.domain.shared.error import NotFoundError, ValidationError


def _make_repo(conversation: Conversation | None = None) -> AsyncMock:
    repo = AsyncMock()
    repo.get.return_value = conversation
    repo.list_messages.return_value = []
    return repo


class TestCreate:
    @pytest.mark.asyncio
    async def test_creates_and_saves(self) -> None:
        repo = _make_repo()
        user_id = UserId.generate()

        conversation = await ConversationService(_repo=repo).create(user_id, "  Date chat  ")

        assert conversation.title == "Date chat"
        assert conversation.user_id == user_id
        repo.save.assert_awaited_once_with(conversation)

    @pytest.mark.asyncio
    async def test_blank_title_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            await ConversationService(_repo=_make_repo()).create(UserId.generate(), "   ")


class TestOwnership:
    @pytest.mark.asyncio
    async def test_owner_can_read_messages(self) -> None:
        user_id = UserId.generate()
        conversation = Conversation.create(user_id=user_id, title="Chat")
        repo = _make_repo(conversation)

        await ConversationService(_repo=repo).messages(user_id, conversation.id)

        repo.list_messages.assert_awaited_once_with(conversation.id)

    @pytest.mark.asyncio
    async def test_other_users_conversation_is_not_found(self) -> None:
        conversation = Conversation.create(user_id=UserId.generate(), title="Chat")
        service = ConversationService(_repo=_make_repo(conversation))

        with pytest.raises(NotFoundError):
            await service.messages(UserId.generate(), conversation.id)

    @pytest.mark.asyncio
    async def test_missing_conversation_is_not_found(self) -> None:
        service = ConversationService(_repo=_make_repo(None))

        with pytest.raises(NotFoundError):
            await service.soft_delete(UserId.generate(), ConversationId.generate())


class TestSoftDelete:
    @pytest.mark.asyncio
    async def test_marks_conversation_deleted(self) -> None:
        user_id = UserId.generate()
        conversation = Conversation.create(user_id=user_id, title="Chat")
        repo = _make_repo(conversation)

        await ConversationService(_repo=repo).soft_delete(user_id, conversation.id)

        repo.soft_delete.assert_awaited_once()
        conversation_id, at = repo.soft_delete.await_args.args
        assert conversation_id == conversation.id
        assert isinstance(at, datetime)


class TestAddMessage:
    @pytest.mark.asyncio
    async def test_appends_to_owned_conversation(self) -> None:
        user_id = UserId.generate()
        conversation = Conversation.create(user_id=user_id, title="Chat")
        repo = _make_repo(conversation)

        message = await ConversationService(_repo=repo).add_message(
            user_id, conversation.id, Role.USER, "is this a red flag?"
        )

        assert message.conversation_id == conversation.id
        repo.add_message.assert_awaited_once_with(message)

    @pytest.mark.asyncio
    async def test_empty_content_is_rejected(self) -> None:
        user_id = UserId.generate()
        conversation = Conversation.create(user_id=user_id, title="Chat")

        with pytest.raises(ValidationError):
            await ConversationService(_repo=_make_repo(conversation)).add_message(
                user_id, conversation.id, Role.USER, "  "
            )
