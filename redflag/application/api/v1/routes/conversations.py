"""Conversation, message and upload routes, scoped to the calling user."""

from datetime import datetime
from typing import Any
from uuid import UUID

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter, Query, Response
from pydantic import BaseModel, Field

from redflag.domain.auth.model.identity import SessionIdentity
from redflag.domain.conversation.model.conversation import (
    Category,
    Conversation,
    ConversationId,
    Message,
    Role,
)
from redflag.domain.conversation.service.conversation import ConversationService
from redflag.domain.retention.model.resource import UploadedResource
from redflag.domain.retention.service.retention import RetentionService

router = APIRouter(prefix="/api/conversations", tags=["Conversations"], route_class=DishkaRoute)


class CreateConversationRequest(BaseModel):
    title: str
    category: Category | None = None


class ConversationResponse(BaseModel):
    id: str
    title: str
    category: Category | None
    red_flag_score: float | None
    created_at: datetime
    updated_at: datetime


class ConversationListResponse(BaseModel):
    items: list[ConversationResponse]


class AddMessageRequest(BaseModel):
    role: Role
    content: str
    red_flag_data: dict[str, Any] | None = None


class MessageResponse(BaseModel):
    id: str
    role: Role
    content: str
    red_flag_data: dict[str, Any] | None
    created_at: datetime


class MessageListResponse(BaseModel):
    items: list[MessageResponse]


class RegisterFileRequest(BaseModel):
    storage_url: str
    storage_id: str
    file_type: str
    size: int | None = Field(default=None, ge=0)


class FileResponse(BaseModel):
    id: str
    storage_url: str
    file_type: str
    size: int | None
    created_at: datetime
    auto_delete_at: datetime


class FileListResponse(BaseModel):
    items: list[FileResponse]


def _conversation_response(conversation: Conversation) -> ConversationResponse:
    return ConversationResponse(
        id=str(conversation.id),
        title=conversation.title,
        category=conversation.category,
        red_flag_score=conversation.red_flag_score,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
    )


def _message_response(message: Message) -> MessageResponse:
    return MessageResponse(
        id=str(message.id),
        role=message.role,
        content=message.content,
        red_flag_data=message.red_flag_data,
        created_at=message.created_at,
    )


def _file_response(resource: UploadedResource) -> FileResponse:
    return FileResponse(
        id=str(resource.id),
        storage_url=resource.storage_url,
        file_type=resource.file_type,
        size=resource.size,
        created_at=resource.created_at,
        auto_delete_at=resource.auto_delete_at,
    )


@router.get("")
async def list_conversations(
    identity: FromDishka[SessionIdentity],
    service: FromDishka[ConversationService],
    limit: int = Query(default=50, ge=1, le=200),
) -> ConversationListResponse:
    conversations = await service.list_for_user(identity.user_id, limit=limit)
    return ConversationListResponse(items=[_conversation_response(c) for c in conversations])


@router.post("", status_code=201)
async def create_conversation(
    body: CreateConversationRequest,
    identity: FromDishka[SessionIdentity],
    service: FromDishka[ConversationService],
) -> ConversationResponse:
    conversation = await service.create(identity.user_id, body.title, body.category)
    return _conversation_response(conversation)


@router.delete("/{conversation_id}", status_code=204)
async def delete_conversation(
    conversation_id: UUID,
    identity: FromDishka[SessionIdentity],
    service: FromDishka[ConversationService],
) -> Response:
    """Soft delete: the conversation and its messages disappear from every read."""
    await service.soft_delete(identity.user_id, ConversationId(conversation_id))
    return Response(status_code=204)


@router.get("/{conversation_id}/messages")
async def list_messages(
    conversation_id: UUID,
    identity: FromDishka[SessionIdentity],
    service: FromDishka[ConversationService],
) -> MessageListResponse:
    messages = await service.messages(identity.user_id, ConversationId(conversation_id))
    return MessageListResponse(items=[_message_response(m) for m in messages])


@router.post("/{conversation_id}/messages", status_code=201)
async def add_message(
    conversation_id: UUID,
    body: AddMessageRequest,
    identity: FromDishka[SessionIdentity],
    service: FromDishka[ConversationService],
) -> MessageResponse:
    message = await service.add_message(
        identity.user_id,
        ConversationId(conversation_id),
        role=body.role,
        content=body.content,
        red_flag_data=body.red_flag_data,
    )
    return _message_response(message)


@router.post("/{conversation_id}/files", status_code=201)
async def register_file(
    conversation_id: UUID,
    body: RegisterFileRequest,
    identity: FromDishka[SessionIdentity],
    retention: FromDishka[RetentionService],
) -> FileResponse:
    """Record a file the client already placed in the blob store.

    Its expiry is fixed now from the current retention window.
    """
    resource = await retention.register_upload(
        identity.user_id,
        ConversationId(conversation_id),
        storage_url=body.storage_url,
        storage_id=body.storage_id,
        file_type=body.file_type,
        size=body.size,
    )
    return _file_response(resource)


@router.get("/{conversation_id}/files")
async def list_files(
    conversation_id: UUID,
    identity: FromDishka[SessionIdentity],
    retention: FromDishka[RetentionService],
) -> FileListResponse:
    resources = await retention.list_for_conversation(identity.user_id, ConversationId(conversation_id))
    return FileListResponse(items=[_file_response(r) for r in resources])
