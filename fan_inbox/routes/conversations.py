"""
Conversation routes: list, detail, reply and tag editing.
"""
from fastapi import APIRouter, Depends, Request
from typing import Optional
from pydantic import BaseModel

from ..auth import AuthUser, get_required_user
from ..config import Settings, get_settings
from ..inbox import InboxService, get_inbox
from ..limiter import limiter
from ..responses import created, not_found, success, updated
from ..schemas.conversation import MessageCreate, TagsUpdate

settings = get_settings()

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


def _dump(model: BaseModel) -> dict:
    return model.model_dump(by_alias=True, mode="json")


@router.get("")
def list_conversations(
    request: Request,
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "recent",
    inbox: InboxService = Depends(get_inbox),
    current_user: AuthUser = Depends(get_required_user),
):
    """List conversations, optionally filtered by status or search text."""
    conversations, cached = inbox.list_conversations(status=status, search=search, sort=sort)
    request.state.result_count = len(conversations)
    request.state.cached = cached
    return success(
        [_dump(c) for c in conversations],
        meta={"count": len(conversations), "cached": cached},
    )


@router.post("/reset")
def reset_conversations(
    inbox: InboxService = Depends(get_inbox),
    app_settings: Settings = Depends(get_settings),
    current_user: AuthUser = Depends(get_required_user),
):
    """Restore the seed data. Only available in debug mode."""
    if not app_settings.debug:
        not_found("Route")
    inbox.reset_store()
    return success(message="Conversation store reset")


@router.get("/{conversation_id}/messages")
def get_conversation_detail(
    conversation_id: str,
    request: Request,
    inbox: InboxService = Depends(get_inbox),
    current_user: AuthUser = Depends(get_required_user),
):
    """Get a conversation's fan summary and its messages in chronological order."""
    detail, cached = inbox.get_conversation_detail(conversation_id)
    request.state.result_count = len(detail.messages)
    request.state.cached = cached
    return success(
        _dump(detail),
        meta={"count": len(detail.messages), "cached": cached},
    )


@router.post("/{conversation_id}/messages", status_code=201)
@limiter.limit(settings.message_rate_limit)
def send_message(
    conversation_id: str,
    payload: MessageCreate,
    request: Request,
    inbox: InboxService = Depends(get_inbox),
    current_user: AuthUser = Depends(get_required_user),
):
    """Append a message to a conversation."""
    message = inbox.append_message(conversation_id, payload.body, payload.from_)
    return created(_dump(message), "Message sent")


@router.patch("/{conversation_id}")
def update_tags(
    conversation_id: str,
    payload: TagsUpdate,
    inbox: InboxService = Depends(get_inbox),
    current_user: AuthUser = Depends(get_required_user),
):
    """Replace the fan's tag list."""
    conversation = inbox.replace_tags(conversation_id, payload.tags)
    return updated(_dump(conversation), "Tags updated")
