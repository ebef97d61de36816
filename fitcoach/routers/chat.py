# fitcoach/routers/chat.py
from fastapi import APIRouter, Depends, Query
from openai import OpenAI
from sqlmodel import Session

from fitcoach.core.auth import get_current_user
from fitcoach.database import get_session
from fitcoach.models.user import User
from fitcoach.repositories.chat_repo import ChatRepository
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.schemas.chat import ChatMessageCreate, ChatMessageRead, ChatReply
from fitcoach.services.chat_service import ChatService, get_openai_client

router = APIRouter(prefix="/chat", tags=["Chat"])

service = ChatService(ChatRepository(), UserRepository())


@router.get("/messages", response_model=list[ChatMessageRead])
def list_messages(
    limit: int = Query(default=50, ge=1, le=200),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Conversation history, newest first."""
    return service.list_messages(session, current_user, limit)


@router.post("/message", response_model=ChatReply)
def send_message(
    payload: ChatMessageCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    client: OpenAI | None = Depends(get_openai_client),
):
    """
    Send a message to the AI coach.

    Free tier: limited number of messages per UTC day (429 when exhausted).
    """
    reply = service.send_message(session, current_user, payload.message, client)
    return {"message": reply}
