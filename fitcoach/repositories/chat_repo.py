# fitcoach/repositories/chat_repo.py
from sqlmodel import Session, select

from fitcoach.models.chat import ChatMessage


class ChatRepository:

    def list_for_user(
        self, session: Session, user_id: int, limit: int = 50
    ) -> list[ChatMessage]:
        """Newest first."""
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.user_id == user_id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, message: ChatMessage) -> ChatMessage:
        session.add(message)
        session.commit()
        session.refresh(message)
        return message
