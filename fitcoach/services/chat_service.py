# fitcoach/services/chat_service.py
import logging
from functools import lru_cache

from fastapi import HTTPException, status
from openai import OpenAI
from sqlmodel import Session

from fitcoach.core.config import get_settings
from fitcoach.models.chat import ChatMessage
from fitcoach.models.user import User
from fitcoach.repositories.chat_repo import ChatRepository
from fitcoach.repositories.user_repo import UserRepository
from fitcoach.services.reconciliation_service import today_iso

logger = logging.getLogger(__name__)

CONTEXT_MESSAGES = 5
MAX_COMPLETION_TOKENS = 1000

SYSTEM_PROMPT = """\
You are FITlyAI, a virtual health and fitness coach.

- Provide detailed, evidence-based fitness and nutrition advice.
- Be encouraging and motivational.
- Point users to the dashboard for progress tracking and to the macro tools
  for calorie and macro questions.
- Prioritize safety; recommend a healthcare provider for medical concerns.

Your expertise covers personalized workout plans, nutrition and macro
calculations, progress tracking, goal setting, exercise technique, and
recovery. Keep a professional, encouraging tone.
"""

NOT_CONFIGURED_REPLY = (
    "I'm here to help with your fitness journey! However, the AI coach is not "
    "configured yet, so I can't give personalized responses right now."
)
FAILURE_REPLY = "I'm experiencing some technical difficulties. Please try again in a moment."
EMPTY_REPLY = "I apologize, but I couldn't generate a response at this time."
LIMIT_REACHED = "Daily message limit reached. Upgrade to Premium for unlimited messages."


@lru_cache
def get_openai_client() -> OpenAI | None:
    """Process-wide OpenAI client, or None when no API key is configured."""
    settings = get_settings()
    if not settings.OPENAI_API_KEY:
        return None
    return OpenAI(api_key=settings.OPENAI_API_KEY, timeout=60)


class ChatService:
    """
    AI coach conversation.

    Responsibilities:
      - enforce the free-tier daily message limit
      - persist both sides of the conversation
      - pass recent history to the chat completion API
    """

    def __init__(self, chat_repo: ChatRepository, user_repo: UserRepository):
        self.chat_repo = chat_repo
        self.user_repo = user_repo

    def list_messages(self, session: Session, user: User, limit: int = 50) -> list[ChatMessage]:
        return self.chat_repo.list_for_user(session, user.id, limit)

    def send_message(
        self,
        session: Session,
        user: User,
        text: str,
        client: OpenAI | None,
    ) -> ChatMessage:
        """
        Store the user's message, get a coach reply, store and return it.

        Raises:
            HTTPException(429): free tier over its daily limit.
        """
        settings = get_settings()
        today = today_iso()
        sent_today = user.daily_message_count if user.last_message_date == today else 0

        if user.subscription_tier == "free" and sent_today >= settings.FREE_DAILY_MESSAGE_LIMIT:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=LIMIT_REACHED,
            )

        # History is read before the new message is stored.
        history = self.chat_repo.list_for_user(session, user.id, CONTEXT_MESSAGES)
        self.chat_repo.create(
            session, ChatMessage(user_id=user.id, role="user", content=text)
        )

        reply = self._complete(client, list(reversed(history)), text, settings.OPENAI_MODEL)
        assistant = self.chat_repo.create(
            session, ChatMessage(user_id=user.id, role="assistant", content=reply)
        )

        user.daily_message_count = sent_today + 1
        user.last_message_date = today
        self.user_repo.update(session, user)

        return assistant

    def _complete(
        self,
        client: OpenAI | None,
        history: list[ChatMessage],
        text: str,
        model: str,
    ) -> str:
        if client is None:
            return NOT_CONFIGURED_REPLY

        messages = [{"role": "system", "content": SYSTEM_PROMPT}]
        messages.extend({"role": m.role, "content": m.content} for m in history)
        messages.append({"role": "user", "content": text})

        try:
            completion = client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=MAX_COMPLETION_TOKENS,
                temperature=0.7,
            )
        except Exception:
            logger.exception("OpenAI chat completion failed")
            return FAILURE_REPLY

        if not completion.choices:
            return EMPTY_REPLY
        return completion.choices[0].message.content or EMPTY_REPLY
