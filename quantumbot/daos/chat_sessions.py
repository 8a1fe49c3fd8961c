import logging
from typing import List

from sqlalchemy.orm import Session

from quantumbot.core.errors import NotFoundSession, NotFoundUser
from quantumbot.models.chat_message import isoformat, make_message, utcnow
from quantumbot.models.chat_session import DEFAULT_TITLE, ChatSession
from quantumbot.models.user import User

logger = logging.getLogger(__name__)


def _owner_pk(user_id) -> int | None:
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None


class ChatSessionDao:
    """Chat sessions. Every lookup is scoped by owner: a foreign session id is NotFound."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id, title: str | None = None) -> ChatSession:
        owner = _owner_pk(user_id)
        if owner is None or self.db.get(User, owner) is None:
            raise NotFoundUser()
        now = utcnow()
        session = ChatSession(
            user_id=owner,
            title=(title or "").strip() or DEFAULT_TITLE,
            messages=[],
            created_at=now,
            updated_at=now,
        )
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def list_by_user(self, user_id) -> List[dict]:
        owner = _owner_pk(user_id)
        if owner is None:
            return []
        rows = (
            self.db.query(ChatSession.id, ChatSession.title, ChatSession.created_at, ChatSession.updated_at)
            .filter(ChatSession.user_id == owner)
            .order_by(ChatSession.updated_at.desc(), ChatSession.created_at.desc())
            .all()
        )
        # summary projection only, message bodies never leave in list responses
        return [
            {
                "id": r.id,
                "title": r.title,
                "createdAt": isoformat(r.created_at),
                "updatedAt": isoformat(r.updated_at),
            }
            for r in rows
        ]

    def get_by_id(self, user_id, session_id: str, for_update: bool = False) -> ChatSession:
        owner = _owner_pk(user_id)
        session = None
        if owner is not None:
            q = self.db.query(ChatSession).filter(ChatSession.id == session_id, ChatSession.user_id == owner)
            if for_update:
                # row lock, concurrent appends to one session serialize here
                q = q.with_for_update().populate_existing()
            session = q.first()
        if not session:
            raise NotFoundSession()
        return session

    def append_message(self, user_id, session_id: str, role: str, content: str) -> ChatSession:
        session = self.get_by_id(user_id, session_id, for_update=True)
        session.messages.append(make_message(role, content))
        session.touch()
        self.db.commit()
        self.db.refresh(session)
        return session

    def delete_by_id(self, user_id, session_id: str) -> None:
        session = self.get_by_id(user_id, session_id)
        self.db.delete(session)
        self.db.commit()

    def delete_all_for_user(self, user_id, commit: bool = True) -> int:
        owner = _owner_pk(user_id)
        if owner is None:
            return 0
        deleted = (
            self.db.query(ChatSession)
            .filter(ChatSession.user_id == owner)
            .delete(synchronize_session=False)
        )
        if commit:
            self.db.commit()
        if deleted:
            logger.info("Deleted %d chat sessions for user id=%s", deleted, owner)
        return deleted

    def appender(self, user_id, session_id: str) -> "ChatSessionAppender":
        return ChatSessionAppender(self, user_id, session_id)


class ChatSessionAppender:
    def __init__(self, dao: ChatSessionDao, user_id, session_id: str):
        self.dao = dao
        self.user_id = user_id
        self.session_id = session_id

    def history(self) -> List[dict]:
        return list(self.dao.get_by_id(self.user_id, self.session_id).messages or [])

    def append(self, role: str, content: str) -> dict:
        session = self.dao.append_message(self.user_id, self.session_id, role, content)
        return session.messages[-1]
