from typing import List

from sqlalchemy.orm import Session

from quantumbot.core.errors import NotFoundUser
from quantumbot.models.chat_message import make_message
from quantumbot.models.user import User


class ChatLogDao:
    """Legacy per-user chat log (`users.chats`). Kept alongside sessions, never merged."""

    def __init__(self, db: Session):
        self.db = db

    def _user(self, user_id, for_update: bool = False) -> User:
        try:
            pk = int(user_id)
        except (TypeError, ValueError):
            raise NotFoundUser()
        q = self.db.query(User).filter(User.id == pk)
        if for_update:
            q = q.with_for_update().populate_existing()
        user = q.first()
        if not user:
            raise NotFoundUser()
        return user

    def append(self, user_id, role: str, content: str) -> dict:
        user = self._user(user_id, for_update=True)
        message = make_message(role, content)
        if user.chats is None:
            user.chats = []
        user.chats.append(message)
        self.db.commit()
        return message

    def list_all(self, user_id) -> List[dict]:
        return list(self._user(user_id).chats or [])

    def clear(self, user_id, commit: bool = True) -> List[dict]:
        user = self._user(user_id)
        if user.chats:
            user.chats.clear()
            if commit:
                self.db.commit()
        return list(user.chats or [])

    def appender(self, user_id) -> "ChatLogAppender":
        return ChatLogAppender(self, user_id)


class ChatLogAppender:
    def __init__(self, dao: ChatLogDao, user_id):
        self.dao = dao
        self.user_id = user_id

    def history(self) -> List[dict]:
        return self.dao.list_all(self.user_id)

    def append(self, role: str, content: str) -> dict:
        return self.dao.append(self.user_id, role, content)
