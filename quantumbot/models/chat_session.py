import uuid

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship

from quantumbot.db.session import Base
from quantumbot.models.chat_message import isoformat, utcnow

DEFAULT_TITLE = "New Chat"


class ChatSession(Base):
    """A titled conversation thread owned by one user; messages embedded as JSON."""

    __tablename__ = "chat_sessions"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False, default=DEFAULT_TITLE)
    messages = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    user = relationship("User", back_populates="sessions")

    def touch(self):
        """Refresh updated_at; never moves backwards."""
        now = utcnow()
        floor = self.updated_at or self.created_at
        self.updated_at = max(now, floor) if floor else now

    def to_summary(self):
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def to_dict(self):
        return {
            **self.to_summary(),
            "userId": str(self.user_id),
            "messages": list(self.messages or []),
        }
