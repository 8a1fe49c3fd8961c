from sqlalchemy import JSON, Column, DateTime, Integer, String
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship

from quantumbot.db.session import Base
from quantumbot.models.chat_message import utcnow


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    # legacy flat chat log, embedded in the user row
    chats = Column(MutableList.as_mutable(JSON), nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow)

    sessions = relationship(
        "ChatSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    def to_dict(self):
        return {"id": str(self.id), "name": self.name, "email": self.email}
