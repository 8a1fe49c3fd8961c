from quantumbot.models.user import User
from quantumbot.models.chat_session import ChatSession

__all__ = ["User", "ChatSession"]
