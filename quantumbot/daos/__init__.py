"""
The `daos` package is the data access layer.

Each DAO wraps one persistence shape and hides the SQLAlchemy queries from the
routers.

Contents
--------
- UserDao
    Credential store:
    * Creates users with bcrypt-hashed passwords (unique email)
    * Fetches users by id or email, lists all users
    * Authenticates email + password

- ChatSessionDao
    First-class chat sessions, many per user:
    * Creates sessions ("New Chat" by default)
    * Lists a user's sessions (summaries, most recently updated first)
    * Fetches / appends to / deletes a session, always scoped by owner

- ChatLogDao
    Legacy flat chat log embedded in the user row:
    * Appends, lists and clears messages

The legacy log and the sessions are independent histories for the same user.
Nothing here copies or migrates messages from one to the other.
"""
from quantumbot.daos.base import MessageAppender
from quantumbot.daos.chat_log import ChatLogDao
from quantumbot.daos.chat_sessions import ChatSessionDao
from quantumbot.daos.users import UserDao

__all__ = ["MessageAppender", "UserDao", "ChatSessionDao", "ChatLogDao"]
