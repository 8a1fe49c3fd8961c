from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from quantumbot.api.deps import get_completion_gateway, get_current_user
from quantumbot.core.ai_engine import CompletionGateway
from quantumbot.daos.base import MessageAppender
from quantumbot.daos.chat_log import ChatLogDao
from quantumbot.daos.chat_sessions import ChatSessionDao
from quantumbot.db.session import get_db
from quantumbot.models.user import User
from quantumbot.schemas.chat import ChatCompletionRequest, CreateSessionRequest

router = APIRouter(prefix="/api/chat", tags=["Chat"])


def _converse(history: MessageAppender, message: str, gateway: CompletionGateway) -> None:
    """User message is stored before the upstream call, so a failed completion never loses it."""
    history.append("user", message)
    reply = gateway.complete(history.history())
    if reply:
        history.append("assistant", reply)


# ---- legacy flat log (users.chats) ----

@router.post("/new")
def generate_chat_completion(
    data: ChatCompletionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    gateway: CompletionGateway = Depends(get_completion_gateway),
):
    log = ChatLogDao(db)
    _converse(log.appender(user.id), data.message, gateway)
    return {"chats": log.list_all(user.id)}


@router.get("/all-chats")
def get_all_chats(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"message": "OK", "chats": ChatLogDao(db).list_all(user.id)}


@router.delete("/delete-all-chats")
def delete_all_chats(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    """Clears the legacy log and deletes every chat session of the user, in one transaction."""
    try:
        chats = ChatLogDao(db).clear(user.id, commit=False)
        ChatSessionDao(db).delete_all_for_user(user.id, commit=False)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"message": "OK", "chats": chats}


# ---- chat sessions ----

@router.post("/sessions", status_code=201)
def create_chat_session(
    data: CreateSessionRequest | None = Body(None),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    session = ChatSessionDao(db).create(user.id, data.title if data else None)
    return {"message": "Chat session created", "session": session.to_dict()}


@router.get("/sessions")
def get_chat_sessions(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return {"message": "OK", "sessions": ChatSessionDao(db).list_by_user(user.id)}


@router.get("/sessions/{session_id}")
def get_chat_session(session_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    session = ChatSessionDao(db).get_by_id(user.id, session_id)
    return {"message": "OK", "session": session.to_dict()}


@router.post("/sessions/{session_id}/messages")
def add_message_to_chat_session(
    session_id: str,
    data: ChatCompletionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    gateway: CompletionGateway = Depends(get_completion_gateway),
):
    sessions = ChatSessionDao(db)
    # 404 before anything is stored
    sessions.get_by_id(user.id, session_id)
    _converse(sessions.appender(user.id, session_id), data.message, gateway)
    session = sessions.get_by_id(user.id, session_id)
    return {"message": "Message added", "session": session.to_dict()}


@router.delete("/sessions/{session_id}")
def delete_chat_session(session_id: str, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    ChatSessionDao(db).delete_by_id(user.id, session_id)
    return {"message": "Chat session deleted successfully", "sessionId": session_id}
