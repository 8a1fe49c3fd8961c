import logging
from functools import lru_cache

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from quantumbot.core.ai_engine import CompletionGateway
from quantumbot.core.config import get_settings
from quantumbot.core.cookies import CookiePolicy
from quantumbot.core.errors import InvalidToken, Unauthenticated
from quantumbot.core.security import TokenManager, TokenPayload
from quantumbot.daos.users import UserDao
from quantumbot.db.session import get_db
from quantumbot.models.user import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@lru_cache
def get_token_manager() -> TokenManager:
    return TokenManager(get_settings())


@lru_cache
def get_cookie_policy() -> CookiePolicy:
    return CookiePolicy(get_settings())


@lru_cache
def get_completion_gateway() -> CompletionGateway:
    return CompletionGateway(get_settings())


def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    tokens: TokenManager = Depends(get_token_manager),
    cookies: CookiePolicy = Depends(get_cookie_policy),
) -> TokenPayload:
    # signed cookie first, Bearer header only as fallback (non-browser callers)
    token = cookies.read_token(request)
    if not token and credentials:
        token = credentials.credentials
    if not token:
        raise Unauthenticated("No authentication token provided")
    try:
        identity = tokens.verify(token)
    except InvalidToken as e:
        logger.info("Rejected token on %s: %s", request.url.path, e.cause)
        raise Unauthenticated(e.cause) from e
    request.state.identity = identity
    return identity


def get_current_user(
    identity: TokenPayload = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> User:
    user = UserDao(db).find_by_id(identity.user_id)
    if not user:
        raise Unauthenticated("User not registered")
    return user
