from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from quantumbot.api.deps import get_cookie_policy, get_current_user, get_token_manager
from quantumbot.core.cookies import CookiePolicy
from quantumbot.core.security import TokenManager
from quantumbot.daos.users import UserDao
from quantumbot.db.session import get_db
from quantumbot.models.user import User
from quantumbot.schemas.auth import LoginRequest, SignupRequest

router = APIRouter(prefix="/api/user", tags=["User"])


def _login_response(user: User, response: Response, tokens: TokenManager, cookies: CookiePolicy) -> dict:
    token = tokens.issue(user.id, user.email)
    cookies.set_token(response, token)
    return {"message": "OK", "name": user.name, "email": user.email}


@router.get("/")
def get_all_users(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    users = UserDao(db).list_all()
    return {"message": "OK", "users": [u.to_dict() for u in users]}


@router.post("/signup", status_code=201)
def signup(
    data: SignupRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
    cookies: CookiePolicy = Depends(get_cookie_policy),
):
    user = UserDao(db).create(data.name, data.email, data.password)
    return _login_response(user, response, tokens, cookies)


@router.post("/login")
def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    tokens: TokenManager = Depends(get_token_manager),
    cookies: CookiePolicy = Depends(get_cookie_policy),
):
    user = UserDao(db).authenticate(data.email, data.password)
    return _login_response(user, response, tokens, cookies)


@router.get("/auth-status")
def auth_status(user: User = Depends(get_current_user)):
    return {"message": "OK", "name": user.name, "email": user.email}


@router.get("/logout")
def logout(
    response: Response,
    user: User = Depends(get_current_user),
    cookies: CookiePolicy = Depends(get_cookie_policy),
):
    """Clears the cookie only. The token itself stays valid until it expires."""
    cookies.clear(response)
    return {"message": "OK"}
