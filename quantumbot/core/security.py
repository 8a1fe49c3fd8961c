"""Password hashing (bcrypt) and signed identity tokens (JWT)."""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from quantumbot.core.config import Settings
from quantumbot.core.errors import InvalidToken

BCRYPT_ROUNDS = 10
JWT_ALGORITHM = "HS256"
# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72

_TTL_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_TTL_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # stored hash is not a bcrypt hash
        return False


def parse_ttl(ttl: str | int | timedelta) -> timedelta:
    """`7d`, `12h`, `30m`, `45s` or a plain number of seconds."""
    if isinstance(ttl, timedelta):
        return ttl
    if isinstance(ttl, int):
        return timedelta(seconds=ttl)
    m = _TTL_RE.match(ttl)
    if not m:
        raise ValueError(f"Invalid token ttl: {ttl!r}")
    amount, unit = m.groups()
    return timedelta(**{_TTL_UNITS[unit]: int(amount)})


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    email: str


class TokenManager:
    """Issues and verifies stateless identity tokens.

    Tokens are never stored server side, so nothing here can revoke one before
    its `exp`. Logout only clears the cookie.
    """

    def __init__(self, settings: Settings):
        self._secret = settings.JWT_SECRET
        self.default_ttl = settings.TOKEN_TTL

    def issue(self, user_id, email: str, ttl: str | int | timedelta | None = None, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + parse_ttl(ttl if ttl is not None else self.default_ttl)
        claims = {"id": str(user_id), "email": email, "iat": issued_at, "exp": expires_at}
        return jwt.encode(claims, self._secret, algorithm=JWT_ALGORITHM)

    def verify(self, token: str) -> TokenPayload:
        try:
            decoded = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["exp", "id", "email"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidToken(f"JWT verification failed: {e}") from e
        user_id, email = decoded.get("id"), decoded.get("email")
        if not isinstance(user_id, str) or not isinstance(email, str):
            raise InvalidToken("JWT verification failed: Invalid token payload")
        return TokenPayload(user_id=user_id, email=email)
