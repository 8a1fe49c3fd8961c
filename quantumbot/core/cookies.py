"""How the identity token travels in a cookie, and how that cookie is cleared."""
from dataclasses import dataclass

from fastapi import Request, Response
from itsdangerous import BadSignature, Signer

from quantumbot.core.config import Settings

COOKIE_MAX_AGE = 7 * 24 * 60 * 60  # 7 days, same as the token ttl
_COOKIE_SALT = "quantumbot.auth-cookie"


@dataclass(frozen=True)
class CookieAttributes:
    httponly: bool
    secure: bool
    samesite: str
    domain: str | None
    path: str = "/"


class CookiePolicy:
    """Sets, reads and clears the signed auth cookie.

    `clear` reuses the attributes from `set_token`; browsers ignore a delete
    whose domain/path/samesite/secure differ from the original cookie.
    """

    def __init__(self, settings: Settings):
        self.name = settings.COOKIE_NAME
        self.max_age = COOKIE_MAX_AGE
        self._signer = Signer(settings.cookie_secret, salt=_COOKIE_SALT)
        secure = settings.is_production
        samesite = "none" if settings.is_production else "strict"
        if samesite == "none":
            # cross-site cookies must be Secure or browsers drop them
            secure = True
        self.attributes = CookieAttributes(
            httponly=True,
            secure=secure,
            samesite=samesite,
            domain=settings.COOKIE_DOMAIN or None,
        )

    def sign(self, token: str) -> str:
        return self._signer.sign(token).decode("utf-8")

    def unsign(self, value: str) -> str | None:
        try:
            return self._signer.unsign(value).decode("utf-8")
        except BadSignature:
            return None

    def set_token(self, response: Response, token: str) -> None:
        a = self.attributes
        response.set_cookie(
            key=self.name,
            value=self.sign(token),
            max_age=self.max_age,
            path=a.path,
            domain=a.domain,
            secure=a.secure,
            httponly=a.httponly,
            samesite=a.samesite,
        )

    def read_token(self, request: Request) -> str | None:
        """Token from the signed cookie, or None if missing or tampered."""
        raw = request.cookies.get(self.name)
        if not raw:
            return None
        return self.unsign(raw)

    def clear(self, response: Response) -> None:
        a = self.attributes
        response.delete_cookie(
            key=self.name,
            path=a.path,
            domain=a.domain,
            secure=a.secure,
            httponly=a.httponly,
            samesite=a.samesite,
        )
