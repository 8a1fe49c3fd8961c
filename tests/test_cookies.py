from fastapi import Response

from quantumbot.core.config import Settings
from quantumbot.core.cookies import COOKIE_MAX_AGE, CookiePolicy


def _set_cookie_headers(response: Response):
    return [v.decode("latin-1").lower() for k, v in response.raw_headers if k == b"set-cookie"]


def test_development_policy():
    policy = CookiePolicy(Settings(JWT_SECRET="s", ENVIRONMENT="development"))
    a = policy.attributes
    assert a.httponly is True
    assert a.secure is False
    assert a.samesite == "strict"
    assert a.domain is None
    assert policy.max_age == COOKIE_MAX_AGE == 7 * 24 * 3600


def test_production_policy_is_cross_site_and_secure():
    policy = CookiePolicy(Settings(JWT_SECRET="s", ENVIRONMENT="production", COOKIE_DOMAIN="quantumbot.dev"))
    a = policy.attributes
    assert a.samesite == "none"
    assert a.secure is True
    assert a.domain == "quantumbot.dev"


def test_cookie_is_signed():
    policy = CookiePolicy(Settings(JWT_SECRET="s", COOKIE_SECRET="c"))
    signed = policy.sign("tok")
    assert signed != "tok"
    assert policy.unsign(signed) == "tok"
    assert policy.unsign(signed[:-1] + ("x" if signed[-1] != "x" else "y")) is None
    assert policy.unsign("tok") is None


def test_cookie_secret_falls_back_to_jwt_secret():
    a = CookiePolicy(Settings(JWT_SECRET="shared", COOKIE_SECRET=None))
    b = CookiePolicy(Settings(JWT_SECRET="shared", COOKIE_SECRET="shared"))
    assert b.unsign(a.sign("tok")) == "tok"


def test_clear_uses_same_attributes_as_set():
    policy = CookiePolicy(Settings(JWT_SECRET="s", ENVIRONMENT="production", COOKIE_DOMAIN="quantumbot.dev"))
    response = Response()
    policy.set_token(response, "tok")
    policy.clear(response)
    set_header, clear_header = _set_cookie_headers(response)
    for attr in ("domain=quantumbot.dev", "path=/", "samesite=none", "secure", "httponly"):
        assert attr in set_header
        assert attr in clear_header
    assert "max-age=604800" in set_header
    assert "max-age=0" in clear_header
