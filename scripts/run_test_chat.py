"""Smoke test against a running backend.

Creates (or reuses) a test user straight in the db, mints a token for it and
calls POST /api/chat/new with a Bearer header, the way a non-browser client
would. Needs JWT_SECRET / DATABASE_URL to match the running server.
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx

from quantumbot.core.config import get_settings
from quantumbot.core.security import TokenManager
from quantumbot.db.session import SessionLocal, init_db
from quantumbot.daos.users import UserDao

settings = get_settings()
BACKEND_URL = os.getenv("BACKEND_URL", f"http://localhost:{settings.PORT}")
EMAIL = "autotest@example.com"

init_db()
db = SessionLocal()
users = UserDao(db)
user = users.find_by_email(EMAIL)
if user:
    print(f"Found existing test user with id {user.id}")
else:
    user = users.create("Auto Test", EMAIL, "password123")
    print(f"Inserted test user with id {user.id}")
db.close()

token = TokenManager(settings).issue(user.id, user.email)
print(f"Generated token (truncated): {token[:50]}...")

try:
    resp = httpx.post(
        f"{BACKEND_URL}/api/chat/new",
        json={"message": "Hello from automated test"},
        headers={"Authorization": f"Bearer {token}"},
        timeout=settings.COMPLETION_TIMEOUT_SECONDS,
    )
except httpx.HTTPError as e:
    print(f"Chat call failed: {e}")
    sys.exit(1)

print(f"Chat response status: {resp.status_code}")
print(f"Chat response data: {resp.text}")
sys.exit(0 if resp.status_code == 200 else 1)
