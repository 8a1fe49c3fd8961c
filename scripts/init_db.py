"""Create tables and (optionally) seed a demo user.

    python scripts/init_db.py            # tables only
    python scripts/init_db.py --seed     # + demo@quantumbot.dev / demo1234
"""
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from quantumbot.db.session import SessionLocal, init_db
from quantumbot.daos.users import UserDao

init_db()
print("Tables ready")

if "--seed" in sys.argv:
    db = SessionLocal()
    users = UserDao(db)
    if not users.find_by_email("demo@quantumbot.dev"):
        users.create("Demo", "demo@quantumbot.dev", "demo1234")
        print("Created user: demo@quantumbot.dev / demo1234")
    db.close()

print("Init complete.")
