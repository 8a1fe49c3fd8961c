import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quantumbot.core.errors import DuplicateEmail, IncorrectPassword, NotFoundUser
from quantumbot.core.security import hash_password, verify_password
from quantumbot.models.user import User

logger = logging.getLogger(__name__)


class UserDao:
    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, email: str, password: str) -> User:
        if self.find_by_email(email):
            raise DuplicateEmail()
        user = User(name=name, email=email, password_hash=hash_password(password), chats=[])
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # lost the race against a concurrent signup with the same email
            self.db.rollback()
            raise DuplicateEmail()
        self.db.refresh(user)
        logger.info("Created user id=%s", user.id)
        return user

    def find_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email).first()

    def find_by_id(self, user_id) -> User | None:
        try:
            pk = int(user_id)
        except (TypeError, ValueError):
            return None
        return self.db.get(User, pk)

    def list_all(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def authenticate(self, email: str, password: str) -> User:
        user = self.find_by_email(email)
        if not user:
            raise NotFoundUser()
        if not verify_password(password, user.password_hash):
            raise IncorrectPassword()
        return user
