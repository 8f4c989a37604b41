"""
Authentication domain repositories
Data access layer for users, with a persistent and an in-memory backend
"""
import threading
from abc import ABC, abstractmethod
from typing import Dict

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from user_service.core.exceptions import (
    DatabaseError,
    DuplicateRecordError,
    RecordNotFoundError,
)

from .models import User, UserRecord


class UserRepository(ABC):
    """
    Contract every user store satisfies

    Implementations raise the same exception classes for the same inputs, so
    handlers and tests do not depend on the backend.
    """

    @abstractmethod
    def create(self, user: User) -> None:
        """
        Validate, hash and persist a user, then back-fill `user.id`

        Raises:
            ValidationError: If the entity is invalid
            DuplicateRecordError: If the email is already registered
            DatabaseError: If the backend fails
        """

    @abstractmethod
    def find_by_email(self, email: str) -> User:
        """
        Raises:
            RecordNotFoundError: If no user has this email
        """

    @abstractmethod
    def find(self, user_id: int) -> User:
        """
        Raises:
            RecordNotFoundError: If no user has this id
        """


class SQLUserRepository(UserRepository):
    """Repository mapping User entities onto the users table"""

    def __init__(self, engine: Engine):
        """Initialize user repository.

        Args:
            engine: SQLAlchemy engine; each call opens its own session
        """
        self.engine = engine

    def create(self, user: User) -> None:
        user.validate_user()
        user.before_create()

        record = UserRecord(email=user.email, encrypted_password=user.encrypted_password)
        with Session(self.engine) as session:
            try:
                session.add(record)
                session.commit()
                session.refresh(record)
            except IntegrityError as e:
                session.rollback()
                raise DuplicateRecordError(internal_message=str(e.orig)) from e
            except SQLAlchemyError as e:
                session.rollback()
                raise DatabaseError(internal_message=str(e)) from e

            user.id = record.id

    def find_by_email(self, email: str) -> User:
        statement = select(UserRecord).where(UserRecord.email == email)
        return self._find_one(statement)

    def find(self, user_id: int) -> User:
        statement = select(UserRecord).where(UserRecord.id == user_id)
        return self._find_one(statement)

    def _find_one(self, statement) -> User:
        with Session(self.engine) as session:
            try:
                record = session.exec(statement).first()
            except SQLAlchemyError as e:
                raise DatabaseError(internal_message=str(e)) from e

            if record is None:
                raise RecordNotFoundError(resource="user")

            return User.from_record(record)


class InMemoryUserRepository(UserRepository):
    """
    Process-local user store for tests and single-process deployments

    Every read and write of the id and email indices happens under one lock,
    so the duplicate check and the insert are atomic.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._ids_by_email: Dict[str, int] = {}
        self._next_id = 1

    def create(self, user: User) -> None:
        user.validate_user()
        user.before_create()

        with self._lock:
            if user.email in self._ids_by_email:
                raise DuplicateRecordError(
                    internal_message=f"duplicate email on insert, user {self._ids_by_email[user.email]}"
                )

            user.id = self._next_id
            self._next_id += 1

            stored = user.model_copy()
            stored.sanitize()
            self._users[stored.id] = stored
            self._ids_by_email[stored.email] = stored.id

    def find_by_email(self, email: str) -> User:
        with self._lock:
            user_id = self._ids_by_email.get(email)
            if user_id is None:
                raise RecordNotFoundError(resource="user")
            return self._users[user_id].model_copy()

    def find(self, user_id: int) -> User:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise RecordNotFoundError(resource="user")
            return user.model_copy()
