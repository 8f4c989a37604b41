"""
Tests for user repositories

The `user_repository` fixture is parametrized, so each test runs against the
SQL and the in-memory backend.
"""
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.exc import OperationalError

from user_service.core.exceptions import (
    DatabaseError,
    DuplicateRecordError,
    RecordNotFoundError,
    ValidationError,
)
from user_service.domains.auth.repository import (
    InMemoryUserRepository,
    SQLUserRepository,
    UserRepository,
)
from user_service.tests.utils.user import create_test_user, make_user, random_email


class TestCreate:
    def test_create(self, user_repository: UserRepository):
        user = make_user()
        user_repository.create(user)

        assert user.id > 0
        assert user.encrypted_password

    def test_assigns_distinct_ids(self, user_repository: UserRepository):
        first = create_test_user(user_repository, email=random_email())
        second = create_test_user(user_repository, email=random_email())

        assert first.id != second.id

    def test_first_id_is_one(self, user_repository: UserRepository):
        assert create_test_user(user_repository).id == 1

    def test_duplicate_email(self, user_repository: UserRepository):
        create_test_user(user_repository, email="user@example.org")

        with pytest.raises(DuplicateRecordError) as exc_info:
            create_test_user(user_repository, email="user@example.org", password="another-password")

        assert exc_info.value.user_message == "email: already taken"

    def test_invalid_user_is_rejected(self, user_repository: UserRepository):
        with pytest.raises(ValidationError):
            user_repository.create(make_user(email="invalid"))

        with pytest.raises(RecordNotFoundError):
            user_repository.find_by_email("invalid")

    @pytest.mark.parametrize(
        "variant", ["Mallory <user@example.org>", " user@example.org ", "user@example.org\n"]
    )
    def test_decorated_email_does_not_duplicate_account(
        self, user_repository: UserRepository, variant: str
    ):
        create_test_user(user_repository, email="user@example.org")

        with pytest.raises(ValidationError):
            create_test_user(user_repository, email=variant)

        with pytest.raises(RecordNotFoundError):
            user_repository.find_by_email(variant)

    def test_invalid_user_gets_no_id(self, user_repository: UserRepository):
        user = make_user(password="short")
        with pytest.raises(ValidationError):
            user_repository.create(user)

        assert user.id == 0


class TestFindByEmail:
    def test_not_found(self, user_repository: UserRepository):
        with pytest.raises(RecordNotFoundError):
            user_repository.find_by_email("user@example.org")

    def test_found(self, user_repository: UserRepository):
        created = create_test_user(user_repository)

        found = user_repository.find_by_email(created.email)

        assert found.id == created.id
        assert found.email == created.email
        assert found.password == ""
        assert found.compare_password("password")


class TestFind:
    def test_not_found(self, user_repository: UserRepository):
        with pytest.raises(RecordNotFoundError):
            user_repository.find(1)

    def test_found(self, user_repository: UserRepository):
        created = create_test_user(user_repository)

        found = user_repository.find(created.id)

        assert found.email == created.email
        assert found.encrypted_password == created.encrypted_password

    def test_returns_copies(self, user_repository: UserRepository):
        created = create_test_user(user_repository)

        found = user_repository.find(created.id)
        found.email = "changed@example.org"

        assert user_repository.find(created.id).email == created.email


class TestInMemoryConcurrency:
    def test_concurrent_duplicate_creates(self):
        """Exactly one of many racing creates for one email succeeds"""
        repo = InMemoryUserRepository()
        barrier = threading.Barrier(8)

        def attempt(_: int) -> bool:
            barrier.wait()
            try:
                create_test_user(repo, email="race@example.org")
            except DuplicateRecordError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(8)))

        assert results.count(True) == 1

    def test_concurrent_creates_get_unique_ids(self):
        repo = InMemoryUserRepository()

        with ThreadPoolExecutor(max_workers=8) as pool:
            users = list(pool.map(
                lambda i: create_test_user(repo, email=f"user{i}@example.org"),
                range(16),
            ))

        assert sorted(u.id for u in users) == list(range(1, 17))


class TestSQLBackendErrors:
    def test_missing_table_is_storage_error(self):
        """Backend failures other than a lookup miss are never RecordNotFound"""
        from user_service.core.db import make_engine

        engine = make_engine("sqlite://")  # no init_db: users table absent
        repo = SQLUserRepository(engine)

        with pytest.raises(DatabaseError) as exc_info:
            repo.find(1)
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert exc_info.value.user_message == "storage error"

        with pytest.raises(DatabaseError):
            repo.create(make_user())

        engine.dispose()
