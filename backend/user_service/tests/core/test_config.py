"""
Tests for configuration management
"""
import os
import warnings
from datetime import timedelta
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from user_service.core.config import Settings
from user_service.domains.auth.cache import MemorySessionStore, RedisSessionStore
from user_service.main import build_session_manager


class TestDefaultSecretCheck:
    """Test that the placeholder database password is policed"""

    def test_rejects_default_password_in_production(self):
        """'changethis' is refused outside local"""
        with patch.dict(os.environ, {
            "POSTGRES_PASSWORD": "changethis",
            "SESSION_BACKEND": "redis",
            "ENVIRONMENT": "production"
        }, clear=True):
            with pytest.raises(ValueError) as exc_info:
                Settings()

            assert "POSTGRES_PASSWORD" in str(exc_info.value)
            assert "changethis" in str(exc_info.value)

    def test_staging_also_rejects_default_password(self):
        with patch.dict(os.environ, {
            "POSTGRES_PASSWORD": "changethis",
            "SESSION_BACKEND": "redis",
            "ENVIRONMENT": "staging"
        }, clear=True):
            with pytest.raises(ValueError):
                Settings()

    def test_allows_default_in_local_with_warning(self):
        """'changethis' is allowed in local but warned about"""
        with patch.dict(os.environ, {
            "POSTGRES_PASSWORD": "changethis",
            "ENVIRONMENT": "local"
        }, clear=True):
            with warnings.catch_warnings(record=True) as w:
                warnings.simplefilter("always")
                settings = Settings()

                assert any(
                    "POSTGRES_PASSWORD" in str(warning.message) for warning in w
                ), "Should warn about default POSTGRES_PASSWORD in local environment"
                assert settings.POSTGRES_PASSWORD == "changethis"

    def test_memory_store_needs_no_database_password(self):
        with patch.dict(os.environ, {
            "STORE_BACKEND": "memory",
            "ENVIRONMENT": "local"
        }, clear=True):
            with warnings.catch_warnings(record=True) as w:
                warnings.simplefilter("always")
                settings = Settings()

            assert settings.STORE_BACKEND == "memory"
            assert not any("POSTGRES_PASSWORD" in str(warning.message) for warning in w)

    def test_database_url_override_skips_password_check(self):
        with patch.dict(os.environ, {
            "DATABASE_URL": "sqlite:///./users.db",
            "SESSION_BACKEND": "redis",
            "ENVIRONMENT": "production"
        }, clear=True):
            settings = Settings()
            assert settings.SQLALCHEMY_DATABASE_URI == "sqlite:///./users.db"


class TestSharedBackendCheck:
    """Process-local backends break once gunicorn runs several workers"""

    @pytest.mark.parametrize("environment", ["staging", "production"])
    def test_rejects_memory_sessions_outside_local(self, environment: str):
        with patch.dict(os.environ, {
            "POSTGRES_PASSWORD": "securepassword123",
            "ENVIRONMENT": environment
        }, clear=True):
            with pytest.raises(ValueError) as exc_info:
                Settings()

            assert "SESSION_BACKEND" in str(exc_info.value)

    def test_rejects_memory_user_store_outside_local(self):
        with patch.dict(os.environ, {
            "STORE_BACKEND": "memory",
            "SESSION_BACKEND": "redis",
            "ENVIRONMENT": "production"
        }, clear=True):
            with pytest.raises(ValueError) as exc_info:
                Settings()

            assert "STORE_BACKEND" in str(exc_info.value)

    def test_allows_memory_backends_in_local(self):
        with patch.dict(os.environ, {"STORE_BACKEND": "memory"}, clear=True):
            settings = Settings()

            assert settings.ENVIRONMENT == "local"
            assert settings.SESSION_BACKEND == "memory"

    def test_production_with_redis_sessions(self):
        with patch.dict(os.environ, {
            "POSTGRES_PASSWORD": "securepassword123",
            "SESSION_BACKEND": "redis",
            "ENVIRONMENT": "production"
        }, clear=True):
            settings = Settings()

            assert settings.SESSION_BACKEND == "redis"
            assert settings.STORE_BACKEND == "sql"


class TestConfigValues:
    """Test configuration values and defaults"""

    def test_session_defaults(self):
        with patch.dict(os.environ, {"STORE_BACKEND": "memory"}, clear=True):
            settings = Settings()

            assert settings.SESSION_BACKEND == "memory"
            assert settings.SESSION_LIFETIME_HOURS == 24
            assert settings.SESSION_COOKIE_NAME == "session_id"
            assert settings.SESSION_COOKIE_SECURE is False

    def test_database_uri_built_from_parts(self):
        with patch.dict(os.environ, {
            "POSTGRES_SERVER": "db",
            "POSTGRES_PORT": "5433",
            "POSTGRES_USER": "svc",
            "POSTGRES_PASSWORD": "securepassword123",
            "POSTGRES_DB": "users",
            "SESSION_BACKEND": "redis",
            "ENVIRONMENT": "production"
        }, clear=True):
            settings = Settings()

            assert settings.SQLALCHEMY_DATABASE_URI == (
                "postgresql+psycopg://svc:securepassword123@db:5433/users"
            )

    def test_rejects_unknown_store_backend(self):
        with patch.dict(os.environ, {"STORE_BACKEND": "mongo"}, clear=True):
            with pytest.raises(ValidationError):
                Settings()

    def test_custom_session_values(self):
        with patch.dict(os.environ, {
            "STORE_BACKEND": "memory",
            "SESSION_BACKEND": "redis",
            "REDIS_URL": "redis://cache:6379/2",
            "SESSION_LIFETIME_HOURS": "1",
            "SESSION_COOKIE_NAME": "sid",
            "SESSION_COOKIE_SECURE": "true"
        }, clear=True):
            settings = Settings()

            assert settings.SESSION_BACKEND == "redis"
            assert settings.REDIS_URL == "redis://cache:6379/2"
            assert settings.SESSION_LIFETIME_HOURS == 1
            assert settings.SESSION_COOKIE_NAME == "sid"
            assert settings.SESSION_COOKIE_SECURE is True


class TestSessionManagerFromSettings:
    """Test that settings select the session backend"""

    def test_memory_backend(self):
        manager = build_session_manager(Settings(STORE_BACKEND="memory"))

        assert isinstance(manager.store, MemorySessionStore)
        assert manager.lifetime == timedelta(hours=24)
        assert manager.cookie_name == "session_id"

    def test_redis_backend(self):
        # Redis.from_url does not connect until the first command
        manager = build_session_manager(Settings(
            STORE_BACKEND="memory",
            SESSION_BACKEND="redis",
            SESSION_LIFETIME_HOURS=2,
            SESSION_COOKIE_SECURE=True,
        ))

        assert isinstance(manager.store, RedisSessionStore)
        assert manager.lifetime == timedelta(hours=2)
        assert manager.cookie_secure is True
