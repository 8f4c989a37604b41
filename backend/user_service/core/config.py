import warnings
from typing import Literal, Optional

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "user-service"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    # User storage: "sql" (PostgreSQL) or "memory" (process-local)
    STORE_BACKEND: Literal["sql", "memory"] = "sql"

    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "changethis"
    POSTGRES_DB: str = "restapi_dev"
    # Full URL override, e.g. sqlite:///./users.db
    DATABASE_URL: Optional[str] = None

    # Session storage: "memory" (process-local) or "redis"
    SESSION_BACKEND: Literal["memory", "redis"] = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    SESSION_LIFETIME_HOURS: int = 24
    SESSION_COOKIE_NAME: str = "session_id"
    SESSION_COOKIE_SECURE: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+psycopg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def _check_default_secret(self, var_name: str, value: Optional[str]) -> None:
        if value == "changethis":
            message = (
                f'The value of {var_name} is "changethis", '
                "for security, please change it, at least for deployments."
            )
            if self.ENVIRONMENT == "local":
                warnings.warn(message, stacklevel=1)
            else:
                raise ValueError(message)

    @model_validator(mode="after")
    def _enforce_shared_backends(self) -> Self:
        # Memory backends live in one worker process; gunicorn runs several
        if self.ENVIRONMENT != "local":
            if self.SESSION_BACKEND == "memory":
                raise ValueError(
                    f"SESSION_BACKEND=memory is only allowed in local, not {self.ENVIRONMENT}; "
                    "use redis so every worker sees the same sessions"
                )
            if self.STORE_BACKEND == "memory":
                raise ValueError(
                    f"STORE_BACKEND=memory is only allowed in local, not {self.ENVIRONMENT}"
                )
        return self

    @model_validator(mode="after")
    def _enforce_non_default_secrets(self) -> Self:
        if self.STORE_BACKEND == "sql" and not self.DATABASE_URL:
            self._check_default_secret("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)
        return self


settings = Settings()  # type: ignore
