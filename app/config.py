from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/rental_db"
    DATABASE_SSL: bool = True
    USER_MANAGEMENT_URL: str = "https://rent-managment-system-user-magt.onrender.com"
    AUTH_TIMEOUT_SECONDS: float = 10.0
    CORS_ALLOW_ORIGINS: List[str] = ["*"]
    RECEIPT_NUMBER_PREFIX: str = "RCT"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @field_validator("DATABASE_URL")
    def use_async_driver(cls, v):
        """
        Hosted Postgres providers hand out plain postgres:// URLs; the engine
        needs the asyncpg driver spelled out.
        """
        if not v:
            return v
        url = make_url(v)
        if url.drivername in ("postgres", "postgresql"):
            url = url.set(drivername="postgresql+asyncpg")
        return url.render_as_string(hide_password=False)

    @property
    def is_postgres(self) -> bool:
        return make_url(self.DATABASE_URL).get_backend_name() == "postgresql"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
