from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    SERVICE_NAME: str = "aqupark-shop"
    SERVICE_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "aqupark"
    POSTGRES_USER: str = "aqupark"
    POSTGRES_PASSWORD: str = "aqupark"
    # Overrides the POSTGRES_* fields when set (tests use sqlite://)
    DATABASE_URL: Optional[str] = None

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: float = 30.0
    # create missing tables at startup; production schemas come from alembic
    DB_CREATE_ALL: bool = True

    JWT_SECRET: str = "change-me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    ORDER_NUMBER_LENGTH: int = 9
    ORDER_NUMBER_ATTEMPTS: int = 5
    DEFAULT_ORDER_STATUS: str = "paid"
    CHECKOUT_TIMEOUT_SECONDS: float = 10.0

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

@lru_cache
def get_settings() -> Settings:
    return Settings()
