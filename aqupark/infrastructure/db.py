from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from aqupark.core_settings import Settings
from aqupark.domain.models import Base

class Database:
    """
    Engine plus session factory for one database.

    Created once by ``create_app`` and kept on ``app.state``; requests borrow a
    connection from the bounded pool through ``get_db``.
    """

    def __init__(self, url: str, pool_size: int = 10, max_overflow: int = 0, pool_timeout: float = 30.0):
        if url.startswith("sqlite"):
            kwargs = {"connect_args": {"check_same_thread": False}}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # one shared in-memory database for every session
                kwargs["poolclass"] = StaticPool
        else:
            kwargs = {
                "pool_size": pool_size,
                "max_overflow": max_overflow,
                "pool_timeout": pool_timeout,
                "pool_pre_ping": True,
            }
        self.engine = create_engine(url, echo=False, future=True, **kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )

    def init_models(self):
        Base.metadata.create_all(self.engine)

    def dispose(self):
        self.engine.dispose()

def get_db(request: Request) -> Session:
    db = request.app.state.db.SessionLocal()
    try:
        yield db
    finally:
        # close() rolls back anything left uncommitted and returns the connection
        db.close()
