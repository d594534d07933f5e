from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from authflow.core.config import AuthConfig


Base = declarative_base()


def _is_in_memory_sqlite(database_url: str) -> bool:
    return database_url in {"sqlite://", "sqlite:///:memory:"}


def create_engine_from_config(config: AuthConfig) -> Engine:
    database_url = config.database_url
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    # SQLite connections are shared across the threadpool FastAPI runs sync handlers in.
    if _is_in_memory_sqlite(database_url):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, connect_args={"check_same_thread": False})


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )


def get_db(request: Request):
    db: Session = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
