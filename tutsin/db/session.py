from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tutsin.core.config import Settings, settings


def build_database_url(config: Settings):
    """Apply DATABASE_HOST / DATABASE_SSL overrides to DATABASE_URL."""
    url = make_url(config.DATABASE_URL)
    if config.DATABASE_HOST:
        url = url.set(host=config.DATABASE_HOST)
    if config.DATABASE_SSL and url.get_backend_name().startswith("postgresql"):
        url = url.update_query_dict({"sslmode": "require"})
    return url


def create_engine_with_settings(config: Settings) -> Engine:
    url = build_database_url(config)
    backend = url.get_backend_name()

    if backend == "sqlite":
        # In-memory SQLite needs a single shared connection across threads.
        if url.database in (None, "", ":memory:"):
            return create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_engine(url, connect_args={"check_same_thread": False})

    connect_args = {}
    if backend.startswith("postgresql"):
        connect_args["options"] = "-c timezone=utc"

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_timeout=config.DB_POOL_TIMEOUT,
        pool_recycle=config.DB_POOL_RECYCLE,
        connect_args=connect_args,
    )


def create_session_factory(bind: Engine) -> sessionmaker:
    # Records leave the session detached, so keep loaded state after commit.
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=bind
    )


engine = create_engine_with_settings(settings)
SessionLocal = create_session_factory(engine)
