from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.schema import MetaData

from obsplanner.infra.settings import settings

# Deterministic constraint/index names
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


def _engine_kwargs(url: str) -> dict[str, object]:
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    kwargs: dict[str, object] = {
        "pool_size": settings.pool_size,
        "max_overflow": settings.max_overflow,
        "pool_timeout": settings.pool_timeout,
    }
    if "postgresql" in url:
        kwargs["connect_args"] = {"connect_timeout": settings.connect_timeout}
    return kwargs


engine = create_engine(
    settings.database_url,
    echo=settings.echo_sql,
    pool_pre_ping=True,
    future=True,
    **_engine_kwargs(settings.database_url),
)


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_conn, _):
    # SQLite ignores ON DELETE CASCADE unless asked per connection
    if type(dbapi_conn).__module__.startswith("sqlite3"):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    future=True,
)


def init_db(bind: Engine | None = None) -> None:
    """Create every table known to the declarative metadata."""
    # Register the models on Base.metadata before create_all
    from obsplanner.domain import entities  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
