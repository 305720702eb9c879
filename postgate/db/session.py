"""Engine and session factory.

Request handlers get a session through ``postgate.api.deps.get_db``;
background work opens its own session from ``SessionLocal``.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from postgate.core.config import get_settings
from postgate.db.base import Base

settings = get_settings()

connect_args = {}
if settings.database_url.startswith("sqlite"):
    # Background tasks run on a different thread than the request
    connect_args["check_same_thread"] = False

engine = create_engine(settings.database_url, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create all tables that do not exist yet (development convenience)."""
    import postgate.db.models  # noqa: F401  register models on Base.metadata

    Base.metadata.create_all(bind=bind)
