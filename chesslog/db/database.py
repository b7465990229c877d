"""Generate database session"""

from typing import Generator, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chesslog.core.config import Settings, configure_logging
from chesslog.db.schema import Base


def build_engine(settings: Optional[Settings] = None) -> Engine:
    """Engine for the configured database. Ensures all tables are created."""
    settings = settings or Settings.from_env()
    configure_logging(settings)
    engine = create_engine(settings.database_url, echo=settings.echo_sql)
    Base.metadata.create_all(bind=engine)
    return engine


def get_db(engine: Engine) -> Generator[Session, None, None]:
    session_local = sessionmaker(bind=engine)
    db = session_local()
    try:
        yield db
    finally:
        db.close()
