# barbershop/db.py

import logging

from sqlmodel import SQLModel, create_engine, Session

from barbershop.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Engine = connection to the database
engine = create_engine(
    settings.database_url,
    echo=settings.sql_echo,
    # required for SQLite + FastAPI
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)


def create_db_and_tables():
    # models must be imported so their tables are registered on the metadata
    from barbershop import models  # noqa: F401

    logger.info("Creating tables on %s", engine.url.render_as_string(hide_password=True))
    SQLModel.metadata.create_all(engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session
