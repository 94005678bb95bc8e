from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from app.domain.model_base import Base
import logging

logger = logging.getLogger(__name__)


class Database:
    """
    Owns the engine and session factory for one store.

    Created by the application factory and kept on `app.state.database`;
    request handlers receive sessions through `dependencies.get_db`.
    """

    def __init__(self, url: str, **engine_kwargs):
        if url.startswith("sqlite"):
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})

        self.url = url
        self.engine = create_engine(url, **engine_kwargs)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def connect(self) -> None:
        # tables are only known to the metadata once their models are imported
        from app.domain.user import models as user_models  # noqa: F401
        from app.domain.issue import models as issue_models  # noqa: F401
        from app.domain.payment import models as payment_models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Connected to %s", self.engine.url.render_as_string(hide_password=True))

    def session(self) -> Session:
        return self.SessionLocal()

    def ping(self) -> bool:
        with self.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True

    def close(self) -> None:
        self.engine.dispose()
        logger.info("Database connections closed")
