import logging

from fastapi import Request
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(database_url, connect_args=connect_args)
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """Yield a session from the factory owned by the running application."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def _seed_categories(session_factory: sessionmaker[Session], names: list[str]) -> None:
    from pos_app.models.category import Category
    from pos_app.services.concurrency import now_ts

    db = session_factory()
    try:
        if db.query(Category).count() > 0:
            return
        ts = now_ts()
        for name in names:
            db.add(Category(name=name, updated_at=ts))
        db.commit()
        logger.info("Seeded %d default categories", len(names))
    finally:
        db.close()


def init_db(engine: Engine, seed_categories: list[str] | None = None) -> None:
    # Import all models so Base.metadata knows about them
    import pos_app.models.category  # noqa: F401
    import pos_app.models.product  # noqa: F401
    import pos_app.models.sale  # noqa: F401
    import pos_app.models.stock_history  # noqa: F401

    Base.metadata.create_all(bind=engine)
    if seed_categories:
        _seed_categories(create_session_factory(engine), seed_categories)
