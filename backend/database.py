# backend/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from config import settings


def _normalize_url(url: str) -> str:
    # Hosted Postgres hands out postgres://, SQLAlchemy only accepts postgresql://
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


SQLALCHEMY_DATABASE_URL = _normalize_url(settings.DATABASE_URL)

connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)

Base = declarative_base()


def get_db():
    """Request-scoped session, closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # Tables only reach Base.metadata once their model module is imported
    import models.tenant, models.product, models.order, models.shift, models.table  # noqa: F401
    import models.inventory, models.purchase, models.recipe  # noqa: F401
    import models.finance, models.cash, models.log  # noqa: F401
    Base.metadata.create_all(bind=engine)
