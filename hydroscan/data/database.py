# hydroscan/data/database.py
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from hydroscan.domain.errors import PersistenceFailure
from hydroscan.utils.settings import DATABASE_URL
from hydroscan.utils.logging import get_logger

logger = get_logger(__name__)


def make_engine(url: str = DATABASE_URL):
    connect_args = {}
    if url.startswith("sqlite"):
        #sqlite connections are used from FastAPI's threadpool
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args, future=True)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    One atomic read-modify-write unit.
    Commits on success; any SQLAlchemy error rolls back and surfaces as PersistenceFailure.
    Domain errors raised inside the block also roll back and propagate unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction rolled back: {e}")
        raise PersistenceFailure(str(e)) from e
    except Exception:
        db.rollback()
        raise


def init_db(bind=None):
    # models must be imported before create_all so they register in Base.metadata
    import hydroscan.data.models  # noqa: F401

    target = bind or engine
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    Base.metadata.create_all(bind=target)
    logger.info("Database tables created")
