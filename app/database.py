from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings

# Support both PostgreSQL and SQLite via centralized settings
DATABASE_URL = settings.database_url


def use_immediate_transactions(sqlite_engine: Engine) -> Engine:
    """
    Make every SQLite transaction start with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first write, so a budget read would otherwise run
    outside any lock. Taking the write lock at BEGIN serialises goal submissions the way
    SELECT ... FOR UPDATE does on PostgreSQL.
    """
    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return sqlite_engine


if DATABASE_URL.startswith("postgresql"):
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
        pool_timeout=settings.db_pool_timeout,
    )
else:
    # SQLite for local development/testing; the busy timeout bounds the wait for the write lock
    engine = use_immediate_transactions(create_engine(
        DATABASE_URL, connect_args={"check_same_thread": False, "timeout": settings.db_pool_timeout}
    ))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    """
    One session per request. Services own commit and rollback through BaseService.atomic.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    """
    Registers all domain models and initializes the database schema.
    This should be called during the application startup lifespan.
    """
    # Import all models to ensure they are registered with Base.metadata before create_all
    from app.models import (
        role, department, employee, appraisal_cycle, goal,
        self_appraisal, manager_review, feedback_360, final_rating, audit_log
    )
    Base.metadata.create_all(bind=engine)
