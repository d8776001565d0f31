from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

# Base class for declarative ORM models.
Base = declarative_base()


def make_engine(database_url: str, pool_size: int = 5, pool_timeout: float = 30):
    """
    Creates the SQLAlchemy engine with its connection pool.
    At most pool_size connections are open; a caller waits at most
    pool_timeout seconds for one to free up.
    """
    pool_args = {"poolclass": QueuePool, "pool_size": pool_size, "max_overflow": 0, "pool_timeout": pool_timeout}

    if database_url.startswith("sqlite"):
        # Connections are shared across request threads.
        connect_args = {"check_same_thread": False, "timeout": pool_timeout}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            # Each pooled connection would open its own empty database.
            engine = create_engine(database_url, connect_args=connect_args)
        else:
            engine = create_engine(database_url, connect_args=connect_args, **pool_args)
        _begin_immediate_on_sqlite(engine)
        return engine

    return create_engine(database_url, pool_pre_ping=True, **pool_args)


def _begin_immediate_on_sqlite(engine):
    # Take the write lock when the transaction starts, so concurrent writers
    # wait on the busy timeout instead of failing on a lock upgrade.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def make_session_factory(engine):
    """Create a configured "Session" class for database interactions."""
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
