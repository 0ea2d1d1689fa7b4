from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
import logging
from config import DATABASE_URL

# Configure logging
logger = logging.getLogger(__name__)


def _engine_options(url):
    # SQLite needs cross-thread access under the ASGI threadpool; in-memory
    # databases must also share one connection or every session sees an empty db
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            options["poolclass"] = StaticPool
        return options
    return {"pool_pre_ping": True}


def _masked(url):
    if "@" not in url:
        return url
    scheme, rest = url.split("://", 1)
    credentials, host = rest.split("@", 1)
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:****@{host}"


# One engine per process; every request borrows a session from it
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Function to get a database session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# Function to create tables
def create_tables():
    # Models register themselves on Base.metadata when imported
    import guestbook.model  # noqa: F401
    import newsletter.model  # noqa: F401
    import contact.model  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info(f"Database tables created successfully on {_masked(DATABASE_URL)}")
    except Exception as e:
        logger.error(f"Error creating database tables: {str(e)}")
        raise

def check_connection(db):
    """Return True when a trivial query round-trips to the database."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {str(e)}")
        return False

def dispose_engine():
    engine.dispose()
    logger.info("Database connections closed")
