import os

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from formstudio.core.config import settings

TEST_DATABASE_FILE = 'test_formstudio.db'


def resolve_database_url(url: str) -> str:
    """Async driver URL for a configured database URL."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


ASYNC_DATABASE_URL = resolve_database_url(settings.DATABASE_URL)

# Tests build the schema in an on-disk file; reuse it so the app's own
# sessions see the rows the fixtures write.
if settings.TESTING:
    test_db_path = os.path.join(os.getcwd(), TEST_DATABASE_FILE)
    if os.path.exists(test_db_path):
        ASYNC_DATABASE_URL = f"sqlite+aiosqlite:///{test_db_path}"

is_sqlite = ASYNC_DATABASE_URL.startswith("sqlite")

async_engine = create_async_engine(
    ASYNC_DATABASE_URL,
    echo=settings.DEBUG,
    connect_args={"check_same_thread": False} if is_sqlite else {},
)

if is_sqlite:
    @event.listens_for(async_engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    """One session per request; committed on success, rolled back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def create_tables():
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine():
    await async_engine.dispose()
