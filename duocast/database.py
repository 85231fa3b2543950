"""
SQLite storage for podcast jobs.

One async engine is shared by the job store, the pipeline tasks and the
request handlers; every store call opens its own short session.
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import text

from duocast.config import DATABASE_URL, ensure_directories
from duocast.models import Base


# Pipeline tasks write while status polls read, so wait on a locked file
# instead of failing straight away.
SQLITE_BUSY_TIMEOUT_SECONDS = 30

engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    connect_args={'timeout': SQLITE_BUSY_TIMEOUT_SECONDS},
)

# Jobs are read after commit by callers outside the session
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def enable_wal_mode():
    """Switch the job database to write-ahead logging."""
    async with engine.begin() as conn:
        await conn.execute(text('PRAGMA journal_mode=WAL'))
        await conn.execute(text('PRAGMA synchronous=NORMAL'))


async def init_db():
    """Create the data directories and the podcasts table."""
    ensure_directories()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await enable_wal_mode()


async def close_db():
    """Dispose of pooled connections on shutdown."""
    await engine.dispose()
