"""
Shared test fixtures — in-memory async DB, sample posts, archive factory.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from archive_tree.archive import ArchiveConfig, DateArchive
from archive_tree.database import close_db, drop_db, init_db, make_engine
from archive_tree.models import Post


# ── Test Database (SQLite in-memory) ────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

@pytest_asyncio.fixture()
async def db_engine():
    engine = make_engine(TEST_DB_URL)
    await init_db(engine)
    yield engine
    await drop_db(engine)
    await close_db(engine)


@pytest_asyncio.fixture()
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# ── Sample Posts ────────────────────────────────────────
#
#   2009: May ×2, Nov ×1           → 3
#   2010: Jan ×2, Feb ×1, Mar ×1   → 4
#   2011: Mar ×1, Aug ×1           → 2
#   drafts (no published_at)       → 2

SAMPLE_POSTS = [
    ("Spring notes", datetime(2009, 5, 10, 9, 0), False),
    ("Late May", datetime(2009, 5, 20, 18, 45), False),
    ("November recap", datetime(2009, 11, 1, 12, 0), True),
    ("New year", datetime(2010, 1, 5, 8, 0), True),
    ("January again", datetime(2010, 1, 25, 22, 10), False),
    ("Valentine", datetime(2010, 2, 14, 14, 0), False),
    ("March 2010", datetime(2010, 3, 3, 11, 0), False),
    ("March 2011", datetime(2011, 3, 15, 10, 0), True),
    ("Summer", datetime(2011, 8, 1, 7, 30), False),
    ("Draft one", None, False),
    ("Draft two", None, True),
]


@pytest_asyncio.fixture()
async def posts(db_session):
    rows = [
        Post(title=title, published_at=published_at, featured=featured)
        for title, published_at, featured in SAMPLE_POSTS
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return rows


@pytest.fixture()
def utc_config():
    return ArchiveConfig(backend="sqlite", utc_offset=timedelta(0))


@pytest.fixture()
def make_archive(db_session, utc_config):
    """Build a DateArchive over Post bound to the test session."""

    def _make(**kwargs):
        kwargs.setdefault("config", utc_config)
        model = kwargs.pop("model", Post)
        return DateArchive(db_session, model, **kwargs)

    return _make


@pytest.fixture()
def archive(make_archive, posts):
    return make_archive()
