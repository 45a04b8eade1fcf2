import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENABLE_SESSION_STORE", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from showcase.api.deps import get_upload_service
from showcase.auth.tokens import create_session_token
from showcase.database import Base, get_db
from showcase.main import app
from showcase.models import Account
from showcase.services.catalog import CatalogService
from showcase.services.uploads import UploadService


def _enforce_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine(request, tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'showcase.db'}")
    # SQLite ignores foreign keys unless asked, per connection
    if request.node.get_closest_marker("foreign_keys"):
        event.listen(engine.sync_engine, "connect", _enforce_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def admin(db) -> Account:
    account = Account(
        id="1001",
        email="admin@showcase.dev",
        first_name="Ada",
        last_name="Admin",
        is_admin=True
    )
    db.add(account)
    await db.commit()
    return account


@pytest.fixture
async def member(db) -> Account:
    account = Account(id="2002", email="member@showcase.dev", first_name="Max")
    db.add(account)
    await db.commit()
    return account


@pytest.fixture
async def other_member(db) -> Account:
    account = Account(id="3003", email="other@showcase.dev", first_name="Olga")
    db.add(account)
    await db.commit()
    return account


@pytest.fixture
def make_project(db, admin):
    """Create projects through the catalog as the admin account"""
    async def _make(**overrides):
        data = {
            "title": "Bot X",
            "description": "desc",
            "category": "bots",
        }
        data.update(overrides)
        return await CatalogService(db).create(data, admin.id)
    return _make


@pytest.fixture
async def client(session_factory, tmp_path):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    upload_dir = tmp_path / "uploads"
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_upload_service] = lambda: UploadService(
        upload_dir=str(upload_dir), max_bytes=1024
    )

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client

    app.dependency_overrides.clear()


def _bearer(account_id: str) -> dict:
    token = create_session_token(account_id, "test-session")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Build bearer headers for an account id"""
    return _bearer
