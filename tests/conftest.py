import os
import tempfile

# settings are read at import time, so the environment has to be in place first
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{tempfile.gettempdir()}/metapay_test_{os.getpid()}.db"
os.environ["ENV"] = "dev"
os.environ["ENABLE_ADMIN"] = "true"
os.environ["ENABLE_METRICS"] = "false"
os.environ["ADMIN_SECRET"] = "test-admin-secret"
os.environ["ADMIN_TOKEN_SECRET"] = "test-admin-token-secret"
os.environ["SELLAUTH_TOKEN"] = "test-sellauth-token"
os.environ["SELLAUTH_IPS"] = ""
os.environ["MASTER_SHOP_ID"] = "shop_1"
os.environ["DUMMY_PRODUCT_ID"] = "prod_dummy"
os.environ["DUMMY_VARIANT_ID"] = "var_dummy"

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from sqlmodel import SQLModel
from metapay.admin.utils import create_admin_token
from metapay.db.connection import async_engine, async_session
from metapay.main import app
from metapay.processor.client import get_processor
import metapay.schema.full_schema  # noqa: F401  registers the tables on SQLModel.metadata
from tests.factories import FakeProcessor

url_prefix="/api/v1"


@pytest.fixture(autouse=True)
async def fresh_schema():
    async with async_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield
    # pooled connections belong to this test's event loop
    await async_engine.dispose()


@pytest.fixture
async def db_session():

    async with async_session() as session:
        yield session


@pytest.fixture
def fake_processor():
    fake = FakeProcessor()
    app.dependency_overrides[get_processor] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_processor, None)


@pytest.fixture
async def ac_client(fake_processor):
    async with LifespanManager(app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac


@pytest.fixture
def admin_headers():
    issued = create_admin_token()
    return {"Authorization": f"Bearer {issued['token']}"}
