"""Shared fixtures: a throwaway SQLite database and an in-process HTTP client.

Environment is set before any ``app`` import so the module-level settings and
engine pick up the test database.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="property-ops-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["APP_ENV"] = "test"
os.environ["AUDIT_ENABLED"] = "false"
os.environ["DEFAULT_WORKSPACE_ID"] = "test-workspace"
os.environ["OPENAI_API_KEY"] = ""
os.environ["RESEND_API_KEY"] = ""

import httpx  # noqa: E402
import pytest  # noqa: E402

from app.db.base import async_session_factory, create_all, drop_all, engine  # noqa: E402
from app.main import app  # noqa: E402


@pytest.fixture(autouse=True)
async def database():
    await create_all()
    yield
    await drop_all()
    # Pooled aiosqlite connections must not leak into the next test's event loop
    await engine.dispose()


@pytest.fixture
async def session():
    async with async_session_factory() as s:
        yield s
        await s.rollback()


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
