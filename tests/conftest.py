import os

# before any spoonplan import: settings and the engine are built at import time
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = ""

from typing import AsyncGenerator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from spoonplan.db import async_session, engine
from spoonplan.main import app


async def _reset_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as c:
        c.portal.call(_reset_db)
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    await _reset_db()
    async with async_session() as session:
        yield session
