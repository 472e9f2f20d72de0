"""
Books API integration testing against a real PostgreSQL database
Seeds one book before each test and empties the table afterwards.
Runs only when TEST_DATABASE_URL points at a disposable database, e.g.
TEST_DATABASE_URL=postgresql:///books_test pytest -m integration
"""

import os
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from app import app
from book_data import BOOK_ONE, BOOK_TWO, BOOK_TWO_UPDATE
from database.connection import init_database, close_database, get_db_pool
from models.book import BOOK_FIELDS
from services.books_service import CREATE_BOOK_SQL

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")
SCHEMA_PATH = Path(__file__).parent.parent / "data.sql"

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL not set"),
]


@pytest_asyncio.fixture
async def api_client():
    """HTTP client bound to the app with a real pool and one seeded book"""
    await init_database(TEST_DATABASE_URL)
    db_pool = get_db_pool()

    async with db_pool.acquire() as conn:
        await conn.execute(SCHEMA_PATH.read_text())
        await conn.execute(CREATE_BOOK_SQL, *[BOOK_ONE[field] for field in BOOK_FIELDS])

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    async with db_pool.acquire() as conn:
        await conn.execute("DELETE FROM books")
    await close_database()


class TestBooksAgainstDatabase:

    @pytest.mark.asyncio
    async def test_list_books(self, api_client):
        response = await api_client.get("/books")

        assert response.status_code == 200
        assert response.json() == {"books": [BOOK_ONE]}

    @pytest.mark.asyncio
    async def test_get_book(self, api_client):
        response = await api_client.get(f"/books/{BOOK_ONE['isbn']}")

        assert response.status_code == 200
        assert response.json() == {"book": BOOK_ONE}

    @pytest.mark.asyncio
    async def test_create_book(self, api_client):
        response = await api_client.post("/books", json=BOOK_TWO)

        assert response.status_code == 201
        assert response.json() == {"book": BOOK_TWO}

    @pytest.mark.asyncio
    async def test_create_book_schema_error(self, api_client):
        payload = {key: value for key, value in BOOK_TWO.items() if key != "year"}

        response = await api_client.post("/books", json=payload)

        assert response.status_code == 400
        assert response.json() == {
            "error": {"message": ['instance requires property "year"'], "status": 400},
            "message": ['instance requires property "year"'],
        }

    @pytest.mark.asyncio
    async def test_create_duplicate_book(self, api_client):
        response = await api_client.post("/books", json=BOOK_ONE)

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_update_book(self, api_client):
        response = await api_client.put(f"/books/{BOOK_ONE['isbn']}", json=BOOK_TWO_UPDATE)

        assert response.status_code == 200
        assert response.json() == {"book": dict(BOOK_TWO_UPDATE, isbn=BOOK_ONE["isbn"])}

    @pytest.mark.asyncio
    async def test_delete_book(self, api_client):
        response = await api_client.delete(f"/books/{BOOK_ONE['isbn']}")

        assert response.status_code == 200
        follow_up = await api_client.get(f"/books/{BOOK_ONE['isbn']}")
        assert follow_up.status_code == 404

    @pytest.mark.asyncio
    async def test_health(self, api_client):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
