"""
pytest configuration and fixtures for the bookstore test suite
The asyncpg pool is swapped for an in-memory fake that answers the books service statements.
"""

import os
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

os.environ.setdefault("ENV", "test")

import asyncpg
import pytest
from fastapi.testclient import TestClient

from app import app
from database import connection
from models.book import BOOK_FIELDS, BOOK_UPDATE_FIELDS
from book_data import BOOK_ONE
from services.books_service import (
    LIST_BOOKS_SQL,
    GET_BOOK_SQL,
    CREATE_BOOK_SQL,
    UPDATE_BOOK_SQL,
    DELETE_BOOK_SQL,
)


class FakeConnection:
    """Answers the books service statements from a dict keyed by isbn"""

    def __init__(self, books: Dict[str, Dict[str, Any]]):
        self.books = books
        self.queries = []

    async def fetchval(self, query: str, *args) -> Any:
        self.queries.append(query)
        return 1

    async def fetch(self, query: str, *args):
        self.queries.append(query)
        if query == LIST_BOOKS_SQL:
            return [dict(book) for book in sorted(self.books.values(), key=lambda book: book["title"])]
        raise AssertionError(f"Unexpected fetch query: {query}")

    async def fetchrow(self, query: str, *args) -> Optional[Dict[str, Any]]:
        self.queries.append(query)

        if query == GET_BOOK_SQL:
            book = self.books.get(args[0])
            return dict(book) if book else None

        if query == CREATE_BOOK_SQL:
            row = dict(zip(BOOK_FIELDS, args))
            if row["isbn"] in self.books:
                raise asyncpg.UniqueViolationError(
                    'duplicate key value violates unique constraint "books_pkey"'
                )
            self.books[row["isbn"]] = row
            return dict(row)

        if query == UPDATE_BOOK_SQL:
            *values, isbn = args
            if isbn not in self.books:
                return None
            self.books[isbn].update(zip(BOOK_UPDATE_FIELDS, values))
            return dict(self.books[isbn])

        if query == DELETE_BOOK_SQL:
            book = self.books.pop(args[0], None)
            return {"isbn": book["isbn"]} if book else None

        raise AssertionError(f"Unexpected fetchrow query: {query}")


class FakePool:
    def __init__(self, books: Dict[str, Dict[str, Any]]):
        self.connection = FakeConnection(books)

    @asynccontextmanager
    async def acquire(self):
        yield self.connection


class UnreachablePool:
    """Pool whose every connection attempt fails"""

    @asynccontextmanager
    async def acquire(self):
        raise ConnectionRefusedError("could not connect to server")
        yield


@pytest.fixture
def books_table() -> Dict[str, Dict[str, Any]]:
    """In-memory books table seeded with one book"""
    return {BOOK_ONE["isbn"]: dict(BOOK_ONE)}


@pytest.fixture
def fake_pool(books_table, monkeypatch) -> FakePool:
    pool = FakePool(books_table)
    monkeypatch.setattr(connection, "db_pool", pool)
    return pool


@pytest.fixture
def client(fake_pool) -> TestClient:
    # Not used as a context manager so the lifespan never opens a real pool
    return TestClient(app)


@pytest.fixture
def unreachable_client(monkeypatch) -> TestClient:
    monkeypatch.setattr(connection, "db_pool", UnreachablePool())
    return TestClient(app)
