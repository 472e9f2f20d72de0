"""
Books service - parameterized SQL for the books table
"""

import logging
from typing import Dict, Any, Optional
from models.book import BOOK_FIELDS, BOOK_UPDATE_FIELDS
from services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

RETURNING_COLUMNS = ", ".join(BOOK_FIELDS)

LIST_BOOKS_SQL = f"""
    SELECT {RETURNING_COLUMNS}
    FROM books
    ORDER BY title
"""

GET_BOOK_SQL = f"""
    SELECT {RETURNING_COLUMNS}
    FROM books
    WHERE isbn = $1
"""

CREATE_BOOK_SQL = f"""
    INSERT INTO books ({RETURNING_COLUMNS})
    VALUES ({", ".join(f"${i}" for i in range(1, len(BOOK_FIELDS) + 1))})
    RETURNING {RETURNING_COLUMNS}
"""

UPDATE_BOOK_SQL = f"""
    UPDATE books
    SET {", ".join(f"{field} = ${i}" for i, field in enumerate(BOOK_UPDATE_FIELDS, start=1))}
    WHERE isbn = ${len(BOOK_UPDATE_FIELDS) + 1}
    RETURNING {RETURNING_COLUMNS}
"""

DELETE_BOOK_SQL = """
    DELETE FROM books
    WHERE isbn = $1
    RETURNING isbn
"""

def book_not_found_message(isbn: str) -> str:
    return f"There is no book with an isbn '{isbn}'"

class BooksService(BaseService):
    """Service for book catalog operations"""

    def __init__(self):
        super().__init__("books")

    async def list_books(self) -> ServiceResult:
        """Get every book, ordered by title"""
        return await self.fetch_rows(LIST_BOOKS_SQL)

    async def get_book(self, isbn: str) -> ServiceResult:
        """Get a single book by its isbn"""
        return await self.fetch_one(GET_BOOK_SQL, isbn, not_found_message=book_not_found_message(isbn))

    async def create_book(self, data: Dict[str, Any]) -> ServiceResult:
        """
        Insert a new book

        Args:
            data: Validated payload holding every book field

        Returns:
            ServiceResult with the inserted row, or CONFLICT when the isbn exists
        """
        logger.info(f"Creating book with isbn: {data['isbn']}")
        values = [data[field] for field in BOOK_FIELDS]
        return await self.fetch_one(
            CREATE_BOOK_SQL,
            *values,
            not_found_message="Book was not created"
        )

    async def update_book(self, isbn: str, data: Dict[str, Any]) -> ServiceResult:
        """
        Replace every mutable field of a book

        Args:
            isbn: Key of the book to update
            data: Validated payload holding every field except isbn

        Returns:
            ServiceResult with the updated row, or RESOURCE_NOT_FOUND
        """
        logger.info(f"Updating book {isbn}")
        values = [data[field] for field in BOOK_UPDATE_FIELDS]
        return await self.fetch_one(
            UPDATE_BOOK_SQL,
            *values,
            isbn,
            not_found_message=book_not_found_message(isbn)
        )

    async def delete_book(self, isbn: str) -> ServiceResult:
        """Delete a book by its isbn"""
        logger.info(f"Deleting book {isbn}")
        return await self.fetch_one(DELETE_BOOK_SQL, isbn, not_found_message=book_not_found_message(isbn))


# Global service instance
_books_service: Optional[BooksService] = None

def get_books_service() -> BooksService:
    """Get the global books service instance"""
    global _books_service
    if _books_service is None:
        _books_service = BooksService()
    return _books_service
