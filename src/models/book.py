"""
Book-related Pydantic models
"""

from typing import Annotated, Any, List, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

# Columns in table order, used to build every SQL statement
BOOK_FIELDS = ["isbn", "amazon_url", "author", "language", "pages", "publisher", "title", "year"]
BOOK_UPDATE_FIELDS = [field for field in BOOK_FIELDS if field != "isbn"]

# Payloads are checked like a JSON schema: no coercion, no unknown properties
PAYLOAD_CONFIG = ConfigDict(extra="forbid", strict=True)


def integral_number(value: Any) -> Any:
    """JSON schema counts 264.0 as an integer, so whole floats pass as ints"""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


JsonInt = Annotated[int, BeforeValidator(integral_number)]


class BookCreateRequest(BaseModel):
    model_config = PAYLOAD_CONFIG

    isbn: str
    amazon_url: str
    author: str
    language: str
    pages: JsonInt
    publisher: str
    title: str
    year: JsonInt


class BookUpdateRequest(BaseModel):
    """Full replacement of a book's mutable fields. The isbn comes from the path."""
    model_config = PAYLOAD_CONFIG

    amazon_url: str
    author: str
    language: str
    pages: JsonInt
    publisher: str
    title: str
    year: JsonInt

    # Accepted only so the route can refuse it with a plain "Not allowed"
    isbn: Optional[str] = Field(default=None, exclude=True)


class Book(BaseModel):
    isbn: str
    amazon_url: str
    author: str
    language: str
    pages: int
    publisher: str
    title: str
    year: int


class BookResponse(BaseModel):
    book: Book


class BookListResponse(BaseModel):
    books: List[Book]


class MessageResponse(BaseModel):
    message: str
