"""
Book catalog API routes
Each route maps one HTTP verb onto a single parameterized statement in the books service.
"""

import logging
from fastapi import APIRouter, HTTPException

from models.book import BookCreateRequest, BookUpdateRequest, BookResponse, BookListResponse, MessageResponse
from services.base_service import ServiceResult
from services.books_service import get_books_service

router = APIRouter()
logger = logging.getLogger(__name__)

# ServiceResult error types and the HTTP status each one surfaces as
ERROR_STATUS_CODES = {
    "RESOURCE_NOT_FOUND": 404,
    "CONFLICT": 409,
    "INVALID_DATA": 400,
}

def raise_for_result(result: ServiceResult) -> None:
    """Turn a failed service result into an HTTPException"""
    if result.success:
        return
    status_code = ERROR_STATUS_CODES.get(result.error_type, 500)
    raise HTTPException(status_code=status_code, detail=result.error)

@router.get("", response_model=BookListResponse)
async def list_books():
    """Get all books, ordered by title"""
    result = await get_books_service().list_books()
    raise_for_result(result)
    return {"books": result.data}

@router.get("/{isbn}", response_model=BookResponse)
async def get_book(isbn: str):
    """Get a single book"""
    result = await get_books_service().get_book(isbn)
    raise_for_result(result)
    return {"book": result.data[0]}

@router.post("", response_model=BookResponse, status_code=201)
async def create_book(request: BookCreateRequest):
    """Create a new book"""
    result = await get_books_service().create_book(request.model_dump())
    if result.error_type == "CONFLICT":
        raise HTTPException(status_code=409, detail=f"A book with isbn '{request.isbn}' already exists")
    raise_for_result(result)
    return {"book": result.data[0]}

@router.put("/{isbn}", response_model=BookResponse)
async def update_book(isbn: str, request: BookUpdateRequest):
    """Replace every field of a book except its isbn"""
    if "isbn" in request.model_fields_set:
        raise HTTPException(status_code=400, detail="Not allowed")

    result =await get_books_service().update_book(isbn, request.model_dump())
    raise_for_result(result)
    return {"book": result.data[0]}

@router.delete("/{isbn}", response_model=MessageResponse)
async def delete_book(isbn: str):
    """Delete a book"""
    result = await get_books_service().delete_book(isbn)
    raise_for_result(result)
    return {"message": "Book deleted"}
