"""
Base service layer for parameterized database operations
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass

import asyncpg

from database.connection import get_db_pool

logger = logging.getLogger(__name__)

@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None

class BaseService:
    """Base service that runs single parameterized statements against one table"""

    def __init__(self, resource_name: str):
        self.resource_name = resource_name
        logger.info(f"BaseService initialized for resource: {resource_name}")

    async def fetch_rows(self, query: str, *args) -> ServiceResult:
        """
        Run a statement returning any number of rows

        Args:
            query: SQL with $n placeholders
            *args: Values bound to the placeholders

        Returns:
            ServiceResult with every returned row
        """
        try:
            db_pool = get_db_pool()
            async with db_pool.acquire() as conn:
                rows = await conn.fetch(query, *args)

            data = [dict(row) for row in rows]
            return ServiceResult(success=True, data=data, count=len(data))

        except Exception as e:
            return self._handle_database_error("fetch", e)

    async def fetch_one(self, query: str, *args, not_found_message: str) -> ServiceResult:
        """
        Run a statement expected to return exactly one row

        Args:
            query: SQL with $n placeholders
            *args: Values bound to the placeholders
            not_found_message: Error message used when no row comes back

        Returns:
            ServiceResult with the single row, or RESOURCE_NOT_FOUND
        """
        try:
            db_pool = get_db_pool()
            async with db_pool.acquire() as conn:
                row = await conn.fetchrow(query, *args)

            if row is None:
                return ServiceResult(
                    success=False,
                    error=not_found_message,
                    error_type="RESOURCE_NOT_FOUND"
                )

            return ServiceResult(success=True, data=[dict(row)], count=1)

        except Exception as e:
            return self._handle_database_error("fetch_one", e)

    def _handle_database_error(self, operation: str, e: Exception) -> ServiceResult:
        """Classify a database failure into a ServiceResult error type"""
        if isinstance(e, asyncpg.UniqueViolationError):
            logger.warning(f"{operation} on {self.resource_name} violated a unique constraint: {e}")
            return ServiceResult(
                success=False,
                error=str(e),
                error_type="CONFLICT"
            )

        if isinstance(e, (asyncpg.DataError, asyncpg.IntegrityConstraintViolationError)):
            logger.warning(f"{operation} on {self.resource_name} rejected by the database: {e}")
            return ServiceResult(
                success=False,
                error=str(e),
                error_type="INVALID_DATA"
            )

        logger.error(f"{operation} operation failed for {self.resource_name}: {e}", exc_info=True)
        return ServiceResult(
            success=False,
            error=f"Database operation failed: {e}",
            error_type="DATABASE_ERROR"
        )
