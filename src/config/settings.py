"""
Configuration settings for the Bookstore Backend
"""

import os
import logging

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Configure logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Environment configuration
ENV = os.getenv("ENV", "development")  # development, test or production
PORT = int(os.getenv("PORT", 3000))

# Database configuration - the test environment gets its own database
DEFAULT_DATABASE_URL = "postgresql:///books_test" if ENV == "test" else "postgresql:///books"
DATABASE_URL = os.getenv("DATABASE_URL") or DEFAULT_DATABASE_URL
DB_POOL_MIN_SIZE = int(os.getenv("DB_POOL_MIN_SIZE", 2))
DB_POOL_MAX_SIZE = int(os.getenv("DB_POOL_MAX_SIZE", 10))
DB_COMMAND_TIMEOUT = int(os.getenv("DB_COMMAND_TIMEOUT", 60))

if DB_POOL_MIN_SIZE > DB_POOL_MAX_SIZE:
    raise ValueError("DB_POOL_MIN_SIZE cannot be greater than DB_POOL_MAX_SIZE")

# CORS settings
ALLOWED_ORIGINS = [
    origin.strip() for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",") if origin.strip()
]

logger.info(f"Environment: {ENV}")
