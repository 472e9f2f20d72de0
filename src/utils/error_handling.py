"""
Centralized Error Handling and Logging System
Every error leaves the API in the same envelope:
{"error": {"message": ..., "status": ...}, "message": ...}
"""

import json
import logging
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Union
from contextvars import ContextVar

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

# Context variables for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

logger = logging.getLogger(__name__)

# JSON type names for pydantic type errors
JSON_TYPE_NAMES = {
    "string_type": "string",
    "int_type": "integer",
    "int_parsing": "integer",
    "model_type": "object",
    "model_attributes_type": "object",
    "dict_type": "object",
}

class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    # Security settings
    SANITIZE_SENSITIVE_FIELDS = True
    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization',
        'auth', 'bearer', 'credential', 'api_key', 'cookie'
    ]

    # Logging settings
    LOG_REQUEST_BODIES = True
    LOG_HEADERS = True
    LOG_CLIENT_ERRORS = True
    MAX_BODY_LOG_SIZE = 5000  # Truncate large bodies

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        """Check if a field contains sensitive data"""
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively sanitize sensitive data from logs"""
        if not cls.SANITIZE_SENSITIVE_FIELDS:
            return data

        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(key) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data

class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True,
        level: int = logging.ERROR
    ) -> str:
        """Log structured error with full context"""

        # Reuse the request's trace ID so logs line up with X-Trace-ID
        trace_id = request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": logging.getLevelName(level)
        }

        if request:
            headers = dict(request.headers)
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(headers) if ErrorHandlingConfig.LOG_HEADERS else {},
                "client_ip": request.client.host if request.client else None,
                "user_agent": headers.get("user-agent", "unknown")
            }

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
                "module": getattr(exception, '__module__', 'unknown')
            }

            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        logger.log(level, json.dumps(log_entry, indent=2, default=str))

        return trace_id

class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture request context and add request IDs"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)

        # Store request body for potential error logging
        body = None
        if ErrorHandlingConfig.LOG_REQUEST_BODIES:
            try:
                body = await request.body()
            except Exception as e:
                StructuredLogger.log_error(
                    "middleware_error",
                    "Failed to capture request body",
                    request=request,
                    exception=e,
                    include_traceback=False
                )

        request.state.captured_body = body
        request.state.trace_id = trace_id

        try:
            response = await call_next(request)
        except Exception as e:
            # Answer here so the 500 still carries the trace ID of its log entry
            response = await general_exception_handler(request, e)
        # Add trace ID to response headers for client-side debugging
        response.headers["X-Trace-ID"] = trace_id
        return response

def error_envelope(message: Union[str, List[str]], status_code: int) -> Dict[str, Any]:
    """Build the error body shared by every error response"""
    return {
        "error": {"message": message, "status": status_code},
        "message": message,
    }

def _captured_body(request: Request) -> Optional[str]:
    body = getattr(request.state, 'captured_body', None)
    if not body:
        return None
    try:
        return body.decode('utf-8')
    except UnicodeDecodeError:
        return "DECODE_ERROR"

def _instance_path(loc: Sequence[Union[str, int]]) -> str:
    path = "instance"
    for part in loc:
        path += f"[{part}]" if isinstance(part, int) else f".{part}"
    return path

def format_validation_error(error: Dict[str, Any]) -> str:
    """Phrase one pydantic error the way a JSON schema validator would"""
    loc = list(error.get("loc", []))
    if loc and loc[0] == "body":
        loc = loc[1:]
    error_type = error.get("type", "")

    if error_type == "missing":
        if not loc:
            return "instance is not of a type(s) object"
        return f'{_instance_path(loc[:-1])} requires property "{loc[-1]}"'

    if error_type == "extra_forbidden":
        return f'{_instance_path(loc[:-1])} is not allowed to have the additional property "{loc[-1]}"'

    if error_type in JSON_TYPE_NAMES:
        return f"{_instance_path(loc)} is not of a type(s) {JSON_TYPE_NAMES[error_type]}"

    if error_type == "json_invalid":
        return "instance is not valid JSON"

    if not loc:
        return error.get("msg", "Invalid request")
    return f"{_instance_path(loc)} {error.get('msg', 'is invalid')}"

def format_validation_errors(errors: Sequence[Dict[str, Any]]) -> List[str]:
    return [format_validation_error(error) for error in errors]

# Global Exception Handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions (raised by routes or by routing itself) with logging"""

    should_log = exc.status_code >= 500 or (exc.status_code >= 400 and ErrorHandlingConfig.LOG_CLIENT_ERRORS)

    if should_log:
        StructuredLogger.log_error(
            f"http_{exc.status_code}",
            f"HTTP {exc.status_code}: {exc.detail}",
            request=request,
            exception=exc,
            extra_context={
                "status_code": exc.status_code,
                "request_body": _captured_body(request)
            },
            include_traceback=exc.status_code >= 500,
            level=logging.ERROR if exc.status_code >= 500 else logging.WARNING
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.detail, exc.status_code),
        headers=getattr(exc, "headers", None)
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors as HTTP 400 with one message per violation"""

    messages = format_validation_errors(exc.errors())

    StructuredLogger.log_error(
        "validation_error_400",
        f"Request validation failed: {len(messages)} validation errors",
        request=request,
        exception=exc,
        extra_context={
            "validation_errors": messages,
            "request_body": _captured_body(request)
        },
        include_traceback=False,
        level=logging.WARNING
    )

    return JSONResponse(
        status_code=400,
        content=error_envelope(messages, 400)
    )

async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions"""

    StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc,
        extra_context={
            "request_body": _captured_body(request)
        },
        include_traceback=True
    )

    # Build safe response (don't expose internal details)
    return JSONResponse(
        status_code=500,
        content=error_envelope("An unexpected error occurred", 500)
    )

def setup_error_handling(app):
    """Setup comprehensive error handling for FastAPI app"""

    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling system initialized")
