"""
Response shaping for the book routes.
Every failure body is a JSON object with a single ``message`` field.
"""

from enum import Enum

import structlog
from fastapi import status
from fastapi.responses import JSONResponse

from api.models import GatewayResult, MessageResponse

logger = structlog.get_logger(__name__)

BOOK_NOT_FOUND = "Book not found"
BOOK_UPDATED = "Book updated successfully!"
BOOK_DELETED = "Book deleted successfully!"
INTERNAL_ERROR = "Internal server error"


class Operation(str, Enum):
    """Route operations, each with a fixed failure message."""
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def failure_message(self) -> str:
        return FAILURE_MESSAGES[self]


FAILURE_MESSAGES = {
    Operation.LIST: "Failed to fetch books",
    Operation.GET: "Failed to fetch book",
    Operation.CREATE: "Failed to upload book",
    Operation.UPDATE: "Failed to update book",
    Operation.DELETE: "Failed to delete book",
}


def message_response(status_code: int, message: str) -> JSONResponse:
    """Build a ``{"message": ...}`` JSON response."""
    return JSONResponse(
        status_code=status_code,
        content=MessageResponse(message=message).model_dump()
    )


def not_found_response(operation: Operation, book_id: str) -> JSONResponse:
    """404 for a well-formed identifier that matched nothing."""
    logger.info("Book not found", operation=operation.value, book_id=book_id)
    return message_response(status.HTTP_404_NOT_FOUND, BOOK_NOT_FOUND)


def failure_response(operation: Operation, result: GatewayResult, **context) -> JSONResponse:
    """
    500 with the operation's static message.

    The error kind and detail are logged but never returned to the caller.
    """
    logger.error(
        "Book operation failed",
        operation=operation.value,
        error_kind=result.error_kind.value if result.error_kind else None,
        error=result.error_detail,
        **context
    )
    return message_response(status.HTTP_500_INTERNAL_SERVER_ERROR, operation.failure_message)
