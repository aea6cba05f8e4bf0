"""
Book CRUD routes.
"""

import json
from typing import Any, Dict, Optional, Tuple

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from api.gateway import BookCollectionGateway
from api.models import ErrorKind, GatewayResult, InsertResultResponse, Outcome
from api.responses import (
    BOOK_DELETED, BOOK_UPDATED, Operation,
    failure_response, message_response, not_found_response
)

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Books"])


def reject_constant(name: str):
    """Refuse NaN and Infinity, which are not valid JSON."""
    raise ValueError(f"invalid JSON constant: {name}")


def get_gateway(request: Request) -> BookCollectionGateway:
    """Gateway built once at startup and shared by every request."""
    return request.app.state.gateway


async def read_json_object(request: Request) -> Tuple[Optional[Dict[str, Any]], Optional[GatewayResult]]:
    """
    Parse the request body as a JSON object.

    An empty body reads as ``{}``.

    Returns:
        (payload, None) on success, (None, error result) otherwise
    """
    raw = await request.body()
    if not raw.strip():
        return {}, None

    try:
        payload = json.loads(raw, parse_constant=reject_constant)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        return None, GatewayResult.error(ErrorKind.MALFORMED_REQUEST_BODY, str(e))

    if not isinstance(payload, dict):
        return None, GatewayResult.error(
            ErrorKind.MALFORMED_REQUEST_BODY,
            f"expected a JSON object, got {type(payload).__name__}"
        )
    return payload, None


@router.get("/all-books")
async def list_books(gateway: BookCollectionGateway = Depends(get_gateway)):
    """List every book in the collection."""
    result = await gateway.list_all()
    if result.is_error:
        return failure_response(Operation.LIST, result)

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content=[book.to_json() for book in result.books]
    )


@router.get("/book/{book_id}")
async def get_book(book_id: str, gateway: BookCollectionGateway = Depends(get_gateway)):
    """
    Get a single book by ID.

    - **book_id**: MongoDB ObjectId (24 hex characters)
    """
    result = await gateway.find_by_id(book_id)
    if result.is_error:
        return failure_response(Operation.GET, result, book_id=book_id)
    if result.outcome == Outcome.NOT_FOUND:
        return not_found_response(Operation.GET, book_id)

    return JSONResponse(status_code=status.HTTP_200_OK, content=result.book.to_json())


@router.post("/upload-book")
async def upload_book(request: Request, gateway: BookCollectionGateway = Depends(get_gateway)):
    """Store a new book of any shape and return the insert acknowledgement."""
    payload, error = await read_json_object(request)
    if error:
        return failure_response(Operation.CREATE, error)

    result = await gateway.insert(payload)
    if result.is_error:
        return failure_response(Operation.CREATE, result)

    logger.info("Book uploaded", book_id=result.inserted_id)
    body = InsertResultResponse(acknowledged=result.acknowledged, insertedId=result.inserted_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump())


@router.put("/update-book/{book_id}")
async def update_book(
    book_id: str,
    request: Request,
    gateway: BookCollectionGateway = Depends(get_gateway)
):
    """
    Overwrite the fields present in the body; other fields are kept.

    - **book_id**: MongoDB ObjectId (24 hex characters)
    """
    payload, error = await read_json_object(request)
    if error:
        return failure_response(Operation.UPDATE, error, book_id=book_id)

    result = await gateway.update_by_id(book_id, payload)
    if result.is_error:
        return failure_response(Operation.UPDATE, result, book_id=book_id)
    if result.outcome == Outcome.NOT_FOUND:
        return not_found_response(Operation.UPDATE, book_id)

    logger.info("Book updated", book_id=book_id, fields=sorted(payload))
    return message_response(status.HTTP_200_OK, BOOK_UPDATED)


@router.delete("/delete-book/{book_id}")
async def delete_book(book_id: str, gateway: BookCollectionGateway = Depends(get_gateway)):
    """
    Delete a book by ID.

    - **book_id**: MongoDB ObjectId (24 hex characters)
    """
    result = await gateway.delete_by_id(book_id)
    if result.is_error:
        return failure_response(Operation.DELETE, result, book_id=book_id)
    if result.outcome == Outcome.NOT_FOUND:
        return not_found_response(Operation.DELETE, book_id)

    logger.info("Book deleted", book_id=book_id)
    return message_response(status.HTTP_200_OK, BOOK_DELETED)
