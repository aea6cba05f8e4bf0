"""
API models and schemas for the book service.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import ObjectId
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field


class Outcome(str, Enum):
    """Discriminant of a gateway result."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    INSERTED = "inserted"
    UPDATED = "updated"
    DELETED = "deleted"
    ERROR = "error"


class ErrorKind(str, Enum):
    """Failure classes that collapse to a 500 at the HTTP boundary."""
    INVALID_IDENTIFIER = "invalid_identifier"
    STORE_UNAVAILABLE = "store_unavailable"
    MALFORMED_REQUEST_BODY = "malformed_request_body"


class Book(BaseModel):
    """
    A schema-less book document.

    The store identifier is kept apart from the caller-supplied fields so it
    can never be overwritten by a payload.
    """
    id: str = Field(..., description="Store-assigned identifier (24-hex ObjectId)")
    fields: Dict[str, Any] = Field(default_factory=dict, description="Caller-supplied fields")

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Book":
        """Build a Book from a raw MongoDB document."""
        doc = dict(document)
        book_id = doc.pop("_id")
        return cls(
            id=str(book_id),
            fields=jsonable_encoder(doc, custom_encoder={ObjectId: str}),
        )

    def to_json(self) -> Dict[str, Any]:
        """JSON projection with the identifier exposed as ``_id``."""
        return {"_id": self.id, **self.fields}


class GatewayResult(BaseModel):
    """Outcome of a single collection operation."""
    outcome: Outcome
    book: Optional[Book] = None
    books: List[Book] = Field(default_factory=list)
    inserted_id: Optional[str] = None
    acknowledged: bool = False
    error_kind: Optional[ErrorKind] = None
    error_detail: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.outcome == Outcome.ERROR

    @classmethod
    def not_found(cls) -> "GatewayResult":
        return cls(outcome=Outcome.NOT_FOUND)

    @classmethod
    def error(cls, kind: ErrorKind, detail: str) -> "GatewayResult":
        return cls(outcome=Outcome.ERROR, error_kind=kind, error_detail=detail)


class MessageResponse(BaseModel):
    """Single-message response body used for acknowledgements and failures."""
    message: str = Field(..., description="Human-readable message")


class InsertResultResponse(BaseModel):
    """Insert acknowledgement returned by the upload route."""
    acknowledged: bool = Field(..., description="Write acknowledged by the store")
    insertedId: str = Field(..., description="Identifier assigned to the new book")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="API health status")
    timestamp: datetime = Field(..., description="Health check timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
