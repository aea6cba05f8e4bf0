"""
Collection gateway over the MongoDB books collection.
Every operation returns a GatewayResult instead of raising, so route
handlers branch on the outcome rather than catching store exceptions.
"""

from typing import Any, Dict

import structlog
from bson import ObjectId
from bson.errors import InvalidDocument, InvalidId
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import PyMongoError

from api.models import Book, ErrorKind, GatewayResult, Outcome

logger = structlog.get_logger(__name__)


def classify_error(exc: Exception) -> ErrorKind:
    """Map a store-layer exception onto an ErrorKind."""
    if isinstance(exc, InvalidId):
        return ErrorKind.INVALID_IDENTIFIER
    if isinstance(exc, (InvalidDocument, OverflowError)):
        return ErrorKind.MALFORMED_REQUEST_BODY
    return ErrorKind.STORE_UNAVAILABLE


STORE_ERRORS = (InvalidId, InvalidDocument, OverflowError, PyMongoError)

# Raised by jsonable_encoder for stored values it cannot render
PROJECTION_ERRORS = (TypeError, ValueError)


class BookCollectionGateway:
    """
    Gateway for single-document operations on the books collection.
    Owns no connection lifecycle; the collection is handed in at startup.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    @staticmethod
    def _without_identifier(document: Dict[str, Any]) -> Dict[str, Any]:
        # The store owns _id; a payload value is dropped, not rejected.
        return {key: value for key, value in document.items() if key != "_id"}

    async def list_all(self) -> GatewayResult:
        """
        Fetch every book in storage order.

        Returns:
            GatewayResult with outcome FOUND and a possibly empty books list
        """
        try:
            documents = await self.collection.find().to_list(length=None)
            books = [Book.from_document(doc) for doc in documents]
        except STORE_ERRORS + PROJECTION_ERRORS as e:
            return GatewayResult.error(classify_error(e), str(e))

        return GatewayResult(outcome=Outcome.FOUND, books=books)

    async def find_by_id(self, book_id: str) -> GatewayResult:
        """
        Fetch a single book.

        Args:
            book_id: 24-hex ObjectId string

        Returns:
            FOUND with the book, NOT_FOUND, or ERROR for a malformed
            identifier or store failure
        """
        try:
            document = await self.collection.find_one({"_id": ObjectId(book_id)})
            if document is None:
                return GatewayResult.not_found()
            book = Book.from_document(document)
        except STORE_ERRORS + PROJECTION_ERRORS as e:
            return GatewayResult.error(classify_error(e), str(e))

        return GatewayResult(outcome=Outcome.FOUND, book=book)

    async def insert(self, document: Dict[str, Any]) -> GatewayResult:
        """
        Insert a new book; the store assigns its identifier.

        Args:
            document: Arbitrary caller fields

        Returns:
            INSERTED with the assigned id and acknowledgement flag, or ERROR
        """
        try:
            result = await self.collection.insert_one(self._without_identifier(document))
        except STORE_ERRORS as e:
            return GatewayResult.error(classify_error(e), str(e))

        logger.debug("Inserted book", book_id=str(result.inserted_id))
        return GatewayResult(
            outcome=Outcome.INSERTED,
            inserted_id=str(result.inserted_id),
            acknowledged=result.acknowledged
        )

    async def update_by_id(self, book_id: str, partial: Dict[str, Any]) -> GatewayResult:
        """
        Merge the given fields into an existing book.

        Fields absent from ``partial`` keep their stored values.

        Args:
            book_id: 24-hex ObjectId string
            partial: Fields to overwrite

        Returns:
            UPDATED, NOT_FOUND when nothing matched, or ERROR
        """
        try:
            result = await self.collection.update_one(
                {"_id": ObjectId(book_id)},
                {"$set": self._without_identifier(partial)}
            )
        except STORE_ERRORS as e:
            return GatewayResult.error(classify_error(e), str(e))

        if result.matched_count == 0:
            return GatewayResult.not_found()
        return GatewayResult(outcome=Outcome.UPDATED, acknowledged=result.acknowledged)

    async def delete_by_id(self, book_id: str) -> GatewayResult:
        """
        Delete a single book.

        Returns:
            DELETED, NOT_FOUND when nothing matched, or ERROR
        """
        try:
            result = await self.collection.delete_one({"_id": ObjectId(book_id)})
        except STORE_ERRORS as e:
            return GatewayResult.error(classify_error(e), str(e))

        if result.deleted_count == 0:
            return GatewayResult.not_found()
        return GatewayResult(outcome=Outcome.DELETED, acknowledged=result.acknowledged)

    async def ping(self) -> bool:
        """Check that the backing database answers a ping."""
        try:
            await self.collection.database.command("ping")
        except PyMongoError as e:
            logger.error("Database ping failed", error=str(e))
            return False
        return True
