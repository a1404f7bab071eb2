"""
Generic CRUD dispatcher for the document collections

The dispatcher maps the closed set of ``CrudOperation`` kinds onto
single calls of the document store and normalizes the results into
``Envelope`` models. Faults of the store never leave the dispatcher as
exceptions; they are turned into failure envelopes instead, which the
route layer translates into HTTP responses based on their outcome.
"""

import enum
import logging
from typing import Awaitable, Callable, Dict, Optional, Union

import pymongo.errors
from motor.motor_asyncio import AsyncIOMotorCollection

from .database import DocumentStore
from .identifiers import InvalidIdentifier, parse_identifier, stringify_identifiers
from ..misc.logger import enforce_logger
from ..schemas import Document, Envelope, Outcome


@enum.unique
class CrudOperation(enum.Enum):
    CREATE = "create"
    READ = "read"
    READ_ONE = "readOne"
    UPDATE = "update"
    PATCH = "patch"
    DELETE = "delete"


IDENTIFIER_FIELD: str = "_id"

_Handler = Callable[[AsyncIOMotorCollection, Document, Document], Awaitable[Envelope]]


def coerce_filter(query: Optional[Document]) -> Document:
    """
    Return a copy of the filter document with its identifier in the store's native type

    :raises InvalidIdentifier: when the identifier field can't be converted
    """

    query = dict(query or {})
    if IDENTIFIER_FIELD in query and not isinstance(query[IDENTIFIER_FIELD], dict):
        query[IDENTIFIER_FIELD] = parse_identifier(query[IDENTIFIER_FIELD])
    return query


class CrudDispatcher:
    """
    Dispatcher performing exactly one store operation per ``execute`` call

    :param store: document store providing the collections by name
    :param logger: optional logger used for DEBUG and ERROR messages
    """

    def __init__(self, store: DocumentStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = enforce_logger(logger, __name__)
        self._handlers: Dict[CrudOperation, _Handler] = {
            CrudOperation.CREATE: self._create,
            CrudOperation.READ: self._read,
            CrudOperation.READ_ONE: self._read_one,
            CrudOperation.UPDATE: self._merge,
            CrudOperation.PATCH: self._merge,
            CrudOperation.DELETE: self._delete
        }
        missing = set(CrudOperation).difference(self._handlers)
        if missing:
            raise RuntimeError(f"No handlers for operations {sorted(m.value for m in missing)}")

    async def execute(
            self,
            operation: Union[CrudOperation, str],
            collection_name: str,
            payload: Optional[Document] = None,
            query: Optional[Document] = None
    ) -> Envelope:
        """
        Perform the given operation on the named collection

        :param operation: kind of the operation or its tag (e.g. ``"readOne"``)
        :param collection_name: name of the target collection
        :param payload: document to insert or fields to merge (ignored when reading)
        :param query: filter selecting the existing documents, where an
            identifier field will be converted to an ``ObjectId`` first
        :return: envelope describing the result; it will never raise
            for faults of the store, invalid identifiers or unknown operations
        """

        try:
            operation = CrudOperation(operation)
        except ValueError:
            self.logger.warning(f"Rejected invalid operation {operation!r} on {collection_name!r}")
            return Envelope(
                success=False,
                message=f"Invalid operation {operation!r}",
                outcome=Outcome.INVALID_OPERATION
            )

        if not collection_name:
            return Envelope(success=False, message="Invalid collection name", outcome=Outcome.INVALID_OPERATION)

        try:
            query = coerce_filter(query)
        except InvalidIdentifier as exc:
            return Envelope(
                success=False,
                message="Invalid identifier",
                error=str(exc),
                outcome=Outcome.INVALID_IDENTIFIER
            )

        self.logger.debug(f"{operation.name} on {collection_name!r} with filter {query!r}")
        try:
            collection = self.store.get_collection(collection_name)
            return await self._handlers[operation](collection, dict(payload or {}), query)
        except pymongo.errors.PyMongoError as exc:
            self.logger.exception(f"{type(exc).__name__} during {operation.name} on {collection_name!r}")
            return Envelope(success=False, message="Server error", error=str(exc), outcome=Outcome.STORE_ERROR)

    async def _create(self, collection: AsyncIOMotorCollection, payload: Document, _: Document) -> Envelope:
        payload.pop(IDENTIFIER_FIELD, None)
        result = await collection.insert_one(payload)
        return Envelope(
            success=True,
            message="Document created successfully",
            insertedId=str(result.inserted_id),
            outcome=Outcome.CREATED
        )

    async def _read(self, collection: AsyncIOMotorCollection, _: Document, query: Document) -> Envelope:
        documents = await collection.find(query).to_list(length=None)
        return Envelope(
            success=True,
            message=f"{len(documents)} document(s) found",
            data=stringify_identifiers(documents)
        )

    async def _read_one(self, collection: AsyncIOMotorCollection, _: Document, query: Document) -> Envelope:
        document = await collection.find_one(query)
        if document is None:
            return Envelope(success=False, message="Document not found", outcome=Outcome.NOT_FOUND)
        return Envelope(success=True, message="Document found", data=stringify_identifiers(document))

    async def _merge(self, collection: AsyncIOMotorCollection, payload: Document, query: Document) -> Envelope:
        payload.pop(IDENTIFIER_FIELD, None)
        if not payload:
            return Envelope(success=False, message="No changes requested", outcome=Outcome.UNCHANGED)

        result = await collection.update_one(query, {"$set": payload})
        if result.modified_count == 0:
            return Envelope(
                success=False,
                message="No document found or no changes",
                outcome=Outcome.NOT_FOUND if result.matched_count == 0 else Outcome.UNCHANGED
            )
        return Envelope(
            success=True,
            message="Document updated successfully",
            modifiedCount=result.modified_count
        )

    async def _delete(self, collection: AsyncIOMotorCollection, _: Document, query: Document) -> Envelope:
        result = await collection.delete_one(query)
        if result.deleted_count == 0:
            return Envelope(success=False, message="Document not found", outcome=Outcome.NOT_FOUND)
        return Envelope(success=True, message="Document deleted successfully")
