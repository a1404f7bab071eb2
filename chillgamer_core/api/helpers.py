"""
Generic helper library for the core REST API
"""

import math
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .base import BadRequest, Conflict, InternalServerException, NotFound
from .dependency import LocalRequestData
from .. import schemas
from ..misc.logger import enforce_logger
from ..persistence.crud import CrudOperation
from ..persistence.identifiers import stringify_identifiers


SortSpec = Sequence[Tuple[str, int]]

MAX_QUERY_NUMBER: int = 2 ** 31 - 1


def parse_positive_int(value: Optional[str], default: int) -> int:
    """
    Return the value of a query parameter as positive integer or the default

    Absent, non-numeric, zero or negative values all fall back to the default,
    while values larger than ``MAX_QUERY_NUMBER`` are capped to it.
    """

    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number <= 0:
        return default
    return min(number, MAX_QUERY_NUMBER)


def unwrap(
        envelope: schemas.Envelope,
        not_found: str,
        unchanged: Optional[str] = None
) -> schemas.Envelope:
    """
    Return the envelope if it reports success or raise the matching API exception

    :param envelope: result of the CRUD dispatcher
    :param not_found: message for the 404 response when nothing matched
    :param unchanged: optional message for the 404 response when nothing changed
    :raises BadRequest: for invalid identifiers
    :raises NotFound: when no document matched or nothing has been changed
    :raises InternalServerException: for faults of the store or invalid operations
    """

    if envelope.success:
        return envelope
    if envelope.outcome == schemas.Outcome.INVALID_IDENTIFIER:
        raise BadRequest("Invalid identifier", envelope.error)
    if envelope.outcome == schemas.Outcome.NOT_FOUND:
        raise NotFound(not_found)
    if envelope.outcome == schemas.Outcome.UNCHANGED:
        raise NotFound(unchanged or not_found)
    raise InternalServerException(envelope.message, envelope.error, repeat=True)


async def ensure_unique(
        document: Dict[str, Any],
        collection: str,
        fields: Sequence[str],
        local: LocalRequestData,
        message: str
):
    """
    Raise a conflict if another document shares the values of all given fields

    The check is skipped when no fields are given or the document lacks one
    of them. Note that the check and the following insert are no atomic
    operation, so concurrent requests may still create duplicates.

    :raises BadRequest: when one of the fields holds an object or an array
    :raises Conflict: when such a document already exists
    """

    if not fields or any(field not in document for field in fields):
        return
    for field in fields:
        if isinstance(document[field], (dict, list)):
            raise BadRequest("Invalid data", f"The field {field!r} must hold a plain value")
    envelope = await local.dispatcher.execute(
        CrudOperation.READ_ONE,
        collection,
        query={field: document[field] for field in fields}
    )
    if envelope.success:
        raise Conflict(message, f"Existing document: {envelope.data.get('_id')!r}")
    if envelope.outcome != schemas.Outcome.NOT_FOUND:
        unwrap(envelope, message)


async def create_new_document(
        document: Optional[Dict[str, Any]],
        collection: str,
        unique_fields: Sequence[str],
        local: LocalRequestData,
        duplicate_message: str,
        logger: Optional[logging.Logger] = None
) -> schemas.Insertion:
    """
    Insert the given document after the presence and duplicate checks

    A client-supplied `_id` is dropped, the store always assigns a new one.

    :raises BadRequest: when the document is missing or empty
    :raises Conflict: when a duplicate has been detected
    """

    document = {k: v for k, v in (document or {}).items() if k != "_id"}
    if not document:
        raise BadRequest("Invalid data", "The request body must be a non-empty JSON object")
    await ensure_unique(document, collection, unique_fields, local, duplicate_message)
    envelope = unwrap(await local.dispatcher.execute(CrudOperation.CREATE, collection, document), duplicate_message)
    enforce_logger(logger).debug(f"Created document {envelope.insertedId} in {collection!r}")
    return schemas.Insertion(insertedId=envelope.insertedId)


async def paginate(
        collection: str,
        query: Dict[str, Any],
        page: Optional[str],
        limit: Optional[str],
        local: LocalRequestData,
        empty: Optional[str] = None
) -> schemas.Page:
    """
    Return one page of the documents matching the query

    :param collection: name of the collection
    :param query: filter document
    :param page: raw value of the one-based page query parameter
    :param limit: raw value of the page size query parameter
    :param local: contextual local data
    :param empty: optional message for a 404 response when nothing matched at all
    :raises NotFound: when ``empty`` has been given and no document matched
    """

    page = parse_positive_int(page, 1)
    limit = parse_positive_int(limit, local.config.general.page_size)
    handle = local.store.get_collection(collection)
    total = await handle.count_documents(query)
    if total == 0 and empty:
        raise NotFound(empty)
    documents = await handle.find(query, skip=(page - 1) * limit, limit=limit).to_list(length=None)
    return schemas.Page(
        data=stringify_identifiers(documents),
        currentPage=page,
        totalPage=math.ceil(total / limit)
    )


async def list_sorted(
        collection: str,
        query: Dict[str, Any],
        sort: SortSpec,
        limit: Optional[str],
        local: LocalRequestData,
        empty: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Return the first documents matching the query in the given order

    :raises NotFound: when ``empty`` has been given and no document matched
    """

    limit = parse_positive_int(limit, local.config.general.listing_limit)
    handle = local.store.get_collection(collection)
    documents = await handle.find(query, sort=list(sort), limit=limit).to_list(length=None)
    if not documents and empty:
        raise NotFound(empty)
    return stringify_identifiers(documents)
