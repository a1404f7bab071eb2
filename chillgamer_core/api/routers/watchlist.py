"""
ChillGamer router module for /watchList and /myWatchList requests
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from ..base import BadRequest
from ..dependency import LocalRequestData
from .. import helpers
from ...persistence.crud import CrudOperation
from ... import schemas


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Watchlist"])

_errors = {k: {"model": schemas.APIError} for k in (400, 404, 500)}


@router.post(
    "/watchList",
    status_code=201,
    response_model=schemas.Insertion,
    responses={k: {"model": schemas.APIError} for k in (400, 409, 500)}
)
async def add_to_watchlist(
        entry: Optional[Dict[str, Any]] = Body(None),
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Add a game to the watchlist of a visitor.

    The body should contain the `visitor` email and the `watchId` of the
    watched review, but may contain arbitrary other fields as well.

    * `400`: if the body is missing or empty
    * `409`: if the visitor already watches this review
    """

    return await helpers.create_new_document(
        entry,
        local.watchlist,
        local.config.general.watchlist_unique_fields,
        local,
        "This game is already on the watchlist",
        logger
    )


@router.get("/myWatchList", response_model=schemas.Page, responses=_errors)
async def get_watchlist_of_visitor(
        email: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return one page of the watchlist of the visitor with the given `email`.

    * `400`: if the `email` query parameter is missing
    * `404`: if the watchlist of the visitor is empty
    """

    if not email:
        raise BadRequest("Email is required")
    return await helpers.paginate(
        local.watchlist,
        {"visitor": email},
        page,
        limit,
        local,
        empty="No watchlist entries found for this email"
    )


@router.get("/myWatchList/{id}", response_model=schemas.Document, responses=_errors)
async def get_watchlist_entry_by_id(
        id: str,  # noqa
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the watchlist entry identified by its `id`.
    """

    envelope = await local.dispatcher.execute(CrudOperation.READ_ONE, local.watchlist, query={"_id": id})
    return helpers.unwrap(envelope, "Watchlist entry not found").data


@router.delete("/myWatchList/{id}", response_model=schemas.Confirmation, responses=_errors)
async def delete_watchlist_entry(
        id: str,  # noqa
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Remove the entry identified by its `id` from the watchlist.

    * `400`: if the `id` is malformed
    * `404`: if the entry doesn't exist
    """

    envelope = await local.dispatcher.execute(CrudOperation.DELETE, local.watchlist, query={"_id": id})
    helpers.unwrap(envelope, "Watchlist entry not found")
    logger.info(f"Deleted watchlist entry {id}")
    return schemas.Confirmation(message="Watchlist entry deleted successfully")
