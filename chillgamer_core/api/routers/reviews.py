"""
ChillGamer router module for /review, /reviews and /myReview requests
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

router = APIRouter(tags=["Reviews"])

_errors = {k: {"model": schemas.APIError} for k in (400, 404, 500)}


@router.post(
    "/review",
    status_code=201,
    response_model=schemas.Insertion,
    responses={k: {"model": schemas.APIError} for k in (400, 409, 500)}
)
async def create_new_review(
        review: Optional[Dict[str, Any]] = Body(None),
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Create a new review from the arbitrary fields of the JSON body.

    * `400`: if the body is missing or empty
    * `409`: if a review with the same unique fields (by default
      `title` and `reviewerEmail`) already exists
    """

    return await helpers.create_new_document(
        review,
        local.reviews,
        local.config.general.review_unique_fields,
        local,
        "A review for this game already exists",
        logger
    )


@router.get("/reviews", response_model=schemas.Page, responses={500: {"model": schemas.APIError}})
async def get_all_reviews(
        page: Optional[str] = None,
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return one page of all reviews.

    This listing is not filtered, so it never fails with `404`, even if
    there are no reviews at all. Invalid values for `page` and `limit` are
    replaced by their defaults (first page, six reviews per page).
    """

    return await helpers.paginate(local.reviews, {}, page, limit, local)


@router.get("/review/{id}", response_model=schemas.Document, responses=_errors)
async def get_review_by_id(
        id: str,  # noqa
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the review identified by its `id`.
    """

    envelope = await local.dispatcher.execute(CrudOperation.READ_ONE, local.reviews, query={"_id": id})
    return helpers.unwrap(envelope, "Review not found").data


async def _merge_review(
        operation: CrudOperation,
        review_id: str,
        changes: Optional[Dict[str, Any]],
        local: LocalRequestData
) -> schemas.Confirmation:
    if not changes:
        raise BadRequest("Invalid data", "The request body must be a non-empty JSON object")
    envelope = await local.dispatcher.execute(operation, local.reviews, changes, {"_id": review_id})
    helpers.unwrap(envelope, "No review found or no changes")
    logger.debug(f"Merged {sorted(changes)} into review {review_id}")
    return schemas.Confirmation(message="Review updated successfully")


@router.put("/review/{id}", response_model=schemas.Confirmation, responses=_errors)
@router.put("/myReview/{id}", response_model=schemas.Confirmation, responses=_errors)
async def update_existing_review(
        id: str,  # noqa
        changes: Optional[Dict[str, Any]] = Body(None),
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Merge the fields of the JSON body into the review identified by its `id`.

    * `400`: if the `id` is malformed or the body is missing or empty
    * `404`: if the review doesn't exist or no field has actually changed
    """

    return await _merge_review(CrudOperation.UPDATE, id, changes, local)


@router.patch("/review/{id}", response_model=schemas.Confirmation, responses=_errors)
async def patch_existing_review(
        id: str,  # noqa
        changes: Optional[Dict[str, Any]] = Body(None),
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Merge some fields into the review identified by its `id`.

    This behaves exactly like `PUT`, since a review has no fixed set
    of fields which could be replaced as a whole.
    """

    return await _merge_review(CrudOperation.PATCH, id, changes, local)


@router.delete("/review/{id}", response_model=schemas.Confirmation, responses=_errors)
@router.delete("/myReview/{id}", response_model=schemas.Confirmation, responses=_errors)
async def delete_existing_review(
        id: str,  # noqa
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Delete the review identified by its `id`.

    * `400`: if the `id` is malformed
    * `404`: if the review doesn't exist
    """

    envelope = await local.dispatcher.execute(CrudOperation.DELETE, local.reviews, query={"_id": id})
    helpers.unwrap(envelope, "Review not found")
    logger.info(f"Deleted review {id}")
    return schemas.Confirmation(message="Review deleted successfully")


@router.get("/myReview", response_model=schemas.Page, responses=_errors)
async def get_reviews_of_reviewer(
        email: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return one page of the reviews written by the reviewer with the given `email`.

    * `400`: if the `email` query parameter is missing
    * `404`: if the reviewer has no reviews at all
    """

    if not email:
        raise BadRequest("Email is required")
    return await helpers.paginate(
        local.reviews,
        {"reviewerEmail": email},
        page,
        limit,
        local,
        empty="No reviews found for this email"
    )
