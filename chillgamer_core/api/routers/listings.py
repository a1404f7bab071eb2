"""
ChillGamer router module for ordered review listings and click counting
"""

import datetime
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from ..base import BadRequest, NotFound
from ..dependency import LocalRequestData
from .. import helpers
from ...persistence.identifiers import InvalidIdentifier, parse_identifier
from ... import schemas


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Listings"])

_listing_errors = {k: {"model": schemas.APIError} for k in (404, 500)}


@router.get("/highRatedGames", response_model=List[schemas.Document], responses=_listing_errors)
async def get_high_rated_games(
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the reviews of the high rating tier (by default `"9"` and `"10"`),
    sorted by their rating in descending order.

    * `404`: if no review has such a rating
    """

    tier = local.config.general.high_ratings
    return await helpers.list_sorted(
        local.reviews,
        {"rating": {"$in": tier}},
        [("rating", -1)],
        limit,
        local,
        empty=f"No reviews found with rating {' or '.join(tier)}"
    )


@router.get("/topRatedReviews", response_model=List[schemas.Document], responses=_listing_errors)
async def get_top_rated_reviews(
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the reviews of the top rating tier (by default only `"10"`),
    sorted by their rating in descending order.

    * `404`: if no review has such a rating
    """

    tier = local.config.general.top_ratings
    return await helpers.list_sorted(
        local.reviews,
        {"rating": {"$in": tier}},
        [("rating", -1)],
        limit,
        local,
        empty=f"No reviews found with rating {' or '.join(tier)}"
    )


@router.get("/latestGames", response_model=List[schemas.Document], responses=_listing_errors)
async def get_latest_games(
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the reviews of games published this year or last year,
    sorted by their publishing year in descending order.

    * `404`: if no game was published in that time
    """

    year = datetime.date.today().year
    return await helpers.list_sorted(
        local.reviews,
        {"publishingYear": {"$in": [str(year), str(year - 1)]}},
        [("publishingYear", -1)],
        limit,
        local,
        empty=f"No reviews found for games published in {year - 1} or {year}"
    )


@router.get("/latestReviews", response_model=List[schemas.Document], responses={500: {"model": schemas.APIError}})
async def get_latest_reviews(
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the most recently submitted reviews, sorted by `timeStamp`
    in descending order regardless of the publishing year of the game.

    This listing is not filtered, so it answers an empty list instead of `404`.
    """

    return await helpers.list_sorted(local.reviews, {}, [("timeStamp", -1)], limit, local)


@router.get("/popularReviews", response_model=List[schemas.Document], responses=_listing_errors)
async def get_popular_reviews(
        limit: Optional[str] = None,
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Return the reviews that have been clicked at least once,
    sorted by their click count in descending order.

    * `404`: if no review has been clicked yet
    """

    return await helpers.list_sorted(
        local.reviews,
        {"clickCount": {"$gt": 0}},
        [("clickCount", -1)],
        limit,
        local,
        empty="No reviews found with clicks"
    )


@router.put(
    "/incrementClickCount/{id}",
    response_model=schemas.Confirmation,
    responses={k: {"model": schemas.APIError} for k in (400, 404, 500)}
)
async def increment_click_count(
        id: str,  # noqa
        local: LocalRequestData = Depends(LocalRequestData)
):
    """
    Atomically increment the click count of the review identified by its `id`.

    * `400`: if the `id` is malformed
    * `404`: if the review doesn't exist
    """

    try:
        review_id = parse_identifier(id)
    except InvalidIdentifier as exc:
        raise BadRequest("Invalid identifier", str(exc)) from exc

    collection = local.store.get_collection(local.reviews)
    result = await collection.update_one({"_id": review_id}, {"$inc": {"clickCount": 1}})
    if result.modified_count == 0:
        raise NotFound("No review found or no changes")
    return schemas.Confirmation(message="Click count incremented")
