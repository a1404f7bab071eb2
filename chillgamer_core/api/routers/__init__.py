"""
ChillGamer router modules for handling requests to various endpoints

This module exports the ``router`` object which includes all known
endpoints and path operations of the core REST API.
"""

from fastapi import APIRouter

# The order of the imports defines the order of the endpoints in the OpenAPI documentation
from . import generic, reviews, listings, watchlist


router = APIRouter()
for _module in (generic, reviews, listings, watchlist):
    router.include_router(_module.router)
