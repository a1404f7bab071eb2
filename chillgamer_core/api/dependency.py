"""
ChillGamer API dependency library
"""

import fastapi.datastructures
from fastapi import Depends, Request, Response

from ..persistence.crud import CrudDispatcher
from ..persistence.database import DocumentStore
from ..settings import Settings


def get_store(request: Request) -> DocumentStore:
    """
    Return the document store owned by the application handling the request
    """

    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


class LocalRequestData:
    """
    Collection of core dependencies used by all path operations

    This class stores references to various important objects that
    will almost certainly be used by request handlers (path operations).
    Note that any dependency added here will be added to the OpenAPI
    definition, if it refers to a Query, Header, Path or Cookie.
    """

    def __init__(
            self,
            request: Request,
            response: Response,
            store: DocumentStore = Depends(get_store),
            config: Settings = Depends(get_settings)
    ):
        self.request = request
        self.response = response
        self.headers: fastapi.datastructures.Headers = request.headers
        self.store = store
        self.config = config
        self.dispatcher = CrudDispatcher(store)

    @property
    def reviews(self) -> str:
        return self.config.database.reviews

    @property
    def watchlist(self) -> str:
        return self.config.database.watchlist
