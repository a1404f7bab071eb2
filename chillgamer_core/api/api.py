"""
ChillGamer core REST API definitions

This API stores game reviews and the watchlists of visitors of the
ChillGamer web application. Reviews and watchlist entries are documents
without a fixed schema: any non-empty JSON object is accepted, while a
few fields like `title`, `rating`, `publishingYear`, `reviewerEmail`,
`clickCount`, `timeStamp`, `visitor` and `watchId` have special meaning
for duplicate checks, filters and the ordering of listings. Identifiers
are the 24-digit hexadecimal strings found in the `_id` field.

The API always returns JSON-encoded data, except for the liveness check
at `/`. Failures use the schema of the `APIError`, which always carries
`success: false` and a human-readable `message`:

1. `400` (Bad Request): a malformed identifier, a missing or empty body
   or a missing mandatory query parameter.
2. `404` (Not Found): the identified document doesn't exist, an update
   didn't change anything, or a filtered listing is empty. Note that the
   unfiltered listings (`/reviews` and `/latestReviews`) return empty
   results instead.
3. `409` (Conflict): a duplicate review or watchlist entry was rejected.
4. `500` (Internal Server Error): the database failed to answer the
   request; the `error` field carries the details of the problem.
"""

import logging.config
import contextlib
from typing import Any, Callable, Dict, Optional

import fastapi
import pymongo.errors
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import base
from .routers import router
from .. import schemas, __version__
from ..persistence import database
from ..settings import Settings


DEFAULT_EXCEPTION_HANDLERS = {
    StarletteHTTPException: base.APIException.handle,
    RequestValidationError: base.handle_request_validation_error,
    pymongo.errors.PyMongoError: base.handle_store_error,
    Exception: base.handle_generic_exception
}


def create_app(
        settings: Optional[Settings] = None,
        configure_logging: bool = True,
        client_factory: Optional[database.ClientFactory] = None,
        exception_handlers: Optional[Dict[Any, Callable]] = None
) -> fastapi.FastAPI:
    """
    Create a new ``FastAPI`` instance using the specified settings and switches

    This function is conveniently used to allow overwriting the settings
    before launching the application as well as to allow multiple ``FastAPI``
    instances in one program, which in turn makes unit testing much easier.
    Every application owns its own document store, which connects lazily
    and is closed when the application shuts down.

    :param settings: optional Settings instance (would be created if not present)
    :param configure_logging: switch whether to configure logging
    :param client_factory: optional factory for the database client (for unit tests)
    :param exception_handlers: optional mapping overwriting the default exception handlers
    :return: new ``FastAPI`` instance
    """

    if settings is None:
        settings = Settings()

    if configure_logging:
        logging.config.dictConfig(settings.logging.model_dump())
    logger = logging.getLogger(__name__)
    logger.debug("Starting application...")

    store = database.init(settings.database, client_factory)

    @contextlib.asynccontextmanager
    async def lifespan(_: fastapi.FastAPI):
        logger.info("Starting API...")
        try:
            await store.ping()
        except pymongo.errors.PyMongoError:
            logger.exception("Failed to ping the database deployment! Requests may fail.")
        try:
            yield
        finally:
            logger.info("Shutting down...")
            store.close()

    app = base.APIWithoutValidationError(
        title="ChillGamer core REST API",
        version=__version__,
        description=__doc__,
        responses={400: {"model": schemas.APIError}},
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.store = store

    handlers = exception_handlers or DEFAULT_EXCEPTION_HANDLERS
    for exc in handlers:
        app.add_exception_handler(exc, handlers[exc])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"]
    )
    app.include_router(router)
    return app


class APIWrapper:
    """
    Wrapper class around the FastAPI main object, accessible via the ``app`` property

    There should be only one global instance of this object, which should only
    export its functionality to hold the ``app`` property. This wrapper can be
    used to allow easy command-line usage via ``uvicorn`` calls. Example:

    .. code-block::

        uvicorn chillgamer_core.api.api:api.app
    """

    def __init__(self):
        self._app: Optional[fastapi.FastAPI] = None

    def get_app(self) -> fastapi.FastAPI:
        return self.app

    def set_app(self, application: fastapi.FastAPI):
        if not isinstance(application, fastapi.FastAPI):
            raise TypeError
        self._app = application

    @property
    def app(self) -> fastapi.FastAPI:
        """
        Return the ``app`` instance (or create it with default settings if it doesn't exist)
        """

        if self._app is not None:
            return self._app
        self._app = create_app()
        return self._app


api = APIWrapper()
