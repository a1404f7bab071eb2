"""
ChillGamer REST API base library

Every failure of a path operation should be raised as one of the
``APIException`` subclasses below. The exception handlers of this module
render those, request validation errors, faults of the document store
and any other unexpected exception into the shared ``APIError`` model.
"""

import logging
from typing import Any, ClassVar, Dict, Optional

import pymongo.errors
from fastapi import FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import schemas


logger = logging.getLogger(__name__)


class APIWithoutValidationError(FastAPI):
    """
    FastAPI class that drops the 422 responses from the generated OpenAPI schema

    Validation errors are answered with 400 (Bad Request) by this API,
    see ``handle_request_validation_error`` below.
    """

    def openapi(self) -> Dict[str, Any]:
        if self.openapi_schema:
            return self.openapi_schema
        schema = super().openapi()
        for operations in schema.get("paths", {}).values():
            for operation in operations.values():
                operation.get("responses", {}).pop("422", None)
        return schema


def _error_response(
        request: Request,
        status_code: int,
        message: str,
        error: Optional[str] = None,
        repeat: bool = False,
        headers: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    body = schemas.APIError(
        status=status_code,
        method=request.method,
        request=request.url.path,
        repeat=repeat,
        message=message,
        error=error
    )
    return JSONResponse(jsonable_encoder(body), status_code=status_code, headers=headers)


async def handle_generic_exception(request: Request, _: Exception):
    logger.exception(f"Unhandled exception during '{request.method} {request.url.path}'!")
    return _error_response(request, 500, "Unexpected server error. The request may not have been completed.")


async def handle_store_error(request: Request, exc: pymongo.errors.PyMongoError):
    logger.exception(f"{type(exc).__name__} while handling '{request.method} {request.url.path}'")
    return _error_response(request, 500, "Server error", str(exc), repeat=True)


async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    problems = "\n".join(f"\t{error['msg']}" for error in exc.errors())
    return _error_response(request, 400, f"Failed to process the request:\n{problems}", str(exc.errors()), True)


class APIException(HTTPException):
    """
    Base class for the failures of path operations

    Subclasses define the HTTP status code and whether repeating the exact
    same request may succeed. The ``message`` is shown to clients, so it
    must be short and user-friendly, while the optional ``detail`` ends up
    in the ``error`` field of the response and may be arbitrarily technical.
    """

    status: ClassVar[int] = 500
    repeatable: ClassVar[bool] = False

    def __init__(
            self,
            message: str,
            detail: Optional[str] = None,
            repeat: Optional[bool] = None,
            headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=self.status, detail=detail, headers=headers)
        self.message = message
        self.error = detail
        self.repeat = self.repeatable if repeat is None else repeat

    @classmethod
    async def handle(cls, request: Request, exc: StarletteHTTPException) -> Response:
        """
        Render any HTTP exception, including the ones raised by Starlette itself
        """

        message = getattr(exc, "message", None) or str(exc.detail)
        logger.debug(f"{type(exc).__name__} {exc.status_code}: {message} @ '{request.method} {request.url.path}'")
        return _error_response(
            request,
            exc.status_code,
            message,
            getattr(exc, "error", str(exc.detail)),
            getattr(exc, "repeat", False),
            getattr(exc, "headers", None)
        )


class BadRequest(APIException):
    """
    The client sent a malformed identifier, body or query parameter
    """

    status = 400
    repeatable = True


class NotFound(APIException):
    """
    The requested document doesn't exist or a filtered listing is empty
    """

    status = 404


class Conflict(APIException):
    """
    The document would duplicate an existing one
    """

    status = 409


class InternalServerException(APIException):
    status = 500
