"""
Helper functions to make writing unit tests for the ChillGamer core easier
"""

import os
import secrets
import unittest
from unittest import mock
from typing import Any, Dict, Iterable, List, Optional, Type, Union

import pydantic
import httpx
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from chillgamer_core import schemas, settings as _settings
from chillgamer_core.api.api import create_app
from chillgamer_core.persistence import database

from . import conf


def mock_client_factory(*_: Any, **__: Any) -> AsyncMongoMockClient:
    """
    Create an in-memory database client, ignoring the connection URL and options

    The in-memory client doesn't hold any connections, so its ``close``
    method is replaced by a mock to check the release of the client.
    """

    client = AsyncMongoMockClient()
    client.close = mock.Mock()
    return client


class BaseTest(unittest.TestCase):
    """
    A base class for unit tests which introduces simple setup and teardown of unit tests

    If a subclass needs special setup or teardown functionality, it **MUST**
    call the superclasses setup and teardown methods: the superclass setup
    method at the beginning of the subclass setup method, the superclass
    teardown method at the end of the subclass teardown method.
    """

    config_file: Optional[str] = None
    _previous_config_paths: Optional[List[str]] = None

    def setUp(self) -> None:
        self.config_file = conf.CONFIG_FILE_FORMAT.format(os.getpid(), secrets.token_hex(8))
        self._previous_config_paths = _settings.CONFIG_PATHS
        _settings.CONFIG_PATHS = [self.config_file]
        database.PRINT_LOCAL_WARNING = False

    def tearDown(self) -> None:
        _settings.CONFIG_PATHS = self._previous_config_paths
        if self.config_file and os.path.exists(self.config_file):
            os.remove(self.config_file)


class BaseAPITests(BaseTest):
    """
    Base class for tests of the REST API running in-process on an in-memory database

    Every unit test gets its own application with its own document store,
    so no data is shared between unit tests. The lifespan of the app isn't
    entered, so the in-memory client is created lazily by the first request.
    """

    settings: _settings.Settings
    client: TestClient

    def setUp(self) -> None:
        super().setUp()
        self.settings = _settings.Settings(database={"name": f"{conf.DATABASE_NAME}_{secrets.token_hex(6)}"})
        self.app = create_app(self.settings, configure_logging=False, client_factory=mock_client_factory)
        self.client = TestClient(self.app, raise_server_exceptions=False)

    def tearDown(self) -> None:
        self.client.close()
        self.app.state.store.close()
        super().tearDown()

    def assertQuery(
            self,
            endpoint: Union[tuple, List[str]],
            status_code: Union[int, Iterable[int]] = 200,
            json: Optional[Any] = None,
            r_is_json: bool = True,
            r_schema: Optional[Type[pydantic.BaseModel]] = None,
            **kwargs
    ) -> httpx.Response:
        """
        Do a query to the specified endpoint and return the response

        Besides also carrying the optional JSON data and other keyword arguments,
        this function asserts that the response has the specified status code.
        Furthermore, the optional asserted response schema class is used to
        validate the body of the response. Error responses are always checked
        against the shared error model of the API.

        :param endpoint: tuple of the method and the path of the endpoint
        :param status_code: asserted status code(s) of the final server's response
        :param json: optional JSON-serializable request data
        :param r_is_json: switch to check that the response contains JSON data
        :param r_schema: optional class of a response schema to be asserted
        :param kwargs: dict of any further keyword arguments, passed to ``TestClient.request``
        :return: response to the requested resource
        """

        method, path = endpoint
        if json is not None:
            kwargs["json"] = json
        response = self.client.request(method.upper(), path, **kwargs)

        if isinstance(status_code, int):
            self.assertEqual(status_code, response.status_code, response.text)
        else:
            self.assertIn(response.status_code, list(status_code), response.text)

        if r_is_json:
            try:
                body = response.json()
            except ValueError:
                self.fail(("No JSON content detected", response.headers, response.text))
            if response.status_code >= 400:
                error = schemas.APIError(**body)
                self.assertFalse(error.success, body)
                self.assertEqual(response.status_code, error.status, body)
            elif r_schema is not None:
                self.assertTrue(r_schema(**body), body)
        return response

    def make_review(self, **fields) -> str:
        review = {
            "title": f"Game {secrets.token_hex(4)}",
            "rating": "7",
            "publishingYear": "2020",
            "reviewerEmail": "reviewer@example.com"
        }
        review.update(fields)
        return self.assertQuery(("POST", "/review"), 201, json=review).json()["insertedId"]

    def make_watchlist_entry(self, **fields) -> str:
        entry = {"visitor": "visitor@example.com", "watchId": secrets.token_hex(12)}
        entry.update(fields)
        return self.assertQuery(("POST", "/watchList"), 201, json=entry).json()["insertedId"]

    def get_review(self, review_id: str) -> Dict[str, Any]:
        return self.assertQuery(("GET", f"/review/{review_id}")).json()

    def count_reviews(self) -> int:
        return len(self.assertQuery(("GET", "/reviews?limit=1000")).json()["data"])
