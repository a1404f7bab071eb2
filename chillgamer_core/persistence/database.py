"""
ChillGamer database bindings and functions using motor
"""

import logging
from typing import Any, Callable, Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.server_api import ServerApi

from ..schemas import config


DEFAULT_DATABASE_URL: str = "mongodb://localhost:27017"
DEFAULT_DATABASE_NAME: str = "ChillGamerDB"
PRINT_LOCAL_WARNING: bool = True

ClientFactory = Callable[..., Any]


class DocumentStore:
    """
    Owner of the connection to one logical database of a MongoDB deployment

    Creating an instance doesn't perform any I/O. The client will be created
    on first use (or by an explicit call to ``connect``) and reused afterwards
    by every request handled by the same application. Call ``close`` once
    at shutdown to release the client's connection pool.

    :param connection: the full URL to connect to the deployment
    :param database_name: name of the database holding the collections
    :param server_api: optional Stable API version to declare, which will be
        enforced strictly and with deprecation errors enabled
    :param selection_timeout_ms: milliseconds to wait for a suitable server
    :param client_factory: callable creating the client, used for testing
    """

    def __init__(
            self,
            connection: str = DEFAULT_DATABASE_URL,
            database_name: str = DEFAULT_DATABASE_NAME,
            server_api: Optional[str] = "1",
            selection_timeout_ms: int = 30000,
            client_factory: Optional[ClientFactory] = None
    ):
        self.connection = connection
        self.database_name = database_name
        self.server_api = server_api
        self.selection_timeout_ms = selection_timeout_ms
        self._client_factory = client_factory or AsyncIOMotorClient
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None
        self._logger = logging.getLogger(__name__)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(database={self.database_name!r}, connected={self.connected})"

    @property
    def connected(self) -> bool:
        return self._client is not None

    def connect(self) -> AsyncIOMotorDatabase:
        """
        Return the database handle, creating the client if there's no live one yet
        """

        if self._database is not None:
            return self._database

        options = {"serverSelectionTimeoutMS": self.selection_timeout_ms}
        if self.server_api:
            options["server_api"] = ServerApi(self.server_api, strict=True, deprecation_errors=True)
        self._logger.debug(f"Creating new database client for {self.database_name!r}...")
        self._client = self._client_factory(self.connection, **options)
        self._database = self._client[self.database_name]
        return self._database

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        if not name:
            raise ValueError("Collection name must not be empty")
        return self.connect()[name]

    async def ping(self) -> bool:
        """
        Send a ping to confirm a successful connection to the deployment

        :raises pymongo.errors.PyMongoError: when the deployment can't be reached
        """

        await self.connect().command("ping")
        self._logger.info("Pinged the deployment. Successfully connected to MongoDB!")
        return True

    def close(self):
        if self._client is None:
            return
        self._logger.debug(f"Closing database client for {self.database_name!r}...")
        self._client.close()
        self._client = None
        self._database = None


def init(database: config.DatabaseConfig, client_factory: Optional[ClientFactory] = None) -> DocumentStore:
    """
    Create a new document store from the database section of the configuration

    This function should be called once per application instance. The
    returned store should be kept by its owner (e.g. the application state)
    and closed when the owner shuts down.
    """

    local = database.connection.startswith("mongodb://localhost") or database.connection.startswith("mongodb://127.")
    if local and PRINT_LOCAL_WARNING:
        logging.getLogger(__name__).warning(
            "Using a local database is supported for development and testing environments "
            "only. You should use a managed or replicated deployment in production."
        )

    return DocumentStore(
        database.connection,
        database.name,
        server_api=database.server_api,
        selection_timeout_ms=database.selection_timeout_ms,
        client_factory=client_factory
    )
