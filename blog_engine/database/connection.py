"""
MongoDB connection management for blog_engine.

The ConnectionManager owns one Motor client for the process. It is built
explicitly at startup and passed to whatever needs the database, then torn
down on shutdown (or on SIGINT/SIGTERM once signal handlers are installed).

Usage:
    from blog_engine.config import BlogConfig
    from blog_engine.database import ConnectionManager

    manager = ConnectionManager.from_config(BlogConfig())
    await manager.connect()
    blogs = manager.get_collection("blogs")
    ...
    await manager.disconnect()
"""

import asyncio
import logging
import signal
import time
from enum import Enum

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import monitoring
from pymongo.errors import ConfigurationError as PyMongoConfigurationError
from pymongo.errors import (
    ConnectionFailure,
    InvalidOperation,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from ..constants import (
    DEFAULT_CONNECT_MAX_RETRIES,
    DEFAULT_CONNECT_RETRY_DELAY,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_DB_NAME,
    DEFAULT_MAX_POOL_SIZE,
    DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
    DEFAULT_SOCKET_TIMEOUT_MS,
)
from ..exceptions import ConfigurationError, ConnectionRetryError
from ..observability import get_logger as get_contextual_logger
from ..observability import record_operation

logger = logging.getLogger(__name__)
contextual_logger = get_contextual_logger(__name__)

# Transient failures worth another attempt
_RETRYABLE_ERRORS = (ConnectionFailure, ServerSelectionTimeoutError, OperationFailure)


class ConnectionStatus(str, Enum):
    """Lifecycle state of the managed connection."""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CONNECTING = "connecting"
    DISCONNECTING = "disconnecting"


class _HeartbeatListener(monitoring.ServerHeartbeatListener):
    """
    Tracks server reachability from the driver's heartbeat events.

    pymongo calls these from its monitor threads; the manager only flips a
    boolean in response.
    """

    def __init__(self, manager: "ConnectionManager") -> None:
        self._manager = manager

    def started(self, event: monitoring.ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: monitoring.ServerHeartbeatSucceededEvent) -> None:
        self._manager._on_heartbeat(True, event.connection_id)

    def failed(self, event: monitoring.ServerHeartbeatFailedEvent) -> None:
        self._manager._on_heartbeat(False, event.connection_id, event.reply)


class ConnectionManager:
    """
    Manages the MongoDB connection lifecycle.

    Connection attempts are retried ``max_retries`` times after the first
    failure, sleeping a fixed ``retry_delay`` between attempts.
    """

    def __init__(
        self,
        mongo_uri: str | None = None,
        db_name: str = DEFAULT_DB_NAME,
        max_pool_size: int = DEFAULT_MAX_POOL_SIZE,
        max_retries: int = DEFAULT_CONNECT_MAX_RETRIES,
        retry_delay: float = DEFAULT_CONNECT_RETRY_DELAY,
    ) -> None:
        """
        Initialize the connection manager.

        Args:
            mongo_uri: Default MongoDB connection URI used by connect()
            db_name: Database name
            max_pool_size: Maximum MongoDB connection pool size
            max_retries: Retries after the first failed attempt
            retry_delay: Seconds to wait between attempts
        """
        self.mongo_uri = mongo_uri
        self.db_name = db_name
        self.max_pool_size = max_pool_size
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        self._client: AsyncIOMotorClient | None = None
        self._db: AsyncIOMotorDatabase | None = None
        self._connected_uri: str | None = None
        self._connected: bool = False
        self._status: ConnectionStatus = ConnectionStatus.DISCONNECTED
        self._shutdown_task: asyncio.Task | None = None

    @classmethod
    def from_config(cls, config) -> "ConnectionManager":
        """Build a manager from a BlogConfig."""
        return cls(
            mongo_uri=config.mongodb_uri,
            db_name=config.db_name,
            max_pool_size=config.max_pool_size,
            max_retries=config.connect_max_retries,
            retry_delay=config.connect_retry_delay,
        )

    def _create_client(self, uri: str) -> AsyncIOMotorClient:
        return AsyncIOMotorClient(
            uri,
            maxPoolSize=self.max_pool_size,
            serverSelectionTimeoutMS=DEFAULT_SERVER_SELECTION_TIMEOUT_MS,
            socketTimeoutMS=DEFAULT_SOCKET_TIMEOUT_MS,
            connectTimeoutMS=DEFAULT_CONNECT_TIMEOUT_MS,
            retryWrites=True,
            retryReads=True,
            appname="blog_engine",
            event_listeners=[_HeartbeatListener(self)],
        )

    async def connect(self, uri: str | None = None, max_retries: int | None = None) -> None:
        """
        Connect to MongoDB, retrying transient failures.

        Args:
            uri: Connection URI; falls back to the URI given at construction
            max_retries: Retries for this call only (defaults to the instance setting)

        Raises:
            ConfigurationError: If no URI is available or the URI is malformed
            ConnectionRetryError: If every attempt failed
        """
        uri = uri or self.mongo_uri
        if not uri:
            raise ConfigurationError(
                "MongoDB URI is required. Please set MONGODB_URI in environment variables.",
                config_key="MONGODB_URI",
            )

        if self.is_connected() and uri == self._connected_uri:
            return

        if self._status is not ConnectionStatus.DISCONNECTED or self._client is not None:
            await self.disconnect()

        self.mongo_uri = uri
        if max_retries is None:
            max_retries = self.max_retries
        max_attempts = max_retries + 1
        last_error: Exception | None = None

        for attempt in range(1, max_attempts + 1):
            self._status = ConnectionStatus.CONNECTING
            start_time = time.time()

            try:
                client = self._create_client(uri)
            except PyMongoConfigurationError as e:
                self._status = ConnectionStatus.DISCONNECTED
                raise ConfigurationError(
                    f"Invalid MongoDB configuration: {e}", config_key="MONGODB_URI"
                ) from e

            try:
                await client.admin.command("ping")
            except _RETRYABLE_ERRORS as e:
                client.close()
                last_error = e
                duration_ms = (time.time() - start_time) * 1000
                record_operation("db.connect", duration_ms, success=False)
                logger.error(f"MongoDB connection failed: {e}")

                if attempt < max_attempts:
                    logger.info(f"Retrying connection... Attempt {attempt}/{max_retries}")
                    try:
                        await asyncio.sleep(self.retry_delay)
                    except asyncio.CancelledError:
                        self._status = ConnectionStatus.DISCONNECTED
                        raise
                continue
            except BaseException as e:
                # Unexpected errors and cancellation end the attempt loop
                client.close()
                logger.error(f"MongoDB connection aborted: {e!r}")
                self._status = ConnectionStatus.DISCONNECTED
                raise

            self._client = client
            self._db = client[self.db_name]
            self._connected_uri = uri
            self._connected = True
            self._status = ConnectionStatus.CONNECTED

            duration_ms = (time.time() - start_time) * 1000
            record_operation("db.connect", duration_ms, success=True)
            contextual_logger.info(
                "MongoDB connected successfully",
                extra={
                    "db_name": self.db_name,
                    "attempt": attempt,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            return

        self._status = ConnectionStatus.DISCONNECTED
        self._connected = False
        raise ConnectionRetryError(
            f"Failed to connect to MongoDB after {max_attempts} attempts: {last_error}",
            attempts=max_attempts,
            context={"db_name": self.db_name},
        ) from last_error

    async def disconnect(self) -> None:
        """
        Close the MongoDB connection.

        Safe to call when already disconnected.
        """
        client = self._client
        if client is None:
            self._status = ConnectionStatus.DISCONNECTED
            self._connected = False
            return

        self._status = ConnectionStatus.DISCONNECTING
        try:
            client.close()
            logger.info("MongoDB connection closed")
        except (InvalidOperation, RuntimeError) as e:
            logger.error(f"Error closing MongoDB connection: {e}")
            raise
        finally:
            self._client = None
            self._db = None
            self._connected_uri = None
            self._connected = False
            self._status = ConnectionStatus.DISCONNECTED

    def is_connected(self) -> bool:
        """True when the last attempt succeeded and the server is reachable."""
        return self._connected and self._status is ConnectionStatus.CONNECTED

    def status(self) -> ConnectionStatus:
        return self._status

    def _on_heartbeat(self, reachable: bool, address, reply=None) -> None:
        if self._status is not ConnectionStatus.CONNECTED:
            return
        if reachable == self._connected:
            return
        self._connected = reachable
        if reachable:
            logger.info(f"MongoDB server {address} reachable again")
        else:
            logger.error(f"MongoDB server {address} unreachable: {reply}")

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """
        Disconnect cleanly when the process receives SIGINT or SIGTERM.

        Once the connection is closed the handler is removed and the signal
        is delivered again, so the default disposition ends the process
        (SIGINT raises KeyboardInterrupt, SIGTERM terminates). The loop keeps one
        handler per signal, so a server that installs its own handlers later
        replaces these.

        Args:
            loop: Event loop to register with (defaults to the running loop)
        """
        loop = loop or asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._schedule_shutdown, sig, loop)
            except (NotImplementedError, RuntimeError) as e:
                # add_signal_handler is unavailable on Windows event loops
                logger.debug(f"Could not install handler for {sig!r}: {e}")

    def _schedule_shutdown(self, sig: signal.Signals, loop: asyncio.AbstractEventLoop) -> None:
        logger.info(f"Received {sig.name}, closing MongoDB connection")
        self._shutdown_task = loop.create_task(self._shutdown(sig, loop))

    async def _shutdown(self, sig: signal.Signals, loop: asyncio.AbstractEventLoop) -> None:
        try:
            await self.disconnect()
        finally:
            loop.remove_signal_handler(sig)
            signal.raise_signal(sig)

    async def ping(self) -> None:
        """Round-trip to the server; raises the driver error on failure."""
        await self.client.admin.command("ping")

    @property
    def client(self) -> AsyncIOMotorClient:
        """
        Get the MongoDB client.

        Raises:
            RuntimeError: If not connected
        """
        if self._client is None:
            raise RuntimeError("ConnectionManager not connected. Call connect() first.")
        return self._client

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """
        Get the MongoDB database.

        Raises:
            RuntimeError: If not connected
        """
        if self._db is None:
            raise RuntimeError("ConnectionManager not connected. Call connect() first.")
        return self._db

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        return self.database[name]

    async def __aenter__(self) -> "ConnectionManager":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
