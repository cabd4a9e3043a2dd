"""Connection settings and a pool of database connections keyed by URI."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable

from .errors import PrestError


class DatabaseNotInPoolError(PrestError, LookupError):
    default_message = "db not found in pool"


@dataclass
class ConnectionSettings:
    """Parameters used to build PostgreSQL connection strings."""

    user: str = "postgres"
    database: str = "prest"
    host: str = "localhost"
    port: int = 5432
    sslmode: str = "disable"
    connect_timeout: int = 10
    password: str = ""
    sslcert: str = ""
    sslkey: str = ""
    sslrootcert: str = ""

    def uri(self, dbname: str = "") -> str:
        """Return the libpq keyword/value string for ``dbname``.

        An empty name stands for the configured database.
        """
        name = dbname or self.database
        parts = [
            f"user={self.user} dbname={name} host={self.host} port={self.port} "
            f"sslmode={self.sslmode} connect_timeout={self.connect_timeout}"
        ]
        optional = (
            ("password", self.password),
            ("sslcert", self.sslcert),
            ("sslkey", self.sslkey),
            ("sslrootcert", self.sslrootcert),
        )
        parts.extend(f"{key}={value}" for key, value in optional if value)
        return " ".join(parts)


class ConnectionPool:
    """Thread-safe cache of open connections, one per connection URI.

    ``connect`` receives a connection string and returns an open connection.
    ``database`` names the database in current use.
    """

    def __init__(
        self, settings: ConnectionSettings, connect: Callable[[str], Any]
    ) -> None:
        self.settings = settings
        self._connect = connect
        self._lock = threading.Lock()
        self._connections: dict[str, Any] = {}
        self.database = ""

    def _lookup(self, name: str) -> Any | None:
        with self._lock:
            return self._connections.get(self.settings.uri(name))

    def get(self) -> Any:
        """Return the connection for the current database, opening it if needed."""
        db = self._lookup(self.database)
        if db is not None:
            return db
        db = self._connect(self.settings.uri(self.database))
        self.add(self.database, db)
        return db

    def get_from_pool(self, name: str) -> Any:
        """Return an already open connection for ``name``."""
        db = self._lookup(name)
        if db is None:
            raise DatabaseNotInPoolError()
        return db

    def add(self, name: str, db: Any) -> None:
        """Register ``db`` as the connection for database ``name``."""
        with self._lock:
            self._connections[self.settings.uri(name)] = db