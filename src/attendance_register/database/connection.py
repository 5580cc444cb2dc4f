from __future__ import annotations

import logging
from dataclasses import dataclass

import mysql.connector

from ..core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config.get("host", "localhost")),
            port=int(db_config.get("port", 3306)),
            user=str(db_config.get("user", "root")),
            password=str(db_config.get("password", "")),
            database=str(db_config.get("database", "attendance_register")),
            connect_timeout=int(db_config.get("connect_timeout", 10)),
        )


class DatabaseConnection:
    """DB connection factory shared by every repository.

    Built once by the container and passed in explicitly. Connections are
    short-lived (one per operation); ``open``/``close`` bracket the window in
    which the factory hands them out.
    """

    def __init__(self, config: DBConfig):
        self._config = config
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        """Check the store is reachable and start handing out connections."""
        self._open = True
        conn = self.connect()
        conn.close()
        logger.info(
            "connected to %s@%s:%s/%s",
            self._config.user,
            self._config.host,
            self._config.port,
            self._config.database,
        )

    def close(self) -> None:
        self._open = False
        logger.info("database connection factory closed")

    def connect(self):
        if not self._open:
            raise StoreUnavailableError("Database connection factory is closed")
        try:
            return mysql.connector.connect(
                host=self._config.host,
                port=int(self._config.port),
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                connection_timeout=self._config.connect_timeout,
            )
        except (mysql.connector.errors.InterfaceError, mysql.connector.errors.OperationalError) as e:
            raise StoreUnavailableError(str(e)) from e
