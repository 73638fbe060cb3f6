from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import mysql.connector


@dataclass
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connection_timeout: int = 10

    @classmethod
    def from_dict(cls, db_config: dict) -> "DBConfig":
        return cls(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config.get("password", "")),
            database=str(db_config["database"]),
            connection_timeout=int(db_config.get("connection_timeout", 10)),
        )


class DatabaseConnection:
    """Singleton-like DB connection factory.

    Note: Repositories open one short-lived connection per operation; the store's
    own timeouts bound every call.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def connect(self):
        # Session time zone pinned to UTC: DATETIME columns hold naive UTC.
        conn = mysql.connector.connect(
            host=self._config.host,
            port=int(self._config.port),
            user=self._config.user,
            password=self._config.password,
            database=self._config.database,
            connection_timeout=int(self._config.connection_timeout),
        )
        cur = conn.cursor()
        try:
            cur.execute("SET time_zone = '+00:00'")
        finally:
            cur.close()
        return conn
