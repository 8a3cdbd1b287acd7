"""
Snowflake Catalog

Reads column metadata from a Snowflake database's INFORMATION_SCHEMA with:
- Password, key-pair and external authenticator support
- Role and warehouse selection
- Snowflake error codes mapped to the scan error taxonomy
"""

import os
import time
import logging
from typing import Any, Dict, List, Optional

from .base import CatalogConnector, CatalogColumnRow
from ..exceptions import (
    CatalogConnectionError,
    CatalogPermissionError,
    CatalogQueryError,
    NotFoundError
)

logger = logging.getLogger(__name__)

# Snowflake "does not exist or not authorized" and "insufficient privileges"
NOT_FOUND_ERRNOS = {2003, 2043}
NOT_FOUND_SQLSTATES = {"02000", "42S02"}
PERMISSION_ERRNOS = {3001}
PERMISSION_SQLSTATES = {"42501"}

COLUMNS_QUERY = """
SELECT
    TABLE_NAME,
    COLUMN_NAME,
    DATA_TYPE,
    IS_NULLABLE,
    NUMERIC_PRECISION,
    NUMERIC_SCALE,
    CHARACTER_MAXIMUM_LENGTH,
    ORDINAL_POSITION,
    COMMENT
FROM {database}.INFORMATION_SCHEMA.COLUMNS
WHERE TABLE_SCHEMA = %(schema)s
  AND TABLE_CATALOG = %(database)s
ORDER BY TABLE_NAME, ORDINAL_POSITION
"""

SCHEMA_EXISTS_QUERY = """
SELECT COUNT(*) AS SCHEMA_COUNT
FROM {database}.INFORMATION_SCHEMA.SCHEMATA
WHERE SCHEMA_NAME = %(schema)s
"""


class SnowflakeCatalog(CatalogConnector):
    """
    Catalog connector for Snowflake Data Cloud.

    Supports:
    - Account-based authentication
    - Key-pair authentication
    - OAuth / external browser authenticators
    - Role and warehouse switching

    Each query opens its own cursor, so a single connection can be shared
    by concurrent oracle calls.
    """

    def __init__(
        self,
        account: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        warehouse: Optional[str] = None,
        role: Optional[str] = None,
        private_key_path: Optional[str] = None,
        private_key_passphrase: Optional[str] = None,
        authenticator: Optional[str] = None,
        connection_timeout: int = 30,
        query_timeout: int = 300,
        connection: Any = None
    ):
        super().__init__(connection_timeout, query_timeout)

        # Load from environment if not provided
        self.account = account or os.getenv("SNOWFLAKE_ACCOUNT")
        self.username = username or os.getenv("SNOWFLAKE_USERNAME") or os.getenv("SNOWFLAKE_USER")
        self.password = password or os.getenv("SNOWFLAKE_PASSWORD")
        self.warehouse = warehouse or os.getenv("SNOWFLAKE_WAREHOUSE")
        self.role = role or os.getenv("SNOWFLAKE_ROLE")
        self.private_key_path = private_key_path or os.getenv("SNOWFLAKE_PRIVATE_KEY_PATH")
        self.private_key_passphrase = private_key_passphrase or os.getenv("SNOWFLAKE_PRIVATE_KEY_PASSPHRASE")
        self.authenticator = authenticator or os.getenv("SNOWFLAKE_AUTHENTICATOR")

        # An existing DB-API connection may be injected (tests, notebooks)
        self._connection = connection
        self._connected = connection is not None

    @property
    def catalog_type(self) -> str:
        return "snowflake"

    def connect(self) -> None:
        """Establish connection to Snowflake."""
        if self._connected:
            return

        try:
            import snowflake.connector
        except ImportError:
            raise ImportError(
                "snowflake-connector-python required: pip install snowflake-connector-python"
            )

        if not self.account:
            raise CatalogConnectionError("Snowflake account is required")

        connect_params = {
            "account": self.account,
            "user": self.username,
            "warehouse": self.warehouse,
            "login_timeout": self.connection_timeout,
            "network_timeout": self.query_timeout,
        }

        # Authentication method
        if self.private_key_path:
            connect_params["private_key"] = self._load_private_key()
        elif self.authenticator:
            connect_params["authenticator"] = self.authenticator
            if self.authenticator != "externalbrowser":
                connect_params["password"] = self.password
        else:
            connect_params["password"] = self.password

        if self.role:
            connect_params["role"] = self.role

        try:
            self._connection = snowflake.connector.connect(**connect_params)
            self._connected = True
            logger.info(f"Connected to Snowflake account: {self.account}")
        except Exception as e:
            raise CatalogConnectionError(f"Failed to connect to Snowflake: {str(e)}") from e

    def _load_private_key(self) -> bytes:
        """Read a PEM private key and return it DER-encoded for the driver."""
        from cryptography.hazmat.backends import default_backend
        from cryptography.hazmat.primitives import serialization

        with open(self.private_key_path, "rb") as key_file:
            p_key = serialization.load_pem_private_key(
                key_file.read(),
                password=self.private_key_passphrase.encode() if self.private_key_passphrase else None,
                backend=default_backend()
            )
        return p_key.private_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption()
        )

    def disconnect(self) -> None:
        """Close the Snowflake connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
        self._connected = False
        logger.info("Disconnected from Snowflake")

    def execute_query(
        self,
        query: str,
        parameters: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute a SQL query and return rows as dicts keyed by column name.

        Raises:
            CatalogQueryError: wrapping the driver error as __cause__
        """
        if not self._connected:
            self.connect()

        start_time = time.time()
        cursor = self._connection.cursor()
        try:
            if parameters:
                cursor.execute(query, parameters)
            else:
                cursor.execute(query)

            columns = [desc[0] for desc in cursor.description] if cursor.description else []
            rows = [dict(zip(columns, row)) for row in cursor.fetchall()]
        except Exception as e:
            raise CatalogQueryError(f"Query execution failed: {str(e)}") from e
        finally:
            cursor.close()

        logger.debug(f"Query returned {len(rows)} rows in {(time.time() - start_time) * 1000:.0f}ms")
        return rows

    def list_columns(self, catalog_id: str, schema_id: str) -> List[CatalogColumnRow]:
        """List columns of a schema from INFORMATION_SCHEMA.COLUMNS."""
        database = self.validate_identifier(catalog_id)
        schema = self.validate_identifier(schema_id)
        parameters = {"schema": schema, "database": database}

        try:
            rows = self.execute_query(COLUMNS_QUERY.format(database=database), parameters)
            if not rows and not self._schema_exists(database, schema):
                raise NotFoundError(database, schema)
        except CatalogQueryError as e:
            raise self._translate_error(e, database, schema) from e.__cause__

        logger.info(f"Read {len(rows)} columns from {database}.{schema}")

        return [
            CatalogColumnRow(
                table=row["TABLE_NAME"],
                column=row["COLUMN_NAME"],
                type=row["DATA_TYPE"],
                nullable=row["IS_NULLABLE"],
                precision=row.get("NUMERIC_PRECISION"),
                scale=row.get("NUMERIC_SCALE"),
                max_length=row.get("CHARACTER_MAXIMUM_LENGTH"),
                ordinal=row["ORDINAL_POSITION"],
                comment=row.get("COMMENT")
            )
            for row in rows
        ]

    def _schema_exists(self, database: str, schema: str) -> bool:
        rows = self.execute_query(
            SCHEMA_EXISTS_QUERY.format(database=database),
            {"schema": schema}
        )
        return bool(rows) and int(rows[0].get("SCHEMA_COUNT") or 0) > 0

    @staticmethod
    def _translate_error(error: CatalogQueryError, database: str, schema: str) -> Exception:
        """Map a Snowflake driver error onto the scan error taxonomy."""
        cause = error.__cause__
        errno = getattr(cause, "errno", None)
        sqlstate = getattr(cause, "sqlstate", None)

        if errno in PERMISSION_ERRNOS or sqlstate in PERMISSION_SQLSTATES:
            return CatalogPermissionError(database, schema, f"Insufficient privileges on {database}.{schema}: {cause}")
        if errno in NOT_FOUND_ERRNOS or sqlstate in NOT_FOUND_SQLSTATES:
            return NotFoundError(database, schema, f"Schema not found or not authorized: {database}.{schema}")
        return error
