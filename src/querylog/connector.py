import dataclasses
import logging
import time
from datetime import datetime
from typing import Any, Optional, Sequence, TextIO, Union

import pandas as pd
import redshift_connector
from redshift_connector import Connection

from .config import ConnectionConfig, LogConfig
from .exceptions import ConnectionError, QueryError
from .logger import Clock, NullLogger, TemplateLogger
from .utils import _sanitize_log_message, flatten

# Configure module logger
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

class DB:
    """
    A database handle that logs every statement it runs.

    This class supports:
      - Configuration via environment variables or explicit parameters
      - Connection management with retry logic
      - Executing statements and fetching pandas DataFrames with ``?`` placeholders
      - Query logging with a custom format, a slow query threshold and
        redaction of the values bound to sensitive columns

    Logging is off until an output is set (or ``LogConfig.enabled`` is true).
    Masking matches column names quoted with ``identifier_quote``, double
    quotes by default as Redshift expects.
    A failure to write a log line is reported through the ``logging`` module
    and never fails the query.

    **Examples:**

    .. code-block:: python

        import sys
        from querylog import DB

        with DB(host="localhost", username="app", password="secret",
                database="dev", port=5439) as db:
            db.set_log_output(sys.stderr)
            db.set_log_slow_time(50.0)
            db.add_log_column_mask("password")

            db.execute('UPDATE "users" SET "password" = ? WHERE "id" = ?', "hunter2", 1)
            df = db.fetch('SELECT * FROM "users" WHERE "id" IN (?, ?, ?)', [1, 2, 3])

    **Testing:**
        Override ``_get_connection()`` to return a mock connection.
    """

    def __init__(
        self,
        config: Optional[ConnectionConfig] = None,
        log_config: Optional[LogConfig] = None,
        clock: Clock = datetime.now,
        identifier_quote: str = '"',
        **kwargs
    ):
        """
        Initialize the handle with a ConnectionConfig instance or keyword arguments.

        Args:
            config (Optional[ConnectionConfig]): Connection settings to use directly
            log_config (Optional[LogConfig]): Query log settings, read from the environment if None
            clock (Clock): Source of the current time for measuring queries
            identifier_quote (str): Character the SQL dialect quotes column names with;
                Redshift uses double quotes
            **kwargs: Arguments to build a ConnectionConfig if config is not provided;
                the environment is used when neither is given
        """
        if config is not None:
            self.config = config
        elif kwargs:
            self.config = ConnectionConfig(**kwargs)
        else:
            self.config = ConnectionConfig.from_env()
        log_config = log_config if log_config is not None else LogConfig.from_env()
        self.log_config = dataclasses.replace(log_config, identifier_quote=identifier_quote)
        self.clock = clock
        self.conn: Optional[Connection] = None
        self._validate_config()
        self.logger: Union[TemplateLogger, NullLogger] = self.log_config.build_logger(clock=clock)

    def _validate_config(self) -> None:
        """Validate the configuration parameters"""
        self.config.validate()
        self.log_config.validate()

    def _get_connection(self) -> Connection:
        """Get a database connection. Override this method for testing."""
        return redshift_connector.connect(
            host=self.config.host,
            user=self.config.username,
            password=self.config.password,
            database=self.config.database,
            port=self.config.port,
            timeout=self.config.timeout,
            ssl=self.config.ssl
        )

    def _get_cursor(self) -> redshift_connector.Cursor:
        """Get a cursor that binds ``?`` placeholders.

        Raises:
            ConnectionError: If there's no active connection
        """
        cursor = self.connection.cursor()
        cursor.paramstyle = "qmark"
        return cursor

    @property
    def connection(self) -> Connection:
        """Get the current database connection.

        Raises:
            ConnectionError: If there's no active connection
        """
        if self.conn is None:
            raise ConnectionError("No active database connection")
        return self.conn

    def connect(self) -> Connection:
        """
        Establishes a connection to the database, retrying transient failures.

        Returns:
            Connection: A connection object to the database

        Raises:
            ConnectionError: If there's an error establishing the connection after retries
        """
        retries = self.config.max_retries
        for attempt in range(1, retries + 1):
            try:
                self.conn = self._get_connection()
            except Exception as e:
                error_msg = _sanitize_log_message(str(e))
                if attempt == retries:
                    raise ConnectionError(f"Failed to connect after {retries} attempts: {error_msg}") from e
                logger.warning(f"Connection attempt {attempt} of {retries} failed: {error_msg}")
                time.sleep(self.config.retry_delay)
            else:
                logger.debug(f"Connected to {self.config.host}:{self.config.port}/{self.config.database}")
                return self.conn

    def __enter__(self) -> 'DB':
        """Context manager entry"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit"""
        self.close()

    def close(self) -> None:
        """
        Closes the database connection if it exists.
        """
        conn, self.conn = self.conn, None
        if conn is None:
            return
        try:
            conn.close()
        except Exception as e:
            logger.error(f"Error closing connection: {_sanitize_log_message(str(e))}")

    def set_log_output(self, output: Optional[TextIO]) -> None:
        """
        Set the stream query logs are written to.

        Args:
            output (Optional[TextIO]): Target stream; None disables query logging
        """
        if output is None:
            self.logger = NullLogger()
        elif isinstance(self.logger, TemplateLogger):
            self.logger.set_output(output)
        else:
            config = dataclasses.replace(self.log_config, enabled=True)
            self.logger = config.build_logger(output, clock=self.clock)

    def set_log_format(self, format: str) -> None:
        """
        Set the query log format.

        Raises:
            TemplateParseError: If ``format`` is malformed
        """
        self.logger.set_format(format)

    def set_log_slow_time(self, slow_time: float) -> None:
        """Only log queries taking at least ``slow_time`` milliseconds; non-positive logs all."""
        self.logger.set_slow_time(slow_time)

    def add_log_column_mask(self, column: str) -> None:
        self.logger.add_column_mask(column)

    def remove_log_column_mask(self, column: str) -> None:
        self.logger.remove_column_mask(column)

    def _log(self, start: datetime, query: str, args: Sequence[Any]) -> None:
        try:
            self.logger.print(start, query, *args)
        except Exception as e:
            logger.warning(f"Failed to write query log: {e}")

    def execute(self, query: str, *args: Any) -> int:
        """
        Executes a statement and commits it.

        Args:
            query (str): SQL with ``?`` placeholders
            *args: Bound values; lists and tuples are expanded into one value per element

        Returns:
            int: The number of affected rows reported by the driver

        Raises:
            QueryError: If there's an error executing the statement
            ConnectionError: If there's an error with the database connection
        """
        if self.conn is None:
            self.connect()

        args = flatten(args)
        start = self.clock()
        try:
            with self._get_cursor() as cursor:
                cursor.execute(query, args or None)
                self.conn.commit()
                return cursor.rowcount
        except ConnectionError:
            raise
        except Exception as e:
            error_msg = _sanitize_log_message(str(e))
            raise QueryError(f"Error executing query: {error_msg}") from e
        finally:
            self._log(start, query, args)

    def fetch(self, query: str, *args: Any) -> pd.DataFrame:
        """
        Executes a query and returns its rows.

        Args:
            query (str): SQL with ``?`` placeholders
            *args: Bound values; lists and tuples are expanded into one value per element

        Returns:
            pd.DataFrame: The result set, empty if the query returned no rows

        Raises:
            QueryError: If there's an error executing the query
            ConnectionError: If there's an error with the database connection
        """
        if self.conn is None:
            self.connect()

        args = flatten(args)
        start = self.clock()
        try:
            with self._get_cursor() as cursor:
                cursor.execute(query, args or None)
                df = cursor.fetch_dataframe()
        except ConnectionError:
            raise
        except Exception as e:
            error_msg = _sanitize_log_message(str(e))
            raise QueryError(f"Error executing query: {error_msg}") from e
        finally:
            self._log(start, query, args)
        return df if df is not None else pd.DataFrame()
