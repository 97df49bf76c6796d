from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
import os
from typing import List, Optional, TextIO, Union

from .logger import Clock, NullLogger, TemplateLogger
from .resolver import DEFAULT_QUOTE, resolve_columns
from .template import DEFAULT_FORMAT, LogTemplate

_REQUIRED_ENV = {
    'host': 'DB_HOST',
    'username': 'DB_USERNAME',
    'password': 'DB_PASSWORD',
    'database': 'DB_DATABASE',
    'port': 'DB_PORT',
}

@dataclass
class ConnectionConfig:
    """Connection settings for the database handle.
    Build it directly or from DB_* environment variables with ``from_env``.
    """
    host: str
    username: str
    password: str
    database: str
    port: int
    timeout: int = 30
    ssl: bool = True
    max_retries: int = 3
    retry_delay: float = 5

    @classmethod
    def from_env(cls) -> 'ConnectionConfig':
        """Read DB_HOST, DB_USERNAME, DB_PASSWORD, DB_DATABASE and DB_PORT,
        plus the optional DB_TIMEOUT, DB_SSL, DB_MAX_RETRIES and DB_RETRY_DELAY.
        Raises:
            ValueError: If a required variable is unset or empty
        """
        env = os.environ
        missing = [var for var in _REQUIRED_ENV.values() if not env.get(var)]
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")
        values = {name: env[var] for name, var in _REQUIRED_ENV.items()}
        values['port'] = int(values['port'])
        return cls(
            timeout=int(env.get('DB_TIMEOUT', '30')),
            ssl=env.get('DB_SSL', 'true').lower() == 'true',
            max_retries=int(env.get('DB_MAX_RETRIES', '3')),
            retry_delay=float(env.get('DB_RETRY_DELAY', '5')),
            **values,
        )

    def validate(self) -> None:
        """Raise ValueError naming the first invalid setting."""
        for name in ('host', 'username', 'password', 'database'):
            if not getattr(self, name):
                raise ValueError(f"{name.capitalize()} cannot be empty")
        for name in ('port', 'timeout'):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name.capitalize()} must be a positive number")
        if self.max_retries < 1:
            raise ValueError("Max retries must be at least 1")
        if self.retry_delay < 0:
            raise ValueError("Retry delay cannot be negative")


@dataclass
class LogConfig:
    """Configuration for query logging.
    Logging is disabled unless ``enabled`` is set. ``identifier_quote`` is the
    character the logged SQL quotes column names with.
    """
    enabled: bool = False
    format: str = DEFAULT_FORMAT
    slow_time: float = 0.0
    mask_columns: List[str] = field(default_factory=list)
    identifier_quote: str = DEFAULT_QUOTE

    @classmethod
    def from_env(cls) -> 'LogConfig':
        """Create a configuration from QUERYLOG_* environment variables.
        Returns:
            LogConfig: A new configuration instance
        Raises:
            ValueError: If QUERYLOG_SLOW_TIME is not a number
        """
        masks = os.environ.get('QUERYLOG_MASK_COLUMNS', '')
        return cls(
            enabled=os.environ.get('QUERYLOG_ENABLED', 'false').lower() == 'true',
            format=os.environ.get('QUERYLOG_FORMAT', DEFAULT_FORMAT),
            slow_time=float(os.environ.get('QUERYLOG_SLOW_TIME', '0')),
            mask_columns=[name.strip() for name in masks.split(',') if name.strip()],
        )

    def validate(self) -> None:
        """Validate the configuration parameters.
        Raises:
            TemplateParseError: If the format string is malformed
            ValueError: If the identifier quote is not a single character
        """
        LogTemplate(self.format)
        if len(self.identifier_quote) != 1:
            raise ValueError(f"Identifier quote must be a single character, got {self.identifier_quote!r}")

    def build_logger(
        self,
        output: Optional[TextIO] = None,
        clock: Clock = datetime.now
    ) -> Union[TemplateLogger, NullLogger]:
        """Build the logger described by this configuration.
        Args:
            output: Stream to write log lines to, stdout if None
            clock: Source of the current time
        Returns:
            Union[TemplateLogger, NullLogger]: A null logger when logging is disabled
        """
        if not self.enabled:
            return NullLogger()
        return TemplateLogger(
            output,
            format=self.format,
            slow_time=self.slow_time,
            mask_columns=self.mask_columns,
            clock=clock,
            resolver=partial(resolve_columns, quote=self.identifier_quote),
        )
