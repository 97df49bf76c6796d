from .connector import DB
from .config import ConnectionConfig, LogConfig
from .exceptions import (
    ConnectionError,
    QueryError,
    QueryLogError,
    TemplateExecutionError,
    TemplateParseError,
    WriteError,
)
from .logger import NullLogger, QueryLogger, TemplateLogger
from .masking import ColumnMaskRegistry
from .resolver import resolve_columns
from .template import DEFAULT_FORMAT, LogRecord, LogTemplate
from .utils import SECRET_MARKER

__all__ = [
    "DB",
    "ConnectionConfig",
    "LogConfig",
    "ConnectionError",
    "QueryError",
    "QueryLogError",
    "TemplateExecutionError",
    "TemplateParseError",
    "WriteError",
    "NullLogger",
    "QueryLogger",
    "TemplateLogger",
    "ColumnMaskRegistry",
    "resolve_columns",
    "DEFAULT_FORMAT",
    "LogRecord",
    "LogTemplate",
    "SECRET_MARKER",
]
