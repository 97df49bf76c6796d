"""Common exceptions for the querylog modules."""

class ConnectionError(Exception):
    """Exception raised for connection related errors."""
    pass

class QueryError(Exception):
    """Exception raised for query execution errors."""
    pass

class QueryLogError(Exception):
    """Base exception for query logging errors."""
    pass

class TemplateParseError(QueryLogError):
    """Exception raised when a log format string cannot be compiled."""
    pass

class TemplateExecutionError(QueryLogError):
    """Exception raised when a log record cannot be rendered by the template."""
    pass

class WriteError(QueryLogError):
    """Exception raised when a log line cannot be written to the output."""
    pass
