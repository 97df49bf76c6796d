"""
Log line templates.

Formats use Python's ``str.format`` syntax over the fields of a
:class:`LogRecord`: ``time`` (a ``datetime``, so ``{time:%H:%M:%S}`` works),
``duration`` (e.g. ``"12.34ms"``) and ``query`` (the masked query text).
"""
from dataclasses import dataclass
from datetime import datetime
from string import Formatter

from .exceptions import TemplateExecutionError, TemplateParseError

DEFAULT_FORMAT = "[{time:%Y-%m-%d %H:%M:%S}] [{duration}] {query}"


@dataclass(frozen=True)
class LogRecord:
    """Values available to a log template for a single query."""
    time: datetime
    duration: str
    query: str


class LogTemplate:
    """A compiled log format."""

    def __init__(self, format: str = DEFAULT_FORMAT):
        """
        Compile ``format``.

        Args:
            format (str): A ``str.format`` style template

        Raises:
            TemplateParseError: If the format string is malformed
        """
        try:
            self.fields = [
                name for _, name, _, _ in Formatter().parse(format) if name is not None
            ]
        except ValueError as e:
            raise TemplateParseError(f"Invalid log format {format!r}: {e}") from e
        self.format = format

    def render(self, record: LogRecord) -> str:
        """
        Render ``record`` through the template.

        Raises:
            TemplateExecutionError: If the template references an unknown field
                or applies a format spec the value does not support
        """
        data = {"time": record.time, "duration": record.duration, "query": record.query}
        try:
            return self.format.format_map(data)
        except (KeyError, IndexError, AttributeError, ValueError, TypeError) as e:
            raise TemplateExecutionError(f"Failed to render log format {self.format!r}: {e!r}") from e

    def __repr__(self) -> str:
        return f"LogTemplate({self.format!r})"
