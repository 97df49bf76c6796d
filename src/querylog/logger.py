import logging
import sys
import threading
from datetime import datetime
from typing import Any, Callable, List, Optional, Protocol, Sequence, TextIO

from .exceptions import WriteError
from .masking import ColumnMaskRegistry
from .resolver import resolve_columns
from .template import DEFAULT_FORMAT, LogRecord, LogTemplate
from .utils import mask_arguments

# Configure module logger
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

Clock = Callable[[], datetime]
Resolver = Callable[[str], List[str]]


class QueryLogger(Protocol):
    """Operations shared by every query logger."""

    def print(self, start: datetime, query: str, *args: Any) -> None: ...

    def set_format(self, format: str) -> None: ...

    def set_slow_time(self, slow_time: float) -> None: ...

    def add_column_mask(self, column: str) -> None: ...

    def remove_column_mask(self, column: str) -> None: ...


class TemplateLogger:
    """
    Writes one line per executed query through a :class:`LogTemplate`.

    Bound values of masked columns are replaced by ``* SECRET *``. Queries
    faster than ``slow_time`` milliseconds are not logged; a non-positive
    ``slow_time`` logs everything.

    Rendering and writing happen under a lock shared with :meth:`set_format`,
    so lines never interleave and a template swap never affects a line being
    rendered. The slow threshold and the column masks are read without
    locking: changing them while other threads log is eventually consistent,
    a concurrent :meth:`print` may see the old or the new value.

    **Examples:**

    .. code-block:: python

        import sys
        from querylog import TemplateLogger

        log = TemplateLogger(sys.stderr, slow_time=100.0)
        log.add_column_mask("password")
        log.print(start, "UPDATE `users` SET `password` = ? WHERE `id` = ?", "s3cret", 7)
        # [2024-01-02 03:04:05] [120.51ms] UPDATE ... WHERE `id` = ?; [* SECRET *, 7]
    """

    def __init__(
        self,
        output: Optional[TextIO] = None,
        format: str = DEFAULT_FORMAT,
        slow_time: float = 0.0,
        mask_columns: Sequence[str] = (),
        clock: Clock = datetime.now,
        resolver: Resolver = resolve_columns,
    ):
        """
        Args:
            output (Optional[TextIO]): Stream log lines are written to, stdout if None
            format (str): Log line template
            slow_time (float): Slow query threshold in milliseconds
            mask_columns (Sequence[str]): Columns whose values are redacted
            clock (Clock): Source of the current time
            resolver (Resolver): Maps a query to the column of each placeholder

        Raises:
            TemplateParseError: If ``format`` is malformed
        """
        self.output = output if output is not None else sys.stdout
        self.template = LogTemplate(format)
        self.slow_time = slow_time
        self.masks = ColumnMaskRegistry(mask_columns)
        self.clock = clock
        self.resolver = resolver
        self._lock = threading.Lock()

    def set_format(self, format: str) -> None:
        """
        Replace the log line template.

        Raises:
            TemplateParseError: If ``format`` is malformed; the current template is kept
        """
        template = LogTemplate(format)
        with self._lock:
            self.template = template
        logger.debug(f"Query log format set to {format!r}")

    def set_output(self, output: TextIO) -> None:
        with self._lock:
            self.output = output

    def set_slow_time(self, slow_time: float) -> None:
        self.slow_time = slow_time

    def add_column_mask(self, column: str) -> None:
        self.masks.add(column)

    def remove_column_mask(self, column: str) -> None:
        self.masks.remove(column)

    def _mask(self, query: str, args: Sequence[Any]) -> str:
        if not args:
            return f"{query};"
        indices = self.masks.mask_indices(self.resolver(query))
        values = mask_arguments(args, indices)
        return f"{query}; [{', '.join(values)}]"

    def print(self, start: datetime, query: str, *args: Any) -> None:
        """
        Log ``query`` executed at ``start`` with bound values ``args``.

        Args:
            start (datetime): When execution of the query began
            query (str): Rendered SQL with ``?`` placeholders
            *args: Bound values in placeholder order

        Raises:
            TemplateExecutionError: If the template cannot render the record
            WriteError: If the output stream rejects the line
        """
        query = self._mask(query, args)
        duration = (self.clock() - start).total_seconds() * 1000.0
        slow_time = self.slow_time
        if slow_time > 0.0 and duration < slow_time:
            return
        record = LogRecord(time=start, duration=f"{duration:.2f}ms", query=query)
        with self._lock:
            line = self.template.render(record)
            if line.endswith("\n"):
                line = line[:-1]
            try:
                self.output.write(line + "\n")
            except Exception as e:
                raise WriteError(f"Failed to write query log: {e}") from e


class NullLogger:
    """A query logger that discards everything."""

    def print(self, start: datetime, query: str, *args: Any) -> None:
        pass

    def set_format(self, format: str) -> None:
        pass

    def set_slow_time(self, slow_time: float) -> None:
        pass

    def add_column_mask(self, column: str) -> None:
        pass

    def remove_column_mask(self, column: str) -> None:
        pass
