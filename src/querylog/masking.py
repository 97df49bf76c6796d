from typing import Iterator, List, Sequence


class ColumnMaskRegistry:
    """Ordered collection of column names whose bound values are redacted.

    Duplicates are kept; ``remove`` deletes one occurrence at a time. The
    registry is not synchronised: changes made while other threads are
    logging take effect for calls that read it afterwards.
    """

    def __init__(self, columns: Sequence[str] = ()):
        self._columns: List[str] = list(columns)

    def add(self, column: str) -> None:
        self._columns.append(column)

    def remove(self, column: str) -> None:
        """Remove the first occurrence of ``column``; do nothing if it is absent."""
        if column in self._columns:
            self._columns.remove(column)

    def __contains__(self, column: object) -> bool:
        return column in self._columns

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._columns))

    def __len__(self) -> int:
        return len(self._columns)

    def mask_indices(self, order: Sequence[str]) -> List[int]:
        """Return the ascending positions in ``order`` naming a masked column."""
        columns = set(self._columns)
        return [i for i, column in enumerate(order) if column in columns]
