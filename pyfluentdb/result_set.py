"""pyfluentdb raw result sets.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

Exported Classes:
ResultSet -- The raw cursor interface consumed by queries.
ListResultSet -- A ResultSet over rows already in memory.
DBAPIResultSet -- A ResultSet reading from a PEP 249 cursor.
"""

__all__ = ['ResultSet', 'ListResultSet', 'DBAPIResultSet']

try:
    from typing import Any, Iterable, List, Optional, Sequence, Tuple  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import IllegalStateError


class ResultSet(object):
    """An open, forward-only stream of rows from one result.

    Subclasses implement _next_row().  Rows are tuples; labels holds the
    column labels in column order.
    """

    def __init__(self, labels):
        # type: (Sequence[str]) -> None
        self.labels = tuple(labels)
        self.closed = False

    def fetchone(self):
        # type: () -> Optional[Tuple[Any, ...]]
        """Return the next row, or None when the result is exhausted."""
        if self.closed:
            raise IllegalStateError("result set is closed")
        return self._next_row()

    def _next_row(self):
        # type: () -> Optional[Tuple[Any, ...]]
        raise NotImplementedError

    def close(self):
        # type: () -> None
        """Release the result set.  Closing twice does nothing."""
        self.closed = True


class ListResultSet(ResultSet):
    """A result set over a list of rows."""

    def __init__(self, labels, rows):
        # type: (Sequence[str], Iterable[Sequence[Any]]) -> None
        super(ListResultSet, self).__init__(labels)
        self.results = [tuple(row) for row in rows]
        self.results_idx = 0

    def _next_row(self):
        if self.results_idx == len(self.results):
            return None
        res = self.results[self.results_idx]
        self.results_idx += 1
        return res


class DBAPIResultSet(ResultSet):
    """A result set reading the current result of a PEP 249 cursor.

    Rows are fetched fetch_size at a time.  The DB-API cursor belongs to the
    statement, so closing the result set only stops reading from it.
    """

    def __init__(self, cursor, fetch_size=0, max_rows=0):
        # type: (Any, int, int) -> None
        description = cursor.description or ()
        super(DBAPIResultSet, self).__init__([col[0] for col in description])
        self.cursor = cursor
        self.fetch_size = fetch_size if fetch_size > 0 else getattr(cursor, 'arraysize', 1) or 1
        self.max_rows = max_rows
        self.results = []  # type: List[Tuple[Any, ...]]
        self.results_idx = 0
        self.row_count = 0
        self.complete = False

    def clear_results(self):
        # type: () -> None
        del self.results[:]
        self.results_idx = 0

    def _fetch_next(self):
        # type: () -> None
        self.clear_results()
        rows = self.cursor.fetchmany(self.fetch_size)
        self.results.extend(tuple(row) for row in rows)
        if len(rows) < self.fetch_size:
            self.complete = True

    def _next_row(self):
        if self.max_rows > 0 and self.row_count >= self.max_rows:
            return None
        if self.results_idx == len(self.results) and not self.complete:
            self._fetch_next()

        if self.results_idx == len(self.results):
            return None

        res = self.results[self.results_idx]
        self.results_idx += 1
        self.row_count += 1
        return res

    def close(self):
        # type: () -> None
        self.clear_results()
        self.complete = True
        super(DBAPIResultSet, self).close()
