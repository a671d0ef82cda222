"""Cursor traversal with guaranteed release.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

Exported Classes:
ResultCursor -- Owns an open ResultSet and extracts values from it.

Exported Functions:
to_rows -- Result extractor returning every row as a tuple.
to_dicts -- Result extractor returning every row as a dict.
"""

__all__ = ['ResultCursor', 'to_rows', 'to_dicts']

try:
    from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple  # pylint: disable=unused-import
    from .rows import RowMapper, RowFilter  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import ArgumentError, DuplicateResultError, InterfaceError
from .datatype import convert
from .result_set import ResultSet  # pylint: disable=unused-import
from .rows import RowView, always_true, to_dict, to_tuple


class ResultCursor(object):
    """An open cursor over one result.

    Every extraction method reads what it needs and closes the cursor, also
    when a mapper, filter or consumer raises.  Rows are handed out as
    RowView objects that go stale when the cursor moves on.
    """

    def __init__(self, result_set):
        # type: (ResultSet) -> None
        self.result_set = result_set
        self.labels = tuple(result_set.labels)
        self.generation = 0
        self.closed = False
        self._label_index = None  # type: Optional[Dict[str, int]]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def column_index(self, label):
        # type: (str) -> int
        """Return the 0-based index of column LABEL (case-insensitive)."""
        if self._label_index is None:
            index = {}  # type: Dict[str, int]
            for i, name in enumerate(self.labels):
                index.setdefault(name, i)
                index.setdefault(name.lower(), i)
            self._label_index = index
        try:
            return self._label_index[label]
        except KeyError:
            try:
                return self._label_index[label.lower()]
            except KeyError:
                raise InterfaceError("No column labelled %r in %r" % (label, self.labels))

    def next(self):
        # type: () -> Optional[RowView]
        """Advance to the next row, or return None at the end."""
        self.generation += 1
        row = self.result_set.fetchone()
        if row is None:
            return None
        return RowView(self, self.generation, row)

    def __iter__(self):
        # type: () -> Iterator[RowView]
        while True:
            row = self.next()
            if row is None:
                return
            yield row

    def close(self):
        # type: () -> None
        if self.closed:
            return
        self.closed = True
        self.generation += 1
        self.result_set.close()

    def first(self, mapper, row_filter=None):
        # type: (RowMapper, Optional[RowFilter]) -> Any
        """Return the first row accepted by ROW_FILTER, mapped, or None."""
        row_filter = row_filter or always_true
        try:
            for row in self:
                if row_filter(row):
                    return mapper(row)
            return None
        finally:
            self.close()

    def only_one(self, mapper):
        # type: (RowMapper) -> Any
        """Return the only row, mapped, or None if there is none.

        :raises DuplicateResultError: If there is a second row.
        :raises ArgumentError: If MAPPER returns None.
        """
        try:
            row = self.next()
            if row is None:
                return None
            result = mapper(row)
            if result is None:
                raise ArgumentError("row mapper returned None for the found record")
            if self.next() is not None:
                raise DuplicateResultError()
            return result
        finally:
            self.close()

    def single_value(self, target_type=None):
        # type: (Optional[type]) -> Tuple[bool, Any]
        """Return (found, value) for the first column of the first row."""
        try:
            row = self.next()
            if row is None:
                return False, None
            return True, convert(row[0], target_type)
        finally:
            self.close()

    def unique_value(self, target_type=None):
        # type: (Optional[type]) -> Tuple[bool, Any]
        """Like single_value(), but a second row is an error.

        :raises DuplicateResultError: If there is a second row.
        """
        try:
            row = self.next()
            if row is None:
                return False, None
            value = convert(row[0], target_type)
            second = self.next()
            if second is not None:
                raise DuplicateResultError("At least two results found: %s, %s"
                                           % (value, convert(second[0], target_type)))
            return True, value
        finally:
            self.close()

    def to_list(self, mapper, row_filter=None, max_result=None):
        # type: (RowMapper, Optional[RowFilter], Optional[int]) -> List[Any]
        """Map the rows accepted by ROW_FILTER, at most MAX_RESULT of them."""
        row_filter = row_filter or always_true
        result = []  # type: List[Any]
        try:
            if max_result is not None and (not isinstance(max_result, int) or isinstance(max_result, bool)
                                           or max_result < 0):
                raise ArgumentError("'max_result' must be a non-negative int: %r" % (max_result,))
            if max_result == 0:
                return result
            for row in self:
                if row_filter(row):
                    result.append(mapper(row))
                    if max_result is not None and len(result) >= max_result:
                        break
            return result
        finally:
            self.close()

    def count(self, row_filter=None):
        # type: (Optional[RowFilter]) -> int
        row_filter = row_filter or always_true
        cnt = 0
        try:
            for row in self:
                if row_filter(row):
                    cnt += 1
            return cnt
        finally:
            self.close()

    def exists(self):
        # type: () -> bool
        try:
            return self.next() is not None
        finally:
            self.close()

    def any_match(self, row_filter):
        # type: (RowFilter) -> bool
        try:
            for row in self:
                if row_filter(row):
                    return True
            return False
        finally:
            self.close()

    def all_match(self, row_filter):
        # type: (RowFilter) -> bool
        try:
            for row in self:
                if not row_filter(row):
                    return False
            return True
        finally:
            self.close()

    def for_each(self, consumer, row_filter=None):
        # type: (Callable[[RowView], Any], Optional[RowFilter]) -> None
        row_filter = row_filter or always_true
        try:
            for row in self:
                if row_filter(row):
                    consumer(row)
        finally:
            self.close()

    def if_exists(self, consumer, or_else=None):
        # type: (Callable[[RowView], Any], Optional[Callable[[], Any]]) -> bool
        """Pass the first row to CONSUMER, or call OR_ELSE if there is none."""
        try:
            row = self.next()
            if row is not None:
                consumer(row)
                return True
            if or_else is not None:
                or_else()
            return False
        finally:
            self.close()


def to_rows(cursor):
    # type: (ResultCursor) -> List[Tuple[Any, ...]]
    return cursor.to_list(to_tuple)


def to_dicts(cursor):
    # type: (ResultCursor) -> List[Dict[str, Any]]
    return cursor.to_list(to_dict)
