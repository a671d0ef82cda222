"""Iteration over the results of one execution.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

A statement such as a stored procedure call may report several results:
update counts and cursors in any order.  MultiResultIterator hands them out
one at a time, in the order the database reports them.

Exported Classes:
UpdateCount -- An update count reported by the statement.
MultiResultIterator -- Iterator over the remaining results.
"""

__all__ = ['UpdateCount', 'MultiResultIterator']

import logging

try:
    from typing import Any, Callable, Optional  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import IllegalStateError, add_suppressed
from .cursor import ResultCursor, to_dicts

_log = logging.getLogger(__name__)

_PENDING_CURSOR = 'cursor'
_PENDING_UPDATE = 'update'
_END = 'end'


class UpdateCount(object):
    """The number of rows changed by one statement of an execution."""

    __slots__ = ('value',)

    def __init__(self, value):
        # type: (int) -> None
        self.value = value

    def __int__(self):
        return self.value

    def __eq__(self, other):
        if isinstance(other, UpdateCount):
            return self.value == other.value
        return NotImplemented

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash((UpdateCount, self.value))

    def __repr__(self):
        return 'UpdateCount(%d)' % self.value


class MultiResultIterator(object):
    """Yields UpdateCount objects and extracted cursors.

    Each cursor is wrapped in a ResultCursor, passed to the extractor and
    closed before the next result is requested from the statement, so at
    most one result is held at a time.

    :param stmt: The statement, already executed.
    :param is_result_set: What execute() returned for the first result.
    :param extractor: Called with a ResultCursor; defaults to to_dicts.
    :param include_update_counts: Yield update counts, or skip them.
    :param on_close: Called once when the iterator is exhausted, fails or
                     is closed.
    """

    def __init__(self, stmt, is_result_set, extractor=None, include_update_counts=True,
                 on_close=None):
        # type: (Any, bool, Optional[Callable[[ResultCursor], Any]], bool, Optional[Callable[[], None]]) -> None
        self.stmt = stmt
        self.extractor = extractor or to_dicts
        self.include_update_counts = include_update_counts
        self.on_close = on_close
        self.closed = False
        self.exhausted = False
        self._state = _PENDING_CURSOR if is_result_set else _PENDING_UPDATE

    def __iter__(self):
        return self

    def _advance(self):
        # type: () -> None
        if self.stmt.get_more_results():
            self._state = _PENDING_CURSOR
        else:
            self._state = _PENDING_UPDATE

    def has_next(self):
        # type: () -> bool
        """Return True if another result is available."""
        while True:
            if self.closed or self._state == _END:
                return False
            if self._state == _PENDING_CURSOR:
                return True
            if self.stmt.get_update_count() == -1:
                self._state = _END
                return False
            if self.include_update_counts:
                return True
            self._advance()

    def __next__(self):
        # type: () -> Any
        if self.exhausted:
            raise StopIteration
        if self.closed:
            raise IllegalStateError("result iterator is closed")
        try:
            if not self.has_next():
                self.exhausted = True
                raise StopIteration
            if self._state == _PENDING_UPDATE:
                count = UpdateCount(self.stmt.get_update_count())
                self._advance()
                return count

            with ResultCursor(self.stmt.get_result_set()) as cursor:
                result = self.extractor(cursor)
            self._advance()
            return result
        except StopIteration:
            self.close()
            raise
        except BaseException as e:
            try:
                self.close()
            except Exception as close_error:  # pylint: disable=broad-except
                _log.error("Failed to close result iterator after error", exc_info=True)
                add_suppressed(e, close_error)
            raise

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        # type: () -> None
        """Stop iterating.  Remaining results are not read."""
        if self.closed:
            return
        self.closed = True
        self._state = _END
        if self.on_close is not None:
            self.on_close()
