"""Statement execution.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

Exported Classes:
ExecutionGate -- Runs a statement once per acquisition.
ExecutionState -- States an ExecutionGate moves through.
"""

__all__ = ['ExecutionGate', 'ExecutionState']

import logging
import time

try:
    from typing import Any, Callable, List, Optional, TypeVar  # pylint: disable=unused-import
    T = TypeVar('T')
except ImportError:
    pass

from .exception import ExecutionError, IllegalStateError
from .datatype import FetchDirection
from .config import QueryOptions
from .result_set import ResultSet  # pylint: disable=unused-import

_log = logging.getLogger(__name__)
_sql_log = logging.getLogger('pyfluentdb.sql')


class ExecutionState(object):
    IDLE = 'idle'
    EXECUTING = 'executing'
    RESULTS_AVAILABLE = 'results-available'
    UPDATE_COMPLETED = 'update-completed'


class ExecutionGate(object):
    """Runs the statement of one query.

    A caller acquires the gate, runs exactly one execution and releases it
    when the results are consumed.  Acquiring the gate while it is held,
    or executing twice under one acquisition, raises IllegalStateError.

    Bound parameters are cleared after every single execution and staged
    batch units after every batch execution, whatever the outcome.
    """

    def __init__(self, stmt, options=None):
        # type: (Any, Optional[QueryOptions]) -> None
        self.stmt = stmt
        self.options = options or QueryOptions()
        self.fetch_direction_set = False
        self.state = ExecutionState.IDLE
        self.in_flight = False
        self.executed = False

    def acquire(self):
        # type: () -> None
        if self.in_flight:
            raise IllegalStateError("another execution is in flight on this query")
        self.in_flight = True
        self.executed = False

    def release(self):
        # type: () -> None
        self.in_flight = False
        self.state = ExecutionState.IDLE

    def _begin(self):
        # type: () -> None
        if not self.in_flight:
            raise IllegalStateError("execution gate was not acquired")
        if self.executed:
            raise IllegalStateError("statement already executed under this acquisition")
        self.executed = True
        if not self.fetch_direction_set:
            self.stmt.fetch_direction = FetchDirection.FORWARD
        self.state = ExecutionState.EXECUTING
        if self.options.sql_log:
            _sql_log.debug("[SQL]: %s", self._sql_text())

    def _sql_text(self):
        # type: () -> str
        sql = getattr(self.stmt, 'sql', None) or repr(self.stmt)
        if len(sql) > self.options.max_sql_log_length:
            return sql[:self.options.max_sql_log_length]
        return sql

    def _log_perf(self, start):
        # type: (float) -> None
        threshold = self.options.sql_perf_log_threshold_ms
        if threshold < 0:
            return
        elapsed = int((time.time() - start) * 1000)
        if elapsed >= threshold:
            _sql_log.info("[SQL-PERF]: %d, %s", elapsed, self._sql_text())

    def _run(self, action, batch=False):
        # type: (Callable[[], T], bool) -> T
        self._begin()
        start = time.time()
        try:
            return action()
        finally:
            self._log_perf(start)
            if batch:
                try:
                    self.stmt.clear_batch()
                except Exception:  # pylint: disable=broad-except
                    _log.error("Failed to clear batch parameters after execution", exc_info=True)
            else:
                try:
                    self.stmt.clear_parameters()
                except Exception:  # pylint: disable=broad-except
                    _log.error("Failed to clear parameters after execution", exc_info=True)

    def execute(self):
        # type: () -> bool
        """Execute the statement.

        :returns: True if the first result is a cursor.
        """
        is_result_set = self._run(self.stmt.execute)
        self.state = (ExecutionState.RESULTS_AVAILABLE if is_result_set
                      else ExecutionState.UPDATE_COMPLETED)
        return is_result_set

    def execute_query(self):
        # type: () -> ResultSet
        """Execute the statement and return its cursor.

        :raises ExecutionError: If the statement did not produce a cursor.
        """
        if not self.execute():
            raise ExecutionError("statement did not produce a result set: %s" % self._sql_text())
        rs = self.stmt.get_result_set()
        if rs is None:
            raise ExecutionError("statement reported a result set but returned none")
        return rs

    def execute_update(self):
        # type: () -> int
        """Execute the statement and return its update count.

        :raises ExecutionError: If the statement produced a cursor.
        """
        if self.execute():
            raise ExecutionError("statement produced a result set: %s" % self._sql_text())
        return self.stmt.get_update_count()

    def execute_batch(self):
        # type: () -> List[int]
        counts = self._run(self.stmt.execute_batch, batch=True)
        self.state = ExecutionState.UPDATE_COMPLETED
        return list(counts)
