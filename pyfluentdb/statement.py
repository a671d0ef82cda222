"""pyfluentdb SQL statements.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

Exported Classes:
PreparedStatement -- The statement resource a query owns.
DBAPIStatement -- A PreparedStatement over a PEP 249 connection.
"""

__all__ = ['PreparedStatement', 'DBAPIStatement', 'GENERATED_KEY']

try:
    from typing import Any, Dict, List, Optional, Tuple  # pylint: disable=unused-import
    from datetime import tzinfo  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import IllegalStateError, NotSupportedError, ProgrammingError
from .datatype import SQLType, FetchDirection
from .result_set import ResultSet, ListResultSet, DBAPIResultSet

GENERATED_KEY = 'GENERATED_KEY'


class PreparedStatement(object):
    """A SQL prepared statement.

    Parameters are held by 1-based index until execution.  The execution
    protocol follows JDBC: execute() reports whether the first result is a
    cursor, get_result_set() / get_update_count() read the current result
    and get_more_results() moves to the next one.

    Subclasses implement execute(), get_result_set(), get_update_count(),
    get_more_results(), execute_batch() and get_generated_keys().
    """

    def __init__(self, sql):
        # type: (str) -> None
        """Create a prepared statement.

        :param sql: SQL text of the statement.
        """
        self.sql = sql
        self.closed = False
        self.parameters = {}  # type: Dict[int, Tuple[Any, int]]
        self.batch = []  # type: List[Tuple[Any, ...]]

        self.fetch_direction = FetchDirection.UNKNOWN
        self.fetch_size = 0
        self.max_field_size = 0
        self.max_rows = 0
        self.query_timeout = 0

        self.timezone_info = None  # type: Optional[tzinfo]
        self.naive_timestamps = False

    def _check_closed(self):
        # type: () -> None
        if self.closed:
            raise IllegalStateError("statement is closed")

    def set_parameter(self, index, value, sql_type=SQLType.OTHER):
        # type: (int, Any, int) -> None
        """Bind VALUE to the 1-based parameter INDEX."""
        self._check_closed()
        if index < 1:
            raise ProgrammingError("Invalid parameter index %d" % index)
        self.parameters[index] = (value, sql_type)

    def set_null(self, index, sql_type=SQLType.NULL):
        # type: (int, int) -> None
        self.set_parameter(index, None, sql_type)

    def get_parameter(self, index):
        # type: (int) -> Any
        """Return the value bound at INDEX."""
        try:
            return self.parameters[index][0]
        except KeyError:
            raise ProgrammingError("No value bound for parameter %d" % index)

    def clear_parameters(self):
        # type: () -> None
        self.parameters.clear()

    def parameter_values(self):
        # type: () -> Tuple[Any, ...]
        """Return the bound values in index order.

        :raises ProgrammingError: If an index below the highest one is unset.
        """
        if not self.parameters:
            return ()
        count = max(self.parameters)
        return tuple(self.get_parameter(i) for i in range(1, count + 1))

    def add_batch(self):
        # type: () -> None
        """Stage the bound values as one batch unit."""
        self._check_closed()
        self.batch.append(self.parameter_values())

    def clear_batch(self):
        # type: () -> None
        del self.batch[:]

    def execute(self):
        # type: () -> bool
        raise NotImplementedError

    def get_result_set(self):
        # type: () -> Optional[ResultSet]
        raise NotImplementedError

    def get_update_count(self):
        # type: () -> int
        raise NotImplementedError

    def get_more_results(self):
        # type: () -> bool
        raise NotImplementedError

    def execute_batch(self):
        # type: () -> List[int]
        raise NotImplementedError

    def get_generated_keys(self):
        # type: () -> ResultSet
        raise NotImplementedError

    def close(self):
        # type: () -> None
        self.closed = True


class DBAPIStatement(PreparedStatement):
    """A prepared statement over a PEP 249 connection.

    Owns one DB-API cursor.  Bound values are passed positionally, so SQL
    must use a positional paramstyle (qmark, format or numeric).  Batch units
    are executed one at a time.  Generated keys come from cursor.lastrowid
    and are only available when requested at creation.
    """

    def __init__(self, connection, sql, return_generated_keys=False):
        # type: (Any, str, bool) -> None
        """Create a statement.

        :param connection: An open PEP 249 connection.
        :param sql: SQL text with positional placeholders.
        :param return_generated_keys: Collect cursor.lastrowid after updates.
        """
        super(DBAPIStatement, self).__init__(sql)
        self.cursor = connection.cursor()
        self.return_generated_keys = return_generated_keys
        self._has_result = False
        self._update_count = -1
        self._generated_keys = []  # type: List[Any]

    def _reset_results(self):
        # type: () -> None
        self._has_result = False
        self._update_count = -1
        del self._generated_keys[:]

    def _read_result_state(self):
        # type: () -> None
        self._has_result = self.cursor.description is not None
        self._update_count = -1 if self._has_result else self.cursor.rowcount

    def _collect_generated_key(self):
        # type: () -> None
        if self.return_generated_keys:
            key = getattr(self.cursor, 'lastrowid', None)
            if key is not None:
                self._generated_keys.append(key)

    def execute(self):
        # type: () -> bool
        self._check_closed()
        self._reset_results()
        self.cursor.execute(self.sql, self.parameter_values())
        self._read_result_state()
        if not self._has_result:
            self._collect_generated_key()
        return self._has_result

    def get_result_set(self):
        # type: () -> Optional[ResultSet]
        self._check_closed()
        if not self._has_result:
            return None
        # A result is handed out once, as with JDBC.
        self._has_result = False
        return DBAPIResultSet(self.cursor, self.fetch_size, self.max_rows)

    def get_update_count(self):
        # type: () -> int
        return self._update_count

    def get_more_results(self):
        # type: () -> bool
        self._check_closed()
        nextset = getattr(self.cursor, 'nextset', None)
        more = nextset() if nextset is not None else None
        if not more:
            self._has_result = False
            self._update_count = -1
            return False
        self._read_result_state()
        return self._has_result

    def execute_batch(self):
        # type: () -> List[int]
        self._check_closed()
        self._reset_results()
        counts = []
        for params in self.batch:
            self.cursor.execute(self.sql, params)
            counts.append(self.cursor.rowcount)
            self._collect_generated_key()
        return counts

    def get_generated_keys(self):
        # type: () -> ResultSet
        if not self.return_generated_keys:
            raise NotSupportedError("Generated keys were not requested for: %s" % self.sql)
        return ListResultSet((GENERATED_KEY,), [(key,) for key in self._generated_keys])

    def close(self):
        # type: () -> None
        if self.closed:
            return
        self.closed = True
        self.cursor.close()
