"""Per-query options.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

Exported Classes:
QueryOptions -- Parsed and validated options for a query.
"""

__all__ = ['QueryOptions', 'DEFAULT_MAX_SQL_LOG_LENGTH']

try:
    from typing import Any, Mapping, Optional  # pylint: disable=unused-import
    from datetime import tzinfo  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import ArgumentError
from .datatype import get_timezone

DEFAULT_MAX_SQL_LOG_LENGTH = 1024

PARAMSTYLES = ('qmark', 'format', 'numeric')


def strToBool(s):
    # type: (Any) -> bool
    """Convert an option value to a Python boolean.

    :param s: Value to convert, a bool or a true/false string.
    :returns: True if the value is true, False if it's false
    :raises ArgumentError: If the value is not a valid boolean.
    """
    if isinstance(s, bool):
        return s
    if isinstance(s, str):
        if s.lower() == 'true':
            return True
        elif s.lower() == 'false':
            return False
    raise ArgumentError('"%s" is not a valid boolean string' % s)


def _toInt(key, s):
    # type: (str, Any) -> int
    if isinstance(s, bool):
        raise ArgumentError('"%s" is not a valid integer for %s' % (s, key))
    try:
        return int(s)
    except (TypeError, ValueError):
        raise ArgumentError('"%s" is not a valid integer for %s' % (s, key))


class QueryOptions(object):
    """Options controlling one query.

    Keys are matched case-insensitively; unknown keys are rejected.

    close_after_execution -- close the query after each execution (True)
    fetch_size -- rows fetched per round trip (0: driver default)
    query_timeout -- statement timeout in seconds (0: none)
    max_rows -- cap on rows read from a cursor (0: no cap)
    sql_log -- log every SQL statement at DEBUG (False)
    sql_perf_log_threshold_ms -- log executions at least this slow (-1: off)
    max_sql_log_length -- truncate logged SQL to this length (1024)
    timezone -- zone that aware timestamps are bound in (local zone)
    naive_timestamps -- strip the zone from bound timestamps (False)
    paramstyle -- placeholder style named queries are rewritten to
    """

    __slots__ = ('close_after_execution', 'fetch_size', 'query_timeout',
                 'max_rows', 'sql_log', 'sql_perf_log_threshold_ms',
                 'max_sql_log_length', 'timezone', 'naive_timestamps',
                 'paramstyle')

    def __init__(self, options=None):
        # type: (Optional[Mapping[str, Any]]) -> None
        self.close_after_execution = True
        self.fetch_size = 0
        self.query_timeout = 0
        self.max_rows = 0
        self.sql_log = False
        self.sql_perf_log_threshold_ms = -1
        self.max_sql_log_length = DEFAULT_MAX_SQL_LOG_LENGTH
        self.timezone = None  # type: Optional[tzinfo]
        self.naive_timestamps = False
        self.paramstyle = None  # type: Optional[str]

        if options:
            for key, val in options.items():
                self._set(key, val)

    def _set(self, key, val):
        # type: (str, Any) -> None
        name = key.lower()
        if name in ('close_after_execution', 'sql_log', 'naive_timestamps'):
            setattr(self, name, strToBool(val))
        elif name in ('fetch_size', 'query_timeout', 'max_rows'):
            num = _toInt(key, val)
            if num < 0:
                raise ArgumentError('%s must not be negative: %d' % (key, num))
            setattr(self, name, num)
        elif name == 'sql_perf_log_threshold_ms':
            self.sql_perf_log_threshold_ms = _toInt(key, val)
        elif name == 'max_sql_log_length':
            num = _toInt(key, val)
            self.max_sql_log_length = num if num > 0 else DEFAULT_MAX_SQL_LOG_LENGTH
        elif name == 'timezone':
            self.timezone = get_timezone(str(val))
        elif name == 'paramstyle':
            if val not in PARAMSTYLES:
                raise ArgumentError('Unsupported paramstyle "%s"' % val)
            self.paramstyle = val
        else:
            raise ArgumentError('Unknown query option "%s"' % key)
