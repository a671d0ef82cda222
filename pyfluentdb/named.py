"""Queries with named parameters.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

SQL given to a named query may use ':name' or '#{name}' placeholders.  The
SQL is rewritten to the positional paramstyle of the driver and every name
is mapped to the positions it occupies.

Exported Classes:
ParsedSql -- SQL with its placeholders located.
NamedQuery -- A PreparedQuery that binds parameters by name.

Exported Functions:
parse_sql -- Locate the placeholders in a SQL string.
"""

__all__ = ['ParsedSql', 'NamedQuery', 'parse_sql']

try:
    from typing import Any, Dict, List, Mapping, Optional, Tuple, Union  # pylint: disable=unused-import
    from .config import QueryOptions  # pylint: disable=unused-import
    from .statement import PreparedStatement  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import ArgumentError
from .config import PARAMSTYLES
from .query import PreparedQuery

_QUOTES = ("'", '"', '`')


def _is_name_start(c):
    # type: (str) -> bool
    return c.isalpha() or c == '_'


def _is_name_char(c):
    # type: (str) -> bool
    return c.isalnum() or c in ('_', '.')


def _placeholder(paramstyle, position):
    # type: (str, int) -> str
    if paramstyle == 'format':
        return '%s'
    if paramstyle == 'numeric':
        return ':%d' % position
    return '?'


def _skip_quoted(sql, start):
    # type: (str, int) -> int
    """Return the index after the quoted text starting at START."""
    quote = sql[start]
    i = start + 1
    while i < len(sql):
        if sql[i] == quote:
            # A doubled quote is an escaped quote.
            if i + 1 < len(sql) and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        if sql[i] == '\\':
            i += 1
        i += 1
    return len(sql)


def _skip_comment(sql, start):
    # type: (str, int) -> int
    if sql.startswith('--', start):
        end = sql.find('\n', start)
        return len(sql) if end < 0 else end
    end = sql.find('*/', start + 2)
    return len(sql) if end < 0 else end + 2


class ParsedSql(object):
    """A SQL string with its parameter placeholders located.

    sql -- the SQL as given
    parameterized_sql -- the SQL with every placeholder in the paramstyle
    named_parameters -- parameter names in position order (empty for '?')
    parameter_count -- number of placeholders
    """

    def __init__(self, sql, parameterized_sql, named_parameters, parameter_count):
        # type: (str, str, List[str], int) -> None
        self.sql = sql
        self.parameterized_sql = parameterized_sql
        self.named_parameters = named_parameters
        self.parameter_count = parameter_count

    def positions(self):
        # type: () -> Dict[str, List[int]]
        """Return the 1-based positions of every parameter name."""
        result = {}  # type: Dict[str, List[int]]
        for i, name in enumerate(self.named_parameters):
            result.setdefault(name, []).append(i + 1)
        return result

    def __repr__(self):
        return 'ParsedSql(%r)' % self.parameterized_sql


def parse_sql(sql, paramstyle='qmark'):
    # type: (str, str) -> ParsedSql
    """Locate the placeholders of SQL and rewrite them to PARAMSTYLE.

    Placeholders inside quoted text or comments are left alone, as are
    '::' casts.

    :param sql: SQL using '?', ':name' or '#{name}' placeholders.
    :param paramstyle: 'qmark', 'format' or 'numeric'.
    :raises ArgumentError: If SQL mixes '?' with named placeholders.
    """
    if not sql or not sql.strip():
        raise ArgumentError("'sql' can't be empty")
    if paramstyle not in PARAMSTYLES:
        raise ArgumentError('Unsupported paramstyle "%s"' % paramstyle)

    escape_percent = paramstyle == 'format'
    out = []  # type: List[str]
    names = []  # type: List[str]
    positional = 0
    i = 0
    n = len(sql)

    def literal(text):
        out.append(text.replace('%', '%%') if escape_percent else text)

    while i < n:
        c = sql[i]
        if c in _QUOTES:
            end = _skip_quoted(sql, i)
            literal(sql[i:end])
            i = end
        elif sql.startswith('--', i) or sql.startswith('/*', i):
            end = _skip_comment(sql, i)
            literal(sql[i:end])
            i = end
        elif c == '?':
            positional += 1
            out.append(_placeholder(paramstyle, positional + len(names)))
            i += 1
        elif c == ':' and i + 1 < n and sql[i + 1] == ':':
            out.append('::')
            i += 2
        elif c == ':' and i + 1 < n and _is_name_start(sql[i + 1]):
            end = i + 1
            while end < n and _is_name_char(sql[end]):
                end += 1
            names.append(sql[i + 1:end])
            out.append(_placeholder(paramstyle, positional + len(names)))
            i = end
        elif sql.startswith('#{', i) and sql.find('}', i) > 0:
            end = sql.find('}', i)
            name = sql[i + 2:end].strip()
            if not name:
                raise ArgumentError('Empty parameter name at %d in: %s' % (i, sql))
            names.append(name)
            out.append(_placeholder(paramstyle, positional + len(names)))
            i = end + 1
        else:
            literal(c)
            i += 1

    if positional and names:
        raise ArgumentError("Can't mix '?' and named parameters in: %s" % sql)
    return ParsedSql(sql, ''.join(out), names, positional + len(names))


class NamedQuery(PreparedQuery):
    """A PreparedQuery whose parameters can also be bound by name.

    Positional binding keeps working on the rewritten SQL.
    """

    def __init__(self, stmt, parsed_sql, options=None):
        # type: (PreparedStatement, ParsedSql, Union[QueryOptions, Mapping[str, Any], None]) -> None
        super(NamedQuery, self).__init__(stmt, options)
        self.parsed_sql = parsed_sql
        self._positions = parsed_sql.positions()

    def _positions_of(self, name):
        # type: (str) -> List[int]
        positions = self._positions.get(name)
        self._check_arg(positions is not None,
                        'Not found named parameter "%s" in sql: %s'
                        % (name, self.parsed_sql.sql))
        return positions  # type: ignore[return-value]

    def set_named(self, name, value):
        # type: (str, Any) -> NamedQuery
        """Bind VALUE at every position of the parameter called NAME."""
        self._assert_not_closed()
        positions = self._positions_of(name)
        with self._binding():
            self.binder.bind_positions(value, positions)
        return self

    def set_named_parameters(self, parameters):
        # type: (Any) -> NamedQuery
        """Bind every named parameter from PARAMETERS.

        :param parameters: A mapping from name to value, or an object whose
                           attributes are read by name.
        :raises ArgumentError: If a parameter of the SQL has no value.
        """
        self._assert_not_closed()
        self._check_arg_not_none(parameters, 'parameters')
        is_mapping = hasattr(parameters, 'keys') and hasattr(parameters, '__getitem__')
        values = []  # type: List[Tuple[List[int], Any]]
        for name, positions in self._positions.items():
            if is_mapping:
                found = name in parameters
                value = parameters[name] if found else None
            else:
                found = hasattr(parameters, name)
                value = getattr(parameters, name, None)
            self._check_arg(found, 'No value for named parameter "%s"' % name)
            values.append((positions, value))
        with self._binding():
            for positions, value in values:
                self.binder.bind_positions(value, positions)
        return self
