"""Creating queries on a PEP 249 connection.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

Exported Functions:
prepare_query -- Create a PreparedQuery for positional SQL.
prepare_named_query -- Create a NamedQuery for SQL with named parameters.
"""

__all__ = ['prepare_query', 'prepare_named_query', 'driver_paramstyle']

import sys

try:
    from typing import Any, Mapping, Optional, Union  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import ArgumentError
from .config import QueryOptions, PARAMSTYLES
from .statement import DBAPIStatement
from .query import PreparedQuery
from .named import NamedQuery, parse_sql


def _options(options):
    # type: (Union[QueryOptions, Mapping[str, Any], None]) -> QueryOptions
    if isinstance(options, QueryOptions):
        return options
    return QueryOptions(options)


def driver_paramstyle(connection):
    # type: (Any) -> Optional[str]
    """Return the paramstyle of the driver module CONNECTION comes from.

    None is returned when the module is unknown or its paramstyle is not a
    positional one.
    """
    module_name = type(connection).__module__.split('.')[0]
    module = sys.modules.get(module_name)
    style = getattr(module, 'paramstyle', None)
    return style if style in PARAMSTYLES else None


def prepare_query(connection,             # type: Any
                  sql,                    # type: str
                  options=None,           # type: Union[QueryOptions, Mapping[str, Any], None]
                  return_generated_keys=False  # type: bool
                  ):
    # type: (...) -> PreparedQuery
    """Return a new PreparedQuery running SQL on CONNECTION.

    :param connection: An open PEP 249 connection.
    :param sql: SQL with placeholders in the driver's paramstyle.
    :param options: Query options, see QueryOptions.
    :param return_generated_keys: Collect generated keys after updates.
    :returns: A new PreparedQuery owning a new statement.
    """
    if connection is None:
        raise ArgumentError("'connection' can't be None")
    if not sql or not sql.strip():
        raise ArgumentError("'sql' can't be empty")
    opts = _options(options)
    stmt = DBAPIStatement(connection, sql, return_generated_keys)
    return PreparedQuery(stmt, opts)


def prepare_named_query(connection,             # type: Any
                        sql,                    # type: str
                        options=None,           # type: Union[QueryOptions, Mapping[str, Any], None]
                        return_generated_keys=False  # type: bool
                        ):
    # type: (...) -> NamedQuery
    """Return a new NamedQuery running SQL on CONNECTION.

    The SQL is rewritten to the 'paramstyle' option, or else to the
    paramstyle of the driver, or else to qmark.
    """
    if connection is None:
        raise ArgumentError("'connection' can't be None")
    opts = _options(options)
    paramstyle = opts.paramstyle or driver_paramstyle(connection) or 'qmark'
    parsed = parse_sql(sql, paramstyle)
    stmt = DBAPIStatement(connection, parsed.parameterized_sql, return_generated_keys)
    return NamedQuery(stmt, parsed, opts)
