"""Positional parameter binding.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

__all__ = ['ParameterBinder']

try:
    from typing import Any, Iterable, Optional  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import ArgumentError
from .datatype import bind_value, convert, sql_type_of


class ParameterBinder(object):
    """Binds values to the 1-based parameter slots of a statement.

    The binder only validates and dispatches.  Closing the owning query when
    binding fails is left to the query.
    """

    def __init__(self, stmt):
        self.stmt = stmt

    @staticmethod
    def check_index(index):
        # type: (Any) -> None
        if isinstance(index, bool) or not isinstance(index, int):
            raise ArgumentError("Parameter index must be an int, not %r" % (index,))
        if index < 1:
            raise ArgumentError("Parameter index must be >= 1, got %d" % index)

    def bind(self, index, value, sql_type=None):
        # type: (int, Any, Optional[int]) -> None
        self.check_index(index)
        bind_value(self.stmt, index, value, sql_type)

    def bind_null(self, index, sql_type):
        # type: (int, int) -> None
        self.check_index(index)
        self.stmt.set_null(index, sql_type)

    def bind_as(self, index, value, target_type):
        # type: (int, Any, type) -> None
        """Coerce VALUE to TARGET_TYPE and bind it with that type's code."""
        self.check_index(index)
        bind_value(self.stmt, index, convert(value, target_type),
                   sql_type_of(target_type))

    def bind_all(self, start_index, values, sql_type=None):
        # type: (int, Iterable[Any], Optional[int]) -> int
        """Bind VALUES to consecutive slots starting at START_INDEX.

        :returns: The index after the last one bound.
        """
        self.check_index(start_index)
        if values is None:
            raise ArgumentError("'parameters' can't be None")
        if isinstance(values, (str, bytes)):
            raise ArgumentError("parameters must be a sequence of values, not a single %s"
                                % type(values).__name__)
        index = start_index
        for value in values:
            bind_value(self.stmt, index, value, sql_type)
            index += 1
        return index

    def bind_positions(self, value, indices, sql_type=None):
        # type: (Any, Iterable[int], Optional[int]) -> None
        """Bind the same VALUE at every index in INDICES."""
        indices = list(indices)
        if not indices:
            raise ArgumentError("at least one parameter index is required")
        for index in indices:
            self.check_index(index)
        for index in indices:
            bind_value(self.stmt, index, value, sql_type)
