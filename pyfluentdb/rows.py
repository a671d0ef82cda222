"""Row views and row mappers.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

A RowView is handed to mappers, filters and consumers while the cursor is
positioned on a row.  It is only valid for that call: once the cursor moves
or closes, reading it raises IllegalStateError.  Mappers copy what they need
out of the view.

Exported Classes:
RowView -- Read-only view of the current cursor row.

Exported Functions:
to_dict, to_tuple, to_list, first_column -- Ready-made row mappers.
column -- Build a mapper that reads one column.
mapper_for -- Build a mapper producing instances of a target type.
"""

__all__ = ['RowView', 'to_dict', 'to_tuple', 'to_list', 'first_column',
           'column', 'mapper_for', 'always_true']

try:
    from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union  # pylint: disable=unused-import
    RowMapper = Callable[['RowView'], Any]
    RowFilter = Callable[['RowView'], bool]
except ImportError:
    pass

from .exception import ArgumentError, IllegalStateError
from .datatype import TYPEMAP, convert


class RowView(object):
    """The row a cursor is positioned on.

    Columns are addressed by 0-based index or by label.
    """

    __slots__ = ('_cursor', '_generation', '_values')

    def __init__(self, cursor, generation, values):
        # type: (Any, int, Tuple[Any, ...]) -> None
        self._cursor = cursor
        self._generation = generation
        self._values = values

    def _check_valid(self):
        # type: () -> None
        if self._cursor.generation != self._generation:
            raise IllegalStateError("row view used after its cursor moved on")

    @property
    def labels(self):
        # type: () -> Tuple[str, ...]
        self._check_valid()
        return self._cursor.labels

    def __len__(self):
        self._check_valid()
        return len(self._values)

    def __getitem__(self, key):
        # type: (Union[int, str]) -> Any
        self._check_valid()
        if isinstance(key, str):
            return self._values[self._cursor.column_index(key)]
        return self._values[key]

    def get(self, key, target_type=None):
        # type: (Union[int, str], Optional[type]) -> Any
        """Return column KEY, converted to TARGET_TYPE if given."""
        return convert(self[key], target_type)

    def values(self):
        # type: () -> Tuple[Any, ...]
        """Return the column values as a tuple."""
        self._check_valid()
        return self._values

    def as_dict(self):
        # type: () -> Dict[str, Any]
        self._check_valid()
        return dict(zip(self._cursor.labels, self._values))

    def __repr__(self):
        if self._cursor.generation != self._generation:
            return '<RowView (stale)>'
        return '<RowView %r>' % (self._values,)


def to_dict(row):
    # type: (RowView) -> Dict[str, Any]
    return row.as_dict()


def to_tuple(row):
    # type: (RowView) -> Tuple[Any, ...]
    return row.values()


def to_list(row):
    # type: (RowView) -> List[Any]
    return list(row.values())


def first_column(row):
    # type: (RowView) -> Any
    return row[0]


def always_true(_row):
    # type: (RowView) -> bool
    return True


def column(key, target_type=None):
    # type: (Union[int, str], Optional[type]) -> RowMapper
    """Return a mapper reading column KEY, converted to TARGET_TYPE."""
    def mapper(row):
        return row.get(key, target_type)
    return mapper


def _scalar_types():
    return tuple(t for t in TYPEMAP if t is not type(None))


def mapper_for(target_type):
    # type: (Optional[type]) -> RowMapper
    """Return a mapper that builds TARGET_TYPE from a row.

    None and dict give a label -> value dict, tuple and list the column
    values, a type from the type table the first column converted to it.
    Any other class is called with the column labels as keyword arguments.
    """
    if target_type is None or target_type is dict:
        return to_dict
    if target_type is tuple:
        return to_tuple
    if target_type is list:
        return to_list
    if not isinstance(target_type, type):
        raise ArgumentError("%r is not a type" % (target_type,))
    if issubclass(target_type, _scalar_types()):
        return column(0, target_type)

    def mapper(row):
        return target_type(**row.as_dict())
    return mapper
