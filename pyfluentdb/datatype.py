"""A module for housing the datatype tables.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

Exported Classes:
SQLType -- Integer codes for declared parameter types.
FetchDirection -- Fetch direction codes understood by statements.
TypeObject -- Groups SQL type codes, compares equal to any of them.

Exported Functions:
bind_value -- Bind a Python value to a statement through TYPEMAP.
encode_value -- Return the (value, SQL type) pair TYPEMAP gives a value.
sql_type_of -- Return the SQL type code TYPEMAP gives a Python type.
convert -- Coerce an extracted value to a target Python type.
get_timezone -- Return a tzinfo for an IANA time zone name.

TypeObject Variables:
STRING -- VARCHAR, CHAR, CLOB
BINARY -- VARBINARY, BLOB
NUMBER -- the integer, decimal and floating point codes
DATETIME -- DATE, TIME, TIMESTAMP
"""

__all__ = ['SQLType', 'FetchDirection', 'TypeObject', 'STRING', 'BINARY',
           'NUMBER', 'DATETIME', 'BOOLEAN', 'TYPEMAP', 'bind_value',
           'encode_value', 'sql_type_of', 'convert', 'get_timezone',
           'LOCALZONE', 'UTC']

import sys
import uuid
import decimal
import enum
from datetime import datetime as Timestamp, date as Date, time as Time
from datetime import tzinfo  # pylint: disable=unused-import

try:
    from typing import Any, Callable, Dict, Optional, Tuple  # pylint: disable=unused-import
except ImportError:
    pass

import tzlocal
from .exception import ArgumentError, DataError

# zoneinfo.ZoneInfo is preferred but not introduced until python3.9
if sys.version_info >= (3, 9):
    from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
    from datetime import timezone
    UTC = timezone.utc

    def get_timezone(name):
        # type: (str) -> tzinfo
        """Return the tzinfo for NAME, raising ArgumentError if unknown."""
        if name.upper() == 'UTC':
            return UTC
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ArgumentError('Invalid time zone ' + name)

else:
    # used for python<3.9 without support for zoneinfo.ZoneInfo
    import pytz
    UTC = pytz.utc

    def get_timezone(name):
        # type: (str) -> tzinfo
        """Return the tzinfo for NAME, raising ArgumentError if unknown."""
        try:
            return pytz.timezone(name)
        except pytz.UnknownTimeZoneError:
            raise ArgumentError('Invalid time zone ' + name)

LOCALZONE = tzlocal.get_localzone()

class SQLType(object):
    """Declared parameter types, numbered like java.sql.Types."""

    NULL = 0
    CHAR = 1
    NUMERIC = 2
    DECIMAL = 3
    INTEGER = 4
    SMALLINT = 5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    VARCHAR = 12
    BOOLEAN = 16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BIGINT = -5
    VARBINARY = -3
    OTHER = 1111
    BLOB = 2004
    CLOB = 2005


class FetchDirection(object):
    """Fetch direction codes, numbered like java.sql.ResultSet."""

    FORWARD = 1000
    REVERSE = 1001
    UNKNOWN = 1002

    ALL = (FORWARD, REVERSE, UNKNOWN)


class TypeObject(object):
    """A group of SQL type codes."""

    def __init__(self, *values):
        self.values = values

    def __eq__(self, other):
        if isinstance(other, TypeObject):
            return self.values == other.values
        return other in self.values

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(self.values)


STRING = TypeObject(SQLType.CHAR, SQLType.VARCHAR, SQLType.CLOB)
BINARY = TypeObject(SQLType.VARBINARY, SQLType.BLOB)
NUMBER = TypeObject(SQLType.NUMERIC, SQLType.DECIMAL, SQLType.INTEGER,
                    SQLType.SMALLINT, SQLType.FLOAT, SQLType.REAL,
                    SQLType.DOUBLE, SQLType.BIGINT)
DATETIME = TypeObject(SQLType.DATE, SQLType.TIME, SQLType.TIMESTAMP)
BOOLEAN = TypeObject(SQLType.BOOLEAN)


def _encode_timestamp(value, stmt):
    # type: (Timestamp, Any) -> Timestamp
    # Aware values are moved to the statement's zone.  They are only made
    # naive when the statement asks for it.
    if value.tzinfo is not None:
        zone = getattr(stmt, 'timezone_info', None) or LOCALZONE
        value = value.astimezone(zone)
        if getattr(stmt, 'naive_timestamps', False):
            value = value.replace(tzinfo=None)
    return value


# Python type -> (SQL type, encoder(value, statement) or None).
# Lookup walks the MRO so subclasses (bool of int, datetime of date) find
# their own entry first.
TYPEMAP = {
    type(None): (SQLType.NULL, None),
    bool: (SQLType.BOOLEAN, None),
    int: (SQLType.BIGINT, None),
    float: (SQLType.DOUBLE, None),
    decimal.Decimal: (SQLType.DECIMAL, None),
    str: (SQLType.VARCHAR, None),
    bytes: (SQLType.VARBINARY, None),
    bytearray: (SQLType.VARBINARY, lambda v, s: bytes(v)),
    memoryview: (SQLType.VARBINARY, lambda v, s: v.tobytes()),
    Timestamp: (SQLType.TIMESTAMP, _encode_timestamp),
    Date: (SQLType.DATE, None),
    Time: (SQLType.TIME, None),
    uuid.UUID: (SQLType.VARCHAR, lambda v, s: str(v)),
}  # type: Dict[type, Tuple[int, Optional[Callable[[Any, Any], Any]]]]


def _lookup(cls):
    # type: (type) -> Optional[Tuple[int, Optional[Callable[[Any, Any], Any]]]]
    for base in cls.__mro__:
        entry = TYPEMAP.get(base)
        if entry is not None:
            return entry
    return None


def sql_type_of(cls):
    # type: (type) -> int
    """Return the SQL type code used for values of class CLS."""
    entry = _lookup(cls)
    return SQLType.OTHER if entry is None else entry[0]


def encode_value(value, stmt=None):
    # type: (Any, Any) -> Tuple[Any, int]
    """Return the value to bind and its SQL type.

    Enum members are bound by value.  Values of a type missing from TYPEMAP
    are passed through as OTHER and left for the driver to handle.
    """
    if isinstance(value, enum.Enum):
        value = value.value
    entry = _lookup(type(value))
    if entry is None:
        return value, SQLType.OTHER
    sql_type, encoder = entry
    if encoder is not None:
        value = encoder(value, stmt)
    return value, sql_type


def bind_value(stmt, index, value, sql_type=None):
    # type: (Any, int, Any, Optional[int]) -> None
    """Bind VALUE at INDEX of STMT, dispatching on the value's type.

    :param stmt: The PreparedStatement to bind to.
    :param index: 1-based parameter index.
    :param value: The value to bind; None binds SQL NULL.
    :param sql_type: Declared type, overrides the one from TYPEMAP.
    """
    if value is None:
        stmt.set_null(index, SQLType.NULL if sql_type is None else sql_type)
        return
    bound, inferred = encode_value(value, stmt)
    stmt.set_parameter(index, bound, inferred if sql_type is None else sql_type)


def _to_bool(value):
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ('true', 't', 'y', 'yes', '1'):
            return True
        if lowered in ('false', 'f', 'n', 'no', '0'):
            return False
        raise ValueError('"%s" is not a valid boolean string' % value)
    return bool(value)


def _to_bytes(value):
    if isinstance(value, str):
        return value.encode('utf-8')
    return bytes(value)


def _to_date(value):
    if isinstance(value, Timestamp):
        return value.date()
    if isinstance(value, str):
        return Date.fromisoformat(value[:10])
    raise TypeError(type(value).__name__)


def _to_time(value):
    if isinstance(value, Timestamp):
        return value.time()
    if isinstance(value, str):
        return Time.fromisoformat(value)
    raise TypeError(type(value).__name__)


def _to_timestamp(value):
    if isinstance(value, str):
        return Timestamp.fromisoformat(value)
    if isinstance(value, Date):
        return Timestamp(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        return Timestamp.fromtimestamp(value, UTC)
    raise TypeError(type(value).__name__)


def _to_decimal(value):
    if isinstance(value, float):
        return decimal.Decimal(repr(value))
    return decimal.Decimal(value)


CONVERTERS = {
    bool: _to_bool,
    int: int,
    float: float,
    decimal.Decimal: _to_decimal,
    str: str,
    bytes: _to_bytes,
    Date: _to_date,
    Time: _to_time,
    Timestamp: _to_timestamp,
    uuid.UUID: lambda v: uuid.UUID(str(v)),
}  # type: Dict[type, Callable[[Any], Any]]


def convert(value, target_type):
    # type: (Any, Optional[type]) -> Any
    """Coerce a value read from a cursor to TARGET_TYPE.

    None is returned unchanged, as is any value already of TARGET_TYPE.

    :raises DataError: If the value cannot be converted.
    """
    if value is None or target_type is None:
        return value
    # bool is an int subclass and datetime a date subclass: both must still
    # go through the converter.
    if isinstance(value, target_type) and not (
            (target_type is int and isinstance(value, bool))
            or (target_type is Date and isinstance(value, Timestamp))):
        return value
    converter = CONVERTERS.get(target_type)
    try:
        if converter is not None:
            return converter(value)
        return target_type(value)
    except (TypeError, ValueError, ArithmeticError) as e:
        raise DataError('cannot convert %r to %s: %s'
                        % (value, target_type.__name__, e))
