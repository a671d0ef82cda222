"""Classes containing the exceptions for reporting errors.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

__all__ = ['Error', 'InterfaceError', 'DatabaseError',
           'DataError', 'OperationalError', 'IntegrityError', 'InternalError',
           'ProgrammingError', 'NotSupportedError', 'ArgumentError',
           'IllegalStateError', 'DuplicateResultError', 'ExecutionError',
           'CloseError', 'add_suppressed']

try:
    from typing import List, Sequence  # pylint: disable=unused-import
except ImportError:
    pass


class Error(Exception):
    def __init__(self, value):
        Exception.__init__(self, value)
        self.__value = value

    def __str__(self):
        return str(self.__value)


class InterfaceError(Error):
    def __init__(self, value):
        Error.__init__(self, value)


class DatabaseError(Error):
    def __init__(self, value):
        Error.__init__(self, value)


class DataError(DatabaseError):
    def __init__(self, value):
        DatabaseError.__init__(self, value)


class OperationalError(DatabaseError):
    def __init__(self, value):
        DatabaseError.__init__(self, value)


class IntegrityError(DatabaseError):
    def __init__(self, value):
        DatabaseError.__init__(self, value)


class InternalError(DatabaseError):
    def __init__(self, value):
        DatabaseError.__init__(self, value)


class ProgrammingError(DatabaseError):
    def __init__(self, value):
        DatabaseError.__init__(self, value)


class NotSupportedError(DatabaseError):
    def __init__(self, value):
        DatabaseError.__init__(self, value)


class ArgumentError(InterfaceError, ValueError):
    """Invalid input from the caller.

    The query that rejected the input is closed before this is raised.
    """

    def __init__(self, value):
        InterfaceError.__init__(self, value)


class IllegalStateError(InterfaceError):
    """An operation was attempted in a state that does not allow it.

    Raised for any use of a closed query, for reading a row view after its
    cursor moved on, and for starting an execution while one is in flight.
    """

    def __init__(self, value='query is closed'):
        InterfaceError.__init__(self, value)


class DuplicateResultError(DataError):
    """A single-row extraction found more than one row."""

    def __init__(self, value='More than one record found by the query'):
        DataError.__init__(self, value)


class ExecutionError(DatabaseError):
    """The statement produced an outcome the caller cannot use.

    Errors raised by the driver itself are never wrapped in this class.
    """

    def __init__(self, value):
        DatabaseError.__init__(self, value)


class CloseError(Error):
    """More than one failure happened while closing a query."""

    errors = None

    def __init__(self, value, errors):
        # type: (str, Sequence[BaseException]) -> None
        Error.__init__(self, value)
        self.errors = list(errors)


def add_suppressed(error, suppressed):
    # type: (BaseException, BaseException) -> None
    """Record SUPPRESSED on ERROR without replacing it.

    :param error: The exception that keeps propagating.
    :param suppressed: The exception raised while cleaning up after ERROR.
    """
    errors = getattr(error, 'suppressed', None)  # type: List[BaseException]
    if errors is None:
        errors = []
        try:
            error.suppressed = errors  # type: ignore[attr-defined]
        except AttributeError:
            return
    errors.append(suppressed)
    add_note = getattr(error, 'add_note', None)
    if add_note is not None:
        add_note('Suppressed: %s: %s' % (type(suppressed).__name__, suppressed))
