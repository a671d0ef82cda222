"""Prepared queries.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.

A PreparedQuery owns one PreparedStatement.  Parameters are bound and the
statement configured by chained calls; a terminal call executes it and
extracts the result.  By default the query is closed after its first
execution.  Calling close_after_execution(False) keeps it open for reuse
until close() is called.

Exported Classes:
PreparedQuery -- Binds, executes and releases one prepared statement.
"""

__all__ = ['PreparedQuery']

import contextlib
import decimal
import logging
import threading
import concurrent.futures

try:
    from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union  # pylint: disable=unused-import
    from .rows import RowMapper, RowFilter  # pylint: disable=unused-import
    Extractor = Callable[['ResultCursor'], Any]
except ImportError:
    pass

from .exception import (ArgumentError, CloseError, IllegalStateError,
                        add_suppressed)
from .datatype import FetchDirection, Date, Time, Timestamp
from .config import QueryOptions
from .statement import PreparedStatement  # pylint: disable=unused-import
from .binder import ParameterBinder
from .batch import BatchAccumulator, SHAPE_AUTO
from .execution import ExecutionGate
from .cursor import ResultCursor, to_dicts
from .rows import always_true, first_column, mapper_for
from .stream import LazyRowStream
from .multiresult import MultiResultIterator

_log = logging.getLogger(__name__)

# Statement properties that are put back when the query is closed.
_RESTORED_PROPERTIES = ('fetch_direction', 'fetch_size', 'max_field_size', 'query_timeout')

_executor = None  # type: Optional[concurrent.futures.Executor]
_executor_lock = threading.Lock()


def _default_executor():
    # type: () -> concurrent.futures.Executor
    global _executor  # pylint: disable=global-statement
    with _executor_lock:
        if _executor is None:
            _executor = concurrent.futures.ThreadPoolExecutor(
                thread_name_prefix='pyfluentdb-async')
        return _executor


def _is_count(value):
    # type: (Any) -> bool
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _row_mapper(mapper):
    # type: (Any) -> RowMapper
    """Return MAPPER, or mapper_for(MAPPER) when it is None or a type."""
    if mapper is None or isinstance(mapper, type):
        return mapper_for(mapper)
    return mapper


def _is_default_id(value):
    # type: (Any) -> bool
    return value is None or value == 0 or value == ''


def _first_column_list(cursor):
    # type: (ResultCursor) -> List[Any]
    return cursor.to_list(first_column)


class PreparedQuery(object):
    """A prepared statement with a fluent binding and extraction API.

    Configuration and binding methods return the query itself.  Any failure
    while binding parameters or staging a batch closes the query before the
    error propagates.  A failure while executing or reading results closes
    it when close_after_execution is on.  Every use of a closed query raises
    IllegalStateError.
    """

    def __init__(self, stmt, options=None):
        # type: (PreparedStatement, Union[QueryOptions, Mapping[str, Any], None]) -> None
        """Create a query owning STMT.

        :param stmt: The statement to execute.  It is closed with the query.
        :param options: QueryOptions or a mapping of option names to values.
        """
        if stmt is None:
            raise ArgumentError("'stmt' can't be None")
        self.stmt = stmt
        if isinstance(options, QueryOptions):
            self.options = options
        else:
            try:
                self.options = QueryOptions(options)
            except ArgumentError:
                stmt.close()
                raise
        self.binder = ParameterBinder(stmt)
        self.batch = BatchAccumulator(stmt, self.binder)
        self.gate = ExecutionGate(stmt, self.options)

        self.is_closed = False
        self._close_after_execution = self.options.close_after_execution
        self._close_handlers = []  # type: List[Callable[[], Any]]
        self._defaults = {}  # type: Dict[str, Any]
        self._open_cursor = None  # type: Optional[ResultCursor]

        self._apply_options()

    def _apply_options(self):
        # type: () -> None
        opts = self.options
        if opts.fetch_size:
            self._override('fetch_size', opts.fetch_size)
        if opts.query_timeout:
            self._override('query_timeout', opts.query_timeout)
        if opts.max_rows:
            self.stmt.max_rows = opts.max_rows
        if opts.timezone is not None:
            self.stmt.timezone_info = opts.timezone
        self.stmt.naive_timestamps = opts.naive_timestamps

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __repr__(self):
        return '<%s %s%r>' % (type(self).__name__,
                              'closed ' if self.is_closed else '',
                              getattr(self.stmt, 'sql', self.stmt))

    @property
    def closed(self):
        # type: () -> bool
        return self.is_closed

    # Lifecycle

    def _assert_not_closed(self):
        # type: () -> None
        if self.is_closed:
            raise IllegalStateError()

    def _check_arg(self, valid, message):
        # type: (bool, str) -> None
        """Close the query and raise ArgumentError unless VALID."""
        if not valid:
            self._close_quietly()
            raise ArgumentError(message)

    def _check_arg_not_none(self, arg, name):
        # type: (Any, str) -> None
        self._check_arg(arg is not None, "'%s' can't be None" % name)

    def _close_quietly(self):
        # type: () -> None
        try:
            self.close()
        except Exception:  # pylint: disable=broad-except
            _log.error("Failed to close query", exc_info=True)

    def _close_after_error(self, error):
        # type: (BaseException) -> None
        try:
            self.close()
        except Exception as close_error:  # pylint: disable=broad-except
            _log.error("Failed to close query after error", exc_info=True)
            add_suppressed(error, close_error)

    def _close_after_execution_if_allowed(self):
        # type: () -> None
        if self._close_after_execution:
            self.close()

    def _finish_execution(self):
        # type: () -> None
        self._open_cursor = None
        self.gate.release()
        self._close_after_execution_if_allowed()

    @contextlib.contextmanager
    def _binding(self):
        self._assert_not_closed()
        try:
            yield
        except BaseException as e:
            self._close_after_error(e)
            raise

    @contextlib.contextmanager
    def _execution(self):
        self._assert_not_closed()
        self.gate.acquire()
        try:
            yield
        except BaseException as e:
            self._open_cursor = None
            self.gate.release()
            if self._close_after_execution:
                self._close_after_error(e)
            raise
        self._finish_execution()

    def _open(self):
        # type: () -> ResultCursor
        """Execute the statement and track the cursor it produced."""
        cursor = ResultCursor(self.gate.execute_query())
        self._open_cursor = cursor
        return cursor

    def close_after_execution(self, flag=True):
        # type: (bool) -> PreparedQuery
        """Choose whether the query is closed after each execution."""
        self._assert_not_closed()
        self._close_after_execution = flag
        return self

    def is_close_after_execution(self):
        # type: () -> bool
        return self._close_after_execution

    def on_close(self, handler):
        # type: (Callable[[], Any]) -> PreparedQuery
        """Register HANDLER to run when the query is closed.

        Handlers run in registration order.
        """
        self._assert_not_closed()
        self._check_arg_not_none(handler, 'handler')
        self._close_handlers.append(handler)
        return self

    def _restore_statement_properties(self):
        # type: () -> None
        for name in _RESTORED_PROPERTIES:
            if name not in self._defaults:
                continue
            try:
                setattr(self.stmt, name, self._defaults[name])
            except Exception:  # pylint: disable=broad-except
                _log.warning("Failed to restore %s of statement", name, exc_info=True)
        self._defaults.clear()

    def close(self):
        # type: () -> None
        """Release the statement and run the close handlers.

        Closing an already closed query does nothing.

        :raises CloseError: If more than one step of closing failed.  A
                            single failure is raised as is.
        """
        if self.is_closed:
            return
        self.is_closed = True

        errors = []  # type: List[Exception]
        cursor, self._open_cursor = self._open_cursor, None
        if cursor is not None:
            try:
                cursor.close()
            except Exception as e:  # pylint: disable=broad-except
                errors.append(e)

        self._restore_statement_properties()

        try:
            self.stmt.close()
        except Exception as e:  # pylint: disable=broad-except
            errors.append(e)

        for handler in self._close_handlers:
            try:
                handler()
            except Exception as e:  # pylint: disable=broad-except
                errors.append(e)

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise CloseError("%d errors while closing query" % len(errors), errors)

    # Statement configuration

    def _override(self, name, value):
        # type: (str, Any) -> None
        if name not in self._defaults:
            self._defaults[name] = getattr(self.stmt, name)
        setattr(self.stmt, name, value)

    def _check_non_negative(self, value, name):
        # type: (Any, str) -> None
        self._check_arg(_is_count(value),
                        "'%s' must be a non-negative int: %r" % (name, value))

    def set_fetch_direction(self, direction):
        # type: (int) -> PreparedQuery
        self._assert_not_closed()
        self._check_arg(direction in FetchDirection.ALL,
                        "Unknown fetch direction %r" % (direction,))
        self._override('fetch_direction', direction)
        self.gate.fetch_direction_set = True
        return self

    def set_fetch_direction_to_forward(self):
        # type: () -> PreparedQuery
        return self.set_fetch_direction(FetchDirection.FORWARD)

    def set_fetch_size(self, rows):
        # type: (int) -> PreparedQuery
        self._assert_not_closed()
        self._check_non_negative(rows, 'rows')
        self._override('fetch_size', rows)
        return self

    def set_max_field_size(self, max_size):
        # type: (int) -> PreparedQuery
        self._assert_not_closed()
        self._check_non_negative(max_size, 'max_size')
        self._override('max_field_size', max_size)
        return self

    def set_max_rows(self, max_rows):
        # type: (int) -> PreparedQuery
        self._assert_not_closed()
        self._check_non_negative(max_rows, 'max_rows')
        self.stmt.max_rows = max_rows
        return self

    set_large_max_rows = set_max_rows

    def set_query_timeout(self, seconds):
        # type: (int) -> PreparedQuery
        self._assert_not_closed()
        self._check_non_negative(seconds, 'seconds')
        self._override('query_timeout', seconds)
        return self

    def config_stmt(self, setter):
        # type: (Callable[[PreparedStatement], Any]) -> PreparedQuery
        """Call SETTER with the raw statement to configure it."""
        self._check_arg_not_none(setter, 'setter')
        with self._binding():
            setter(self.stmt)
        return self

    # Parameter binding

    def set_parameter(self, index, value):
        # type: (int, Any) -> PreparedQuery
        """Bind VALUE at the 1-based INDEX, typed from its Python type."""
        with self._binding():
            self.binder.bind(index, value)
        return self

    def set_null(self, index, sql_type):
        # type: (int, int) -> PreparedQuery
        with self._binding():
            self.binder.bind_null(index, sql_type)
        return self

    def set_object(self, index, value, sql_type=None):
        # type: (int, Any, Optional[int]) -> PreparedQuery
        with self._binding():
            self.binder.bind(index, value, sql_type)
        return self

    def _set_as(self, index, value, target_type):
        # type: (int, Any, type) -> PreparedQuery
        with self._binding():
            self.binder.bind_as(index, value, target_type)
        return self

    def set_string(self, index, value):
        # type: (int, Optional[str]) -> PreparedQuery
        return self._set_as(index, value, str)

    def set_int(self, index, value):
        # type: (int, Optional[int]) -> PreparedQuery
        return self._set_as(index, value, int)

    def set_float(self, index, value):
        # type: (int, Optional[float]) -> PreparedQuery
        return self._set_as(index, value, float)

    def set_decimal(self, index, value):
        # type: (int, Any) -> PreparedQuery
        return self._set_as(index, value, decimal.Decimal)

    def set_boolean(self, index, value):
        # type: (int, Optional[bool]) -> PreparedQuery
        return self._set_as(index, value, bool)

    def set_bytes(self, index, value):
        # type: (int, Optional[bytes]) -> PreparedQuery
        return self._set_as(index, value, bytes)

    def set_date(self, index, value):
        # type: (int, Any) -> PreparedQuery
        return self._set_as(index, value, Date)

    def set_time(self, index, value):
        # type: (int, Any) -> PreparedQuery
        return self._set_as(index, value, Time)

    def set_timestamp(self, index, value):
        # type: (int, Any) -> PreparedQuery
        return self._set_as(index, value, Timestamp)

    def set_parameters(self, *values):
        # type: (*Any) -> PreparedQuery
        """Bind VALUES to parameters 1..n."""
        with self._binding():
            self.binder.bind_all(1, values)
        return self

    def set_parameters_from(self, start_index, values):
        # type: (int, Iterable[Any]) -> PreparedQuery
        """Bind VALUES to consecutive parameters starting at START_INDEX."""
        with self._binding():
            self.binder.bind_all(start_index, values)
        return self

    def set_parameters_with(self, setter):
        # type: (Callable[[PreparedStatement], Any]) -> PreparedQuery
        """Call SETTER with the raw statement to bind parameters."""
        self._check_arg_not_none(setter, 'setter')
        with self._binding():
            setter(self.stmt)
        return self

    def set_parameters_for(self, value, setter):
        # type: (Any, Callable[[PreparedQuery, Any], Any]) -> PreparedQuery
        """Call SETTER with this query and VALUE to bind parameters."""
        self._check_arg_not_none(setter, 'setter')
        with self._binding():
            setter(self, value)
        return self

    def set_for_multi_positions(self, value, *indices):
        # type: (Any, *int) -> PreparedQuery
        """Bind the same VALUE at every one of INDICES."""
        with self._binding():
            self.binder.bind_positions(value, indices)
        return self

    def clear_parameters(self):
        # type: () -> PreparedQuery
        with self._binding():
            self.stmt.clear_parameters()
        return self

    # Batches

    def add_batch(self):
        # type: () -> PreparedQuery
        """Stage the bound parameters as one batch unit."""
        with self._binding():
            self.batch.add()
        return self

    def add_batch_parameters(self, items, setter=None, shape=SHAPE_AUTO, sql_type=None):
        # type: (Iterable[Any], Optional[Callable[[PreparedQuery, Any], Any]], str, Optional[int]) -> PreparedQuery
        """Bind and stage one batch unit per element of ITEMS.

        :param items: Elements to stage, a collection or an iterator.
        :param setter: Called as setter(query, element) to bind an element.
                       Without it elements are bound by shape.
        :param shape: 'scalar' binds each element to parameter 1, 'sequence'
                      binds its items to parameters 1..n, 'auto' takes the
                      shape of the first element.
        :param sql_type: SQL type for scalar elements.
        """
        self._check_arg_not_none(items, 'batch_parameters')
        with self._binding():
            self.batch.add_all(items, setter, self, shape, sql_type)
        return self

    def clear_batch(self):
        # type: () -> PreparedQuery
        with self._binding():
            self.batch.reset()
        return self

    # Execution

    def execute(self):
        # type: () -> bool
        """Execute the statement.

        :returns: True if the first result is a cursor.
        """
        with self._execution():
            return self.gate.execute()

    def execute_then_apply(self, func):
        # type: (Callable[[bool, PreparedStatement], Any]) -> Any
        """Execute, then return func(is_result_set, statement)."""
        self._check_arg_not_none(func, 'func')
        with self._execution():
            return func(self.gate.execute(), self.stmt)

    def execute_then_accept(self, consumer):
        # type: (Callable[[bool, PreparedStatement], Any]) -> None
        self._check_arg_not_none(consumer, 'consumer')
        with self._execution():
            consumer(self.gate.execute(), self.stmt)

    def update(self):
        # type: () -> int
        """Execute the statement and return the number of rows changed."""
        with self._execution():
            return self.gate.execute_update()

    large_update = update

    def batch_update(self):
        # type: () -> List[int]
        """Execute the staged batch and return one update count per unit."""
        with self._execution():
            try:
                return self.gate.execute_batch()
            finally:
                self.batch.flushed()

    large_batch_update = batch_update

    def _generated_keys(self, extractor):
        # type: (Optional[Extractor]) -> Any
        with ResultCursor(self.stmt.get_generated_keys()) as cursor:
            return (extractor or _first_column_list)(cursor)

    def update_and_return_generated_keys(self, extractor=None):
        # type: (Optional[Extractor]) -> Tuple[int, Any]
        """Execute an update and read the keys the database generated.

        :param extractor: Called with a ResultCursor over the keys.  The
                          default returns a list of the first column.
        :returns: (update count, extracted keys)
        """
        with self._execution():
            count = self.gate.execute_update()
            return count, self._generated_keys(extractor)

    def batch_update_and_return_generated_keys(self, extractor=None):
        # type: (Optional[Extractor]) -> Tuple[List[int], Any]
        with self._execution():
            try:
                counts = self.gate.execute_batch()
            finally:
                self.batch.flushed()
            return counts, self._generated_keys(extractor)

    def insert(self, key_extractor=None):
        # type: (Optional[RowMapper]) -> Any
        """Execute an insert and return the generated id.

        :param key_extractor: Row mapper reading the id from a generated key
                              row.  Defaults to the first column.
        :returns: The id, or None if the database did not generate one.
        """
        mapper = key_extractor or first_column
        with self._execution():
            self.gate.execute_update()
            key = self._generated_keys(lambda cursor: cursor.first(mapper))
        return None if _is_default_id(key) else key

    def batch_insert(self, key_extractor=None):
        # type: (Optional[RowMapper]) -> List[Any]
        """Execute the staged batch of inserts and return the generated ids.

        An empty list is returned when no id was generated.
        """
        mapper = key_extractor or first_column
        with self._execution():
            try:
                self.gate.execute_batch()
            finally:
                self.batch.flushed()
            ids = self._generated_keys(lambda cursor: cursor.to_list(mapper))
        if all(_is_default_id(i) for i in ids):
            return []
        return ids

    # Single values

    def _single(self, target_type, unique):
        # type: (Optional[type], bool) -> Tuple[bool, Any]
        with self._execution():
            cursor = self._open()
            if unique:
                return cursor.unique_value(target_type)
            return cursor.single_value(target_type)

    def query_for_single_result(self, target_type=None, default=None):
        # type: (Optional[type], Any) -> Any
        """Return the first column of the first row, or DEFAULT if no row.

        A NULL column is returned as None, not as DEFAULT.
        """
        found, value = self._single(target_type, False)
        return value if found else default

    def query_for_single_non_null(self, target_type=None, default=None):
        # type: (Optional[type], Any) -> Any
        """Like query_for_single_result(), but DEFAULT also replaces NULL."""
        found, value = self._single(target_type, False)
        return value if found and value is not None else default

    def query_for_unique_result(self, target_type=None, default=None):
        # type: (Optional[type], Any) -> Any
        """Like query_for_single_result(), but a second row is an error.

        :raises DuplicateResultError: If the query returns more than one row.
        """
        found, value = self._single(target_type, True)
        return value if found else default

    def query_for_unique_non_null(self, target_type=None, default=None):
        # type: (Optional[type], Any) -> Any
        found, value = self._single(target_type, True)
        return value if found and value is not None else default

    def query_for_int(self, default=None):
        # type: (Optional[int]) -> Optional[int]
        return self.query_for_single_non_null(int, default)

    def query_for_float(self, default=None):
        # type: (Optional[float]) -> Optional[float]
        return self.query_for_single_non_null(float, default)

    def query_for_string(self, default=None):
        # type: (Optional[str]) -> Optional[str]
        return self.query_for_single_non_null(str, default)

    def query_for_boolean(self, default=None):
        # type: (Optional[bool]) -> Optional[bool]
        return self.query_for_single_non_null(bool, default)

    def query_for_decimal(self, default=None):
        # type: (Any) -> Any
        return self.query_for_single_non_null(decimal.Decimal, default)

    def query_for_date(self, default=None):
        # type: (Any) -> Any
        return self.query_for_single_non_null(Date, default)

    def query_for_time(self, default=None):
        # type: (Any) -> Any
        return self.query_for_single_non_null(Time, default)

    def query_for_timestamp(self, default=None):
        # type: (Any) -> Any
        return self.query_for_single_non_null(Timestamp, default)

    def query_for_bytes(self, default=None):
        # type: (Optional[bytes]) -> Optional[bytes]
        return self.query_for_single_non_null(bytes, default)

    # Rows

    def _with_cursor(self, func):
        # type: (Callable[[ResultCursor], Any]) -> Any
        with self._execution():
            cursor = self._open()
            with cursor:
                return func(cursor)

    def query(self, extractor=None):
        # type: (Optional[Extractor]) -> Any
        """Execute and return extractor(cursor).

        :param extractor: Called with the open ResultCursor, which is closed
                          when it returns.  Defaults to a list of dicts.
        """
        return self._with_cursor(extractor or to_dicts)

    def find_first(self, mapper=None, row_filter=None):
        # type: (Optional[RowMapper], Optional[RowFilter]) -> Any
        """Return the first row accepted by ROW_FILTER, mapped, or None."""
        mapper = _row_mapper(mapper)
        return self._with_cursor(lambda cursor: cursor.first(mapper, row_filter))

    def find_only_one(self, mapper=None):
        # type: (Optional[RowMapper]) -> Any
        """Return the only row, mapped, or None if there is no row.

        :raises DuplicateResultError: If there is more than one row.
        """
        mapper = _row_mapper(mapper)
        return self._with_cursor(lambda cursor: cursor.only_one(mapper))

    def list(self, mapper=None, row_filter=None, max_result=None):
        # type: (Optional[RowMapper], Optional[RowFilter], Optional[int]) -> List[Any]
        """Return the rows accepted by ROW_FILTER, mapped.

        :param mapper: Row mapper, or a type passed to mapper_for().
                       Defaults to a dict per row.
        :param row_filter: Predicate over the row; rows it rejects are skipped.
        :param max_result: Stop after this many rows.
        """
        self._check_arg(max_result is None or _is_count(max_result),
                        "'max_result' must be a non-negative int: %r" % (max_result,))
        mapper = _row_mapper(mapper)
        return self._with_cursor(lambda cursor: cursor.to_list(mapper, row_filter, max_result))

    def list_then_apply(self, mapper, func):
        # type: (Optional[RowMapper], Callable[[List[Any]], Any]) -> Any
        self._check_arg_not_none(func, 'func')
        return func(self.list(mapper))

    def exists(self):
        # type: () -> bool
        return self._with_cursor(ResultCursor.exists)

    def not_exists(self):
        # type: () -> bool
        return not self.exists()

    def if_exists(self, consumer):
        # type: (Callable[[Any], Any]) -> None
        """Pass the first row to CONSUMER if there is one."""
        self._check_arg_not_none(consumer, 'consumer')
        self._with_cursor(lambda cursor: cursor.if_exists(consumer))

    def if_exists_or_else(self, consumer, or_else):
        # type: (Callable[[Any], Any], Callable[[], Any]) -> None
        self._check_arg_not_none(consumer, 'consumer')
        self._check_arg_not_none(or_else, 'or_else')
        self._with_cursor(lambda cursor: cursor.if_exists(consumer, or_else))

    def count(self, row_filter=None):
        # type: (Optional[RowFilter]) -> int
        return self._with_cursor(lambda cursor: cursor.count(row_filter))

    def any_match(self, row_filter):
        # type: (RowFilter) -> bool
        self._check_arg_not_none(row_filter, 'row_filter')
        return self._with_cursor(lambda cursor: cursor.any_match(row_filter))

    def all_match(self, row_filter):
        # type: (RowFilter) -> bool
        self._check_arg_not_none(row_filter, 'row_filter')
        return self._with_cursor(lambda cursor: cursor.all_match(row_filter))

    def none_match(self, row_filter):
        # type: (RowFilter) -> bool
        return not self.any_match(row_filter)

    def for_each(self, consumer, row_filter=None):
        # type: (Callable[[Any], Any], Optional[RowFilter]) -> None
        """Pass every row accepted by ROW_FILTER to CONSUMER."""
        self._check_arg_not_none(consumer, 'consumer')
        self._with_cursor(lambda cursor: cursor.for_each(consumer, row_filter))

    # Lazy execution

    def _deferred(self, start):
        # type: (Callable[[], Tuple[Iterator[Any], Callable[[], None]]]) -> LazyRowStream
        """Build a stream that runs START on its first pull."""
        self._assert_not_closed()
        state = {'acquired': False}

        def opener():
            self._assert_not_closed()
            self.gate.acquire()
            state['acquired'] = True
            return start()

        def on_close():
            if state['acquired']:
                self._open_cursor = None
                self.gate.release()
            self._close_after_execution_if_allowed()

        return LazyRowStream(opener, on_close)

    def stream(self, mapper=None, row_filter=None):
        # type: (Optional[RowMapper], Optional[RowFilter]) -> LazyRowStream
        """Return a lazy stream of the rows accepted by ROW_FILTER, mapped.

        The statement is executed when the first row is pulled.  The cursor
        stays open until the stream is drained or closed.
        """
        mapper = _row_mapper(mapper)
        row_filter = row_filter or always_true

        def start():
            cursor = self._open()
            rows = (mapper(row) for row in cursor if row_filter(row))
            return rows, cursor.close

        return self._deferred(start)

    # Multiple results

    def iterate_results(self, extractor=None):
        # type: (Optional[Extractor]) -> MultiResultIterator
        """Execute and iterate over every result the statement reports.

        Items are UpdateCount objects and extractor(cursor) for each cursor.
        The query is released when the iterator is exhausted or closed.
        """
        self._assert_not_closed()
        self.gate.acquire()
        try:
            is_result_set = self.gate.execute()
        except BaseException as e:
            self.gate.release()
            if self._close_after_execution:
                self._close_after_error(e)
            raise
        return MultiResultIterator(self.stmt, is_result_set, extractor,
                                   on_close=self._finish_execution)

    def _query_resultsets(self, extractors):
        # type: (List[Optional[Extractor]]) -> Tuple[Any, ...]
        results = [None] * len(extractors)  # type: List[Any]
        with self._execution():
            results_iter = MultiResultIterator(self.stmt, self.gate.execute(),
                                               include_update_counts=False)
            for i, extractor in enumerate(extractors):
                if not results_iter.has_next():
                    break
                results_iter.extractor = extractor or to_dicts
                results[i] = next(results_iter)
        return tuple(results)

    def query_multi_resultsets(self, extractor=None):
        # type: (Optional[Extractor]) -> List[Any]
        """Return extractor(cursor) for every cursor, skipping update counts."""
        with self._execution():
            return [result for result in MultiResultIterator(
                self.stmt, self.gate.execute(), extractor, include_update_counts=False)]

    def query_2_resultsets(self, extractor1, extractor2):
        # type: (Optional[Extractor], Optional[Extractor]) -> Tuple[Any, Any]
        """Extract the first two cursors.  A missing cursor gives None."""
        return self._query_resultsets([extractor1, extractor2])  # type: ignore[return-value]

    def query_3_resultsets(self, extractor1, extractor2, extractor3):
        # type: (Optional[Extractor], Optional[Extractor], Optional[Extractor]) -> Tuple[Any, Any, Any]
        return self._query_resultsets([extractor1, extractor2, extractor3])  # type: ignore[return-value]

    def list_multi_resultsets(self, mapper=None, row_filter=None):
        # type: (Optional[RowMapper], Optional[RowFilter]) -> List[List[Any]]
        """Return one list of mapped rows per cursor."""
        mapper = _row_mapper(mapper)
        return self.query_multi_resultsets(
            lambda cursor: cursor.to_list(mapper, row_filter))

    def stream_multi_resultsets(self, mapper=None, row_filter=None):
        # type: (Optional[RowMapper], Optional[RowFilter]) -> LazyRowStream
        """Return a lazy stream yielding one list of mapped rows per cursor."""
        mapper = _row_mapper(mapper)

        def start():
            results_iter = MultiResultIterator(
                self.stmt, self.gate.execute(),
                lambda cursor: cursor.to_list(mapper, row_filter),
                include_update_counts=False)
            return results_iter, results_iter.close

        return self._deferred(start)

    # Asynchronous execution

    def async_call(self, action, executor=None):
        # type: (Callable[[PreparedQuery], Any], Optional[concurrent.futures.Executor]) -> concurrent.futures.Future
        """Run action(query) on EXECUTOR and return the Future of its result.

        The default executor is a thread pool shared by all queries.
        """
        self._assert_not_closed()
        self._check_arg_not_none(action, 'action')
        return (executor or _default_executor()).submit(action, self)

    def async_run(self, action, executor=None):
        # type: (Callable[[PreparedQuery], Any], Optional[concurrent.futures.Executor]) -> concurrent.futures.Future
        """Like async_call(), but the Future's result is None."""
        self._assert_not_closed()
        self._check_arg_not_none(action, 'action')

        def run(query):
            action(query)

        return (executor or _default_executor()).submit(run, self)
