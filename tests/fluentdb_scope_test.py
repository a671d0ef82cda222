"""
(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

import concurrent.futures
import logging

import pytest

from pyfluentdb import PreparedQuery, FetchDirection, prepare_named_query, prepare_query
from pyfluentdb.exception import (ArgumentError, CloseError, IllegalStateError,
                                  OperationalError)

from .fakes import FakeConnection, FakeStatement, StickyStatement, rs

ROWS = rs(('n',), [(1,), (2,)])


class TestClose(object):

    def test_close_is_idempotent(self):
        stmt = FakeStatement()
        query = PreparedQuery(stmt)
        query.close()
        query.close()
        assert query.closed
        assert stmt.close_count == 1

    def test_closed_after_execution_by_default(self):
        stmt = FakeStatement(results=[ROWS])
        query = PreparedQuery(stmt)
        assert query.is_close_after_execution()
        query.list()
        assert query.closed
        with pytest.raises(IllegalStateError):
            query.list()
        with pytest.raises(IllegalStateError):
            query.set_parameter(1, 'a')

    def test_reuse_until_closed(self):
        stmt = FakeStatement(results=[ROWS])
        query = PreparedQuery(stmt).close_after_execution(False)
        assert query.set_parameter(1, 'x').count() == 2
        assert query.set_parameter(1, 'y').count() == 2
        assert stmt.executions == [('x',), ('y',)]
        assert not query.closed
        query.close()
        assert stmt.closed

    def test_close_after_execution_on_closed_query(self):
        query = PreparedQuery(FakeStatement())
        query.close()
        with pytest.raises(IllegalStateError):
            query.close_after_execution(False)

    def test_context_manager(self):
        stmt = FakeStatement(results=[ROWS])
        with PreparedQuery(stmt).close_after_execution(False) as query:
            query.exists()
            assert not query.closed
        assert query.closed
        assert stmt.closed

    def test_handlers_run_in_registration_order(self):
        calls = []
        query = PreparedQuery(FakeStatement())
        query.on_close(lambda: calls.append(1)).on_close(lambda: calls.append(2))
        query.close()
        query.close()
        assert calls == [1, 2]

    def test_failed_handler_does_not_stop_the_chain(self):
        calls = []

        def failing():
            calls.append('failing')
            raise OperationalError('handler failed')

        query = PreparedQuery(FakeStatement())
        query.on_close(failing).on_close(lambda: calls.append('next'))
        with pytest.raises(OperationalError):
            query.close()
        assert calls == ['failing', 'next']
        assert query.closed
        query.close()

    def test_several_failures_are_collected(self):
        stmt = FakeStatement(close_error=OperationalError('stmt'))
        query = PreparedQuery(stmt)
        query.on_close(lambda: 1 / 0)
        with pytest.raises(CloseError) as exc:
            query.close()
        assert [type(e) for e in exc.value.errors] == [OperationalError, ZeroDivisionError]

    def test_none_handler(self):
        query = PreparedQuery(FakeStatement())
        with pytest.raises(ArgumentError):
            query.on_close(None)
        assert query.closed

    def test_close_failure_is_suppressed_by_execution_error(self, caplog):
        stmt = FakeStatement(execute_error=OperationalError('execute'),
                             close_error=RuntimeError('close'))
        query = PreparedQuery(stmt)
        with caplog.at_level(logging.ERROR, logger='pyfluentdb.query'):
            with pytest.raises(OperationalError) as exc:
                query.update()
        assert [str(e) for e in exc.value.suppressed] == ['close']
        assert any(r.levelno == logging.ERROR for r in caplog.records)
        assert query.closed

    def test_statement_none(self):
        with pytest.raises(ArgumentError):
            PreparedQuery(None)


class TestStatementConfig(object):

    def test_properties_restored_on_close(self):
        stmt = FakeStatement(results=[ROWS])
        stmt.fetch_size = 10
        query = PreparedQuery(stmt).set_fetch_size(100).set_query_timeout(5) \
            .set_max_field_size(64).set_fetch_direction_to_forward()
        assert (stmt.fetch_size, stmt.query_timeout, stmt.max_field_size) == (100, 5, 64)
        query.list()
        assert stmt.fetch_size == 10
        assert stmt.query_timeout == 0
        assert stmt.max_field_size == 0
        assert stmt.fetch_direction == FetchDirection.UNKNOWN

    def test_first_value_is_the_one_restored(self):
        stmt = FakeStatement()
        query = PreparedQuery(stmt).set_fetch_size(5).set_fetch_size(6)
        query.close()
        assert stmt.fetch_size == 0

    def test_failed_restore_is_logged(self, caplog):
        stmt = StickyStatement()
        query = PreparedQuery(stmt).set_fetch_size(100)
        with caplog.at_level(logging.WARNING, logger='pyfluentdb.query'):
            query.close()
        assert stmt.closed
        assert [r.levelno for r in caplog.records] == [logging.WARNING]

    def test_options_configure_statement(self):
        stmt = FakeStatement()
        PreparedQuery(stmt, {'fetch_size': '50', 'query_timeout': 3, 'max_rows': 9})
        assert (stmt.fetch_size, stmt.query_timeout, stmt.max_rows) == (50, 3, 9)

    def test_max_rows(self):
        stmt = FakeStatement()
        PreparedQuery(stmt).set_max_rows(3).set_large_max_rows(4)
        assert stmt.max_rows == 4

    @pytest.mark.parametrize('value', [-1, 'ten', None, True])
    def test_invalid_config_value(self, value):
        query = PreparedQuery(FakeStatement())
        with pytest.raises(ArgumentError):
            query.set_fetch_size(value)
        assert query.closed

    def test_invalid_fetch_direction(self):
        query = PreparedQuery(FakeStatement())
        with pytest.raises(ArgumentError):
            query.set_fetch_direction(7)
        assert query.closed

    def test_config_stmt(self):
        stmt = FakeStatement()
        PreparedQuery(stmt).config_stmt(lambda s: setattr(s, 'max_rows', 7))
        assert stmt.max_rows == 7


class TestAsync(object):

    def test_async_call(self):
        stmt = FakeStatement(results=[ROWS])
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            future = PreparedQuery(stmt).async_call(lambda q: q.count(), executor)
            assert future.result(timeout=10) == 2

    def test_async_run_on_default_executor(self):
        stmt = FakeStatement(results=[3])
        query = PreparedQuery(stmt)
        assert query.async_run(lambda q: q.update()).result(timeout=10) is None
        assert stmt.executions == [()]
        assert query.closed

    def test_async_on_closed_query(self):
        query = PreparedQuery(FakeStatement())
        query.close()
        with pytest.raises(IllegalStateError):
            query.async_call(lambda q: None)


class TestOptions(object):

    def test_invalid_options_close_statement(self):
        stmt = FakeStatement()
        with pytest.raises(ArgumentError):
            PreparedQuery(stmt, {'fetch_size': 'lots'})
        assert stmt.closed

    def test_invalid_options_leave_no_cursor_open(self):
        con = FakeConnection()
        with pytest.raises(ArgumentError):
            prepare_query(con, "SELECT 1", options={'bogus': 1})
        with pytest.raises(ArgumentError):
            prepare_named_query(con, "SELECT :a", options={'fetch_size': -1})
        assert all(c.closed for c in con.cursors)

    def test_prepare_query_opens_one_cursor(self):
        con = FakeConnection()
        query = prepare_query(con, "SELECT 1")
        assert len(con.cursors) == 1
        query.close()
        assert con.cursors[0].closed
