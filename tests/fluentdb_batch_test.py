"""
(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

import pytest

from pyfluentdb import PreparedQuery, SQLType
from pyfluentdb.exception import ArgumentError, OperationalError

from .fakes import FakeStatement


class TestBatch(object):

    @pytest.mark.parametrize('count', [1, 3, 10])
    def test_units_execute_in_staging_order(self, count):
        seen = []
        stmt = FakeStatement('INSERT INTO t VALUES (?, ?)', on_unit=seen.append)
        query = PreparedQuery(stmt)
        for i in range(count):
            query.set_parameters(i, 'n%d' % i).add_batch()

        assert query.batch.is_batch
        counts = query.batch_update()

        assert counts == [1] * count
        assert seen == [(i, 'n%d' % i) for i in range(count)]
        assert stmt.batch == []
        assert query.closed

    def test_batch_parameters_auto_sequence(self):
        stmt = FakeStatement()
        query = PreparedQuery(stmt).close_after_execution(False)
        query.add_batch_parameters([(1, 'a'), [2, 'b']])
        query.batch_update()
        assert stmt.executed_units == [(1, 'a'), (2, 'b')]
        assert not query.batch.is_batch
        query.close()

    def test_batch_parameters_scalar(self):
        stmt = FakeStatement()
        query = PreparedQuery(stmt)
        query.add_batch_parameters(iter(['a', 'b', 'c']), sql_type=SQLType.VARCHAR)
        assert stmt.batch == [('a',), ('b',), ('c',)]
        assert query.batch.size == 3

    def test_shape_mismatch_closes_query(self):
        stmt = FakeStatement()
        query = PreparedQuery(stmt)
        with pytest.raises(ArgumentError) as exc:
            query.add_batch_parameters([(1, 'a'), 'b'])
        assert 'element 1' in str(exc.value)
        assert query.closed
        assert stmt.closed

    def test_declared_shape_checked_on_first_element(self):
        query = PreparedQuery(FakeStatement())
        with pytest.raises(ArgumentError):
            query.add_batch_parameters([(1, 2)], shape='scalar')
        assert query.closed

    def test_unknown_shape(self):
        query = PreparedQuery(FakeStatement())
        with pytest.raises(ArgumentError):
            query.add_batch_parameters([1], shape='struct')
        assert query.closed

    def test_none_batch_parameters(self):
        query = PreparedQuery(FakeStatement())
        with pytest.raises(ArgumentError):
            query.add_batch_parameters(None)
        assert query.closed

    def test_per_element_setter(self):
        stmt = FakeStatement()
        query = PreparedQuery(stmt)
        query.add_batch_parameters([{'id': 1}, {'id': 2}],
                                   setter=lambda q, item: q.set_parameter(1, item['id']))
        assert stmt.batch == [(1,), (2,)]

    def test_batch_cleared_after_failed_execution(self):
        stmt = FakeStatement(execute_error=OperationalError("disk full"))
        query = PreparedQuery(stmt)
        query.add_batch_parameters([1, 2])
        with pytest.raises(OperationalError):
            query.batch_update()
        assert stmt.batch == []
        assert query.closed

    def test_clear_batch(self):
        stmt = FakeStatement()
        query = PreparedQuery(stmt)
        query.add_batch_parameters([1, 2]).clear_batch()
        assert stmt.batch == []
        assert not query.batch.is_batch

    def test_batch_insert_returns_ids(self):
        stmt = FakeStatement(generated_keys=[11, 12])
        ids = PreparedQuery(stmt).add_batch_parameters(['a', 'b']).batch_insert()
        assert ids == [11, 12]

    def test_batch_insert_with_default_ids_is_empty(self):
        stmt = FakeStatement(generated_keys=[0, None, ''])
        assert PreparedQuery(stmt).add_batch_parameters(['a', 'b', 'c']).batch_insert() == []

    def test_batch_update_and_return_generated_keys(self):
        stmt = FakeStatement(generated_keys=[5, 6])
        counts, keys = PreparedQuery(stmt).add_batch_parameters([1, 2]) \
            .batch_update_and_return_generated_keys()
        assert counts == [1, 1]
        assert keys == [5, 6]
