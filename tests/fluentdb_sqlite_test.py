"""
(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

import pytest

from pyfluentdb import UpdateCount, driver_paramstyle
from pyfluentdb.exception import IllegalStateError, NotSupportedError
from pyfluentdb.rows import column

from . import fluentdb_base, labelled


class TestSqlite(fluentdb_base.FluentBase):

    def test_list_of_row_maps(self):
        query = self._query("SELECT id, name FROM account WHERE name = ? OR name = ? ORDER BY id")
        rows = query.set_string(1, 'a').set_string(2, 'b').list()
        assert rows == labelled([(1, 'a'), (2, 'b')])
        assert query.closed

    def test_reuse_without_auto_close(self):
        query = self._query("SELECT balance FROM account WHERE name = ?") \
            .close_after_execution(False)
        assert query.set_parameter(1, 'a').query_for_int() == 10
        assert not query.closed
        assert query.set_parameter(1, 'b').query_for_int() == 20
        assert not query.closed
        query.close()
        assert query.closed
        with pytest.raises(IllegalStateError):
            query.set_parameter(1, 'c')

    def test_options_disable_auto_close(self):
        with self._query("SELECT COUNT(*) FROM account",
                         options={'close_after_execution': False}) as query:
            assert query.query_for_int() == 2
            assert query.query_for_int() == 2
        assert query.closed

    def test_insert_returns_generated_id(self):
        new_id = self._query("INSERT INTO account (name) VALUES (?)",
                             return_generated_keys=True).set_parameter(1, 'c').insert()
        assert new_id == 3
        assert self._query("SELECT name FROM account WHERE id = ?") \
            .set_parameter(1, new_id).query_for_string() == 'c'

    def test_batch_insert(self):
        ids = self._query("INSERT INTO account (name, balance) VALUES (?, ?)",
                          return_generated_keys=True) \
            .add_batch_parameters([('c', 1), ('d', 2)]).batch_insert()
        assert ids == [3, 4]
        assert self._query("SELECT COUNT(*) FROM account").query_for_int() == 4

    def test_update(self):
        count = self._query("UPDATE account SET balance = balance + ?") \
            .set_parameter(1, 5).update()
        assert count == 2
        total = self._query("SELECT SUM(balance) FROM account").query_for_int()
        assert total == 40

    def test_update_and_return_generated_keys(self):
        count, keys = self._query("INSERT INTO account (name) VALUES (?)",
                                  return_generated_keys=True) \
            .set_parameter(1, 'z').update_and_return_generated_keys()
        assert (count, keys) == (1, [3])

    def test_generated_keys_need_request(self):
        query = self._query("INSERT INTO account (name) VALUES (?)").set_parameter(1, 'z')
        with pytest.raises(NotSupportedError):
            query.insert()
        assert query.closed

    def test_stream(self):
        with self._query("SELECT name FROM account ORDER BY id").stream(str) as names:
            assert list(names) == ['a', 'b']

    def test_named_query(self):
        query = self._named("SELECT name FROM account WHERE balance > :low AND balance < :high")
        assert query.set_named_parameters({'low': 5, 'high': 15}).list(column('name')) == ['a']

    def test_named_query_paramstyle(self):
        assert driver_paramstyle(self.con) == 'qmark'
        query = self._named("SELECT name FROM account WHERE id = #{id}",
                            options={'paramstyle': 'qmark'})
        assert query.parsed_sql.parameterized_sql == "SELECT name FROM account WHERE id = ?"
        assert query.set_named('id', 2).query_for_string() == 'b'

    def test_iterate_results(self):
        results = list(self._query("SELECT id FROM account ORDER BY id").iterate_results())
        assert results == [[{'id': 1}, {'id': 2}]]

    def test_iterate_update_count(self):
        results = list(self._query("DELETE FROM account WHERE name = ?")
                       .set_parameter(1, 'a').iterate_results())
        assert results == [UpdateCount(1)]

    def test_fetch_size_and_max_rows(self):
        query = self._query("SELECT id FROM account ORDER BY id",
                            options={'fetch_size': 1, 'max_rows': 1})
        assert query.list(column('id')) == [1]

    def test_find_only_one(self):
        row = self._query("SELECT id, name, balance FROM account WHERE id = ?") \
            .set_parameter(1, 2).find_only_one()
        assert row == {'id': 2, 'name': 'b', 'balance': 20}
