"""
(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

import datetime

import pytest

from pyfluentdb.config import QueryOptions, strToBool, DEFAULT_MAX_SQL_LOG_LENGTH
from pyfluentdb.exception import ArgumentError


class TestQueryOptions(object):

    def test_defaults(self):
        opts = QueryOptions()
        assert opts.close_after_execution is True
        assert opts.fetch_size == 0
        assert opts.query_timeout == 0
        assert opts.max_rows == 0
        assert opts.sql_log is False
        assert opts.sql_perf_log_threshold_ms == -1
        assert opts.max_sql_log_length == DEFAULT_MAX_SQL_LOG_LENGTH
        assert opts.timezone is None
        assert opts.naive_timestamps is False
        assert opts.paramstyle is None

    def test_keys_ignore_case(self):
        opts = QueryOptions({'Close_After_Execution': 'FALSE', 'FETCH_SIZE': '20'})
        assert opts.close_after_execution is False
        assert opts.fetch_size == 20

    def test_timezone(self):
        opts = QueryOptions({'timezone': 'UTC'})
        assert datetime.datetime(2024, 1, 1, tzinfo=opts.timezone).utcoffset() == datetime.timedelta(0)

    def test_non_positive_log_length_uses_default(self):
        assert QueryOptions({'max_sql_log_length': 0}).max_sql_log_length == DEFAULT_MAX_SQL_LOG_LENGTH

    @pytest.mark.parametrize('options', [
        {'unknown': 1},
        {'fetch_size': 'many'},
        {'fetch_size': -1},
        {'max_rows': True},
        {'sql_log': 'maybe'},
        {'timezone': 'Not/A_Zone'},
        {'paramstyle': 'named'},
    ])
    def test_invalid_options(self, options):
        with pytest.raises(ArgumentError):
            QueryOptions(options)

    def test_str_to_bool(self):
        assert strToBool('True') is True
        assert strToBool('false') is False
        assert strToBool(True) is True
        with pytest.raises(ArgumentError):
            strToBool(1)
