"""
(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

import pytest

try:
    from typing import Any, Mapping, Optional  # pylint: disable=unused-import
except ImportError:
    pass

import pyfluentdb


class FluentBase(object):
    """Base for tests running queries against the sqlite test database."""

    con = None  # type: Any

    @pytest.fixture(autouse=True)
    def _setup(self, database):
        self.con = database

    def _query(self, sql, options=None, return_generated_keys=False):
        # type: (str, Optional[Mapping[str, Any]], bool) -> pyfluentdb.PreparedQuery
        return pyfluentdb.prepare_query(self.con, sql, options=options,
                                        return_generated_keys=return_generated_keys)

    def _named(self, sql, options=None, return_generated_keys=False):
        # type: (str, Optional[Mapping[str, Any]], bool) -> pyfluentdb.NamedQuery
        return pyfluentdb.prepare_named_query(self.con, sql, options=options,
                                              return_generated_keys=return_generated_keys)
