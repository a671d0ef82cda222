"""
(C) Copyright 2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

import logging
import sqlite3

import pytest

try:
    from typing import Generator  # pylint: disable=unused-import
except ImportError:
    pass

_log = logging.getLogger("pyfluentdbtest")

SCHEMA = """
CREATE TABLE account (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    balance INTEGER DEFAULT 0
)
"""

ACCOUNTS = [('a', 10), ('b', 20)]


@pytest.fixture
def database():
    # type: () -> Generator[sqlite3.Connection, None, None]
    """An in-memory database holding the account table."""
    con = sqlite3.connect(':memory:')
    con.execute(SCHEMA)
    con.executemany("INSERT INTO account (name, balance) VALUES (?, ?)", ACCOUNTS)
    con.commit()
    _log.info("Created test database with %d accounts", len(ACCOUNTS))
    yield con
    con.close()
