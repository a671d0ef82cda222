"""
(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

import logging

_log = logging.getLogger("pyfluentdbtest")


def labelled(rows, labels=('id', 'name')):
    """Return ROWS as dicts keyed by LABELS."""
    return [dict(zip(labels, row)) for row in rows]
