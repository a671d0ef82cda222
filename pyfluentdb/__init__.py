"""A fluent query API over PEP 249 prepared statements.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

__version__ = '1.0.0'

from .connection import *   # pylint: disable=wildcard-import
from .datatype import *     # pylint: disable=wildcard-import
from .exception import *    # pylint: disable=wildcard-import, redefined-builtin
from .query import *        # pylint: disable=wildcard-import
from .named import *        # pylint: disable=wildcard-import
from .cursor import *       # pylint: disable=wildcard-import
from .stream import *       # pylint: disable=wildcard-import
from .multiresult import *  # pylint: disable=wildcard-import
from .statement import *    # pylint: disable=wildcard-import
from .result_set import *   # pylint: disable=wildcard-import
from .config import QueryOptions
from . import rows
