"""Batch staging.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

__all__ = ['BatchAccumulator', 'SHAPE_AUTO', 'SHAPE_SCALAR', 'SHAPE_SEQUENCE']

try:
    from typing import Any, Callable, Iterable, Optional  # pylint: disable=unused-import
except ImportError:
    pass

from .exception import ArgumentError

SHAPE_AUTO = 'auto'
SHAPE_SCALAR = 'scalar'
SHAPE_SEQUENCE = 'sequence'

_SHAPES = (SHAPE_AUTO, SHAPE_SCALAR, SHAPE_SEQUENCE)


def _shape_of(item):
    # type: (Any) -> str
    if isinstance(item, (list, tuple)):
        return SHAPE_SEQUENCE
    return SHAPE_SCALAR


class BatchAccumulator(object):
    """Stages parameter tuples on a statement until the batch is flushed.

    Elements given to add_all() are bound either by a caller supplied setter
    or by their shape: a scalar element fills parameter 1, a list or tuple
    element fills parameters 1..n.  With shape 'auto' the first element
    decides, and every later element must have the same shape.
    """

    def __init__(self, stmt, binder):
        self.stmt = stmt
        self.binder = binder
        self.is_batch = False
        self.size = 0

    def add(self):
        # type: () -> None
        """Stage the currently bound parameters as one batch unit."""
        self.stmt.add_batch()
        self.is_batch = True
        self.size += 1

    def add_all(self, items, setter=None, target=None, shape=SHAPE_AUTO, sql_type=None):
        # type: (Iterable[Any], Optional[Callable[[Any, Any], None]], Any, str, Optional[int]) -> int
        """Bind and stage every element of ITEMS.

        :param items: A collection or iterator of elements.
        :param setter: Called as setter(target, element) to bind an element.
        :param target: First argument passed to SETTER.
        :param shape: 'auto', 'scalar' or 'sequence'.
        :param sql_type: Declared type for scalar elements.
        :returns: The number of units staged.
        """
        if items is None:
            raise ArgumentError("'batch_parameters' can't be None")
        if shape not in _SHAPES:
            raise ArgumentError('Unknown batch element shape "%s"' % shape)

        staged = 0
        if setter is not None:
            for item in items:
                setter(target, item)
                self.add()
                staged += 1
            return staged

        expected = None if shape == SHAPE_AUTO else shape
        for item in items:
            actual = _shape_of(item)
            if expected is None:
                expected = actual
            elif actual != expected:
                raise ArgumentError('batch element %d is a %s but the batch holds %s elements'
                                    % (staged, actual, expected))
            if expected == SHAPE_SEQUENCE:
                self.binder.bind_all(1, item)
            else:
                self.binder.bind(1, item, sql_type)
            self.add()
            staged += 1
        return staged

    def reset(self):
        # type: () -> None
        """Drop the staged units without executing them."""
        self.stmt.clear_batch()
        self.is_batch = False
        self.size = 0

    def flushed(self):
        # type: () -> None
        """Note that the statement executed and dropped the staged units."""
        self.is_batch = False
        self.size = 0
