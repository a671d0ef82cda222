"""Lazy row streams.

(C) Copyright 2013-2025 Dassault Systemes SE.  All Rights Reserved.

This software is licensed under a BSD 3-Clause License.
See the LICENSE file provided with this software.
"""

__all__ = ['LazyRowStream']

import logging

try:
    from typing import Any, Callable, Iterator, List, Optional, Tuple  # pylint: disable=unused-import
    Opener = Callable[[], Tuple[Iterator[Any], Callable[[], None]]]
except ImportError:
    pass

from .exception import IllegalStateError, add_suppressed

_log = logging.getLogger(__name__)


class LazyRowStream(object):
    """A forward-only, single-use sequence whose execution is deferred.

    Nothing is executed until the first item is pulled.  The opener then
    returns an iterator over the items and a release function.  The release
    function and on_close run exactly once, when the stream drains, when it
    is closed, or when pulling an item raises.  Closing before the first
    pull means the opener is never called.
    """

    def __init__(self, opener, on_close=None):
        # type: (Opener, Optional[Callable[[], None]]) -> None
        self._opener = opener
        self._on_close = on_close
        self._items = None  # type: Optional[Iterator[Any]]
        self._release = None  # type: Optional[Callable[[], None]]
        self.started = False
        self.exhausted = False
        self.closed = False

    def __iter__(self):
        return self

    def __next__(self):
        # type: () -> Any
        if self.exhausted:
            raise StopIteration
        if self.closed:
            raise IllegalStateError("stream is closed")
        try:
            if not self.started:
                self.started = True
                self._items, self._release = self._opener()
            return next(self._items)  # type: ignore[arg-type]
        except StopIteration:
            self.exhausted = True
            self.close()
            raise
        except BaseException as e:
            try:
                self.close()
            except Exception as close_error:  # pylint: disable=broad-except
                _log.error("Failed to close stream after error", exc_info=True)
                add_suppressed(e, close_error)
            raise

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        # type: () -> None
        """Release the stream.  Closing more than once does nothing."""
        if self.closed:
            return
        self.closed = True
        release, self._release = self._release, None
        self._items = None
        try:
            if release is not None:
                release()
        finally:
            if self._on_close is not None:
                self._on_close()

    def to_list(self):
        # type: () -> List[Any]
        """Drain the stream into a list."""
        try:
            return list(self)
        finally:
            self.close()

    def first(self):
        # type: () -> Any
        """Return the first item, or None, and close the stream."""
        try:
            return next(self, None)
        finally:
            self.close()
