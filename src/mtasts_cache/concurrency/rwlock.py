"""Read-write lock: multiple concurrent readers OR one exclusive writer.

Implementation: threading.Condition with reader count tracking.
Writer preference: once a writer is waiting, new readers block.

Usage:
    lock = ReadWriteLock()

    with lock.read():
        plist = self._list          # every delivery attempt

    with lock.write():
        self._list = new_list       # periodic preload list swap

The preload-backed store reads its active list once per lookup and
replaces it a few times a day, so readers must not serialise on each
other, and the rare writer must not starve behind them.
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """Read-write lock with writer preference.

    Once a writer is waiting, new readers block until it finishes.
    Writes always make progress under a steady read load.
    """

    def __init__(self) -> None:
        self._readers: int = 0
        self._writers_waiting: int = 0
        self._writer_active: bool = False
        self._cond = threading.Condition(threading.Lock())

    @property
    def readers(self) -> int:
        """Number of threads currently holding the read lock."""
        with self._cond:
            return self._readers

    @contextmanager
    def read(self) -> Iterator[None]:
        """Acquire read lock. Blocks if a writer is active or waiting."""
        with self._cond:
            while self._writer_active or self._writers_waiting > 0:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        """Acquire write lock. Blocks while readers or another writer hold it."""
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer_active or self._readers > 0:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer_active = True
        try:
            yield
        finally:
            with self._cond:
                self._writer_active = False
                self._cond.notify_all()
