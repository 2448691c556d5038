"""
Reader/writer lock for the in-memory moderation stores.

Readers share the lock; a writer holds it alone. Waiting writers block new
readers so a steady stream of message checks cannot starve an admin edit.
"""

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """
    Writer-preferring shared/exclusive lock built on :class:`threading.Condition`.

    Attributes:
        readers (int): Number of threads currently holding the shared lock.
        writer_active (bool): Whether a thread currently holds the exclusive lock.
        writers_waiting (int): Number of threads queued for the exclusive lock.
    """

    def __init__(self) -> None:
        self.condition = threading.Condition(threading.Lock())
        self.readers: int = 0
        self.writer_active: bool = False
        self.writers_waiting: int = 0

    def acquire_read(self) -> None:
        with self.condition:
            while self.writer_active or self.writers_waiting:
                self.condition.wait()
            self.readers += 1

    def release_read(self) -> None:
        with self.condition:
            self.readers -= 1
            if self.readers == 0:
                self.condition.notify_all()

    def acquire_write(self) -> None:
        with self.condition:
            self.writers_waiting += 1
            try:
                while self.writer_active or self.readers:
                    self.condition.wait()
            finally:
                self.writers_waiting -= 1
            self.writer_active = True

    def release_write(self) -> None:
        with self.condition:
            self.writer_active = False
            self.condition.notify_all()

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        """Hold the shared lock for the duration of the ``with`` block."""
        self.acquire_read()
        try:
            yield
        finally:
            self.release_read()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        """Hold the exclusive lock for the duration of the ``with`` block."""
        self.acquire_write()
        try:
            yield
        finally:
            self.release_write()
