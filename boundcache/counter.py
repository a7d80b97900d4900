"""
Thread-safe integer counter.

CPython has no user-level compare-and-swap, so the atomic cell is a plain int
guarded by a threading.Lock that is only held for the read-modify-write itself.
"""

import threading


class Counter:
    def __init__(self, initial: int = 0) -> None:
        self._value = initial
        self._lock = threading.Lock()

    def increment_and_get(self) -> int:
        """Adds one and returns the new value. Thread-safe."""
        with self._lock:
            self._value += 1
            return self._value

    def get_and_increment(self) -> int:
        """Adds one and returns the value seen before the increment."""
        with self._lock:
            previous = self._value
            self._value += 1
            return previous

    def add_and_get(self, delta: int) -> int:
        with self._lock:
            self._value += delta
            return self._value

    def compare_and_set(self, expected: int, new: int) -> bool:
        """
        Sets the value to new only if it currently equals expected.
        Returns whether the swap happened.
        """
        with self._lock:
            if self._value != expected:
                return False
            self._value = new
            return True

    def reset(self) -> int:
        """Sets the value back to zero and returns what it was."""
        with self._lock:
            previous = self._value
            self._value = 0
            return previous

    def get(self) -> int:
        # a single attribute read; may race with an in-flight increment
        return self._value

    def __int__(self) -> int:
        return self.get()

    def __repr__(self) -> str:
        return f"Counter({self.get()})"
