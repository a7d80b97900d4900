from typing import Generic, Tuple, TypeVar

import trio

_LoadKey = TypeVar("_LoadKey")


class LoadCoalescer(Generic[_LoadKey]):
    """
    Single-flight bookkeeping for cache misses.

    The first task to miss on a key becomes the leader and performs the load;
    tasks missing on the same key meanwhile get the leader's event and wait.
    """

    def __init__(self) -> None:
        self._lock = trio.Lock()
        self._loading: dict[_LoadKey, trio.Event] = {}

    async def join_or_lead(self, key: _LoadKey) -> Tuple[trio.Event, bool]:
        """Returns (done_event, is_leader)."""
        async with self._lock:
            done = self._loading.get(key)
            if done is not None:
                return done, False
            done = trio.Event()
            self._loading[key] = done
            return done, True

    async def notify_done(self, key: _LoadKey) -> None:
        """Leader only: wake the followers of key and forget it."""
        async with self._lock:
            done = self._loading.pop(key, None)
        if done is not None:
            done.set()

    def loading(self, key: _LoadKey) -> bool:
        return key in self._loading
