import contextlib
import threading
from typing import Any, Dict, Iterator, List


class KeyedLock:
    """One mutex per key; work on different keys never contends.

    An entry lives only while some thread holds or waits on its key.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # key -> [lock, holders + waiters]
        self._locks: Dict[Any, List[Any]] = {}

    @contextlib.contextmanager
    def hold(self, key: Any) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
