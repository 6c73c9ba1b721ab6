from datetime import date
from typing import Iterable, Iterator, List


class DaySet:
    """Insertion-ordered set of calendar days kept over a plain list.

    Storage is list-shaped (``DATE[]`` column); membership is by day only.
    """

    def __init__(self, days: Iterable[date] | None = None):
        self._days: List[date] = []
        self._seen: set[date] = set()
        for d in days or []:
            self.add(d)

    def add(self, day: date) -> bool:
        if day in self._seen:
            return False
        self._seen.add(day)
        self._days.append(day)
        return True

    def discard(self, day: date) -> bool:
        if day not in self._seen:
            return False
        self._seen.remove(day)
        self._days.remove(day)
        return True

    def __contains__(self, day: object) -> bool:
        return day in self._seen

    def __iter__(self) -> Iterator[date]:
        return iter(self._days)

    def __len__(self) -> int:
        return len(self._days)

    def as_list(self) -> List[date]:
        return list(self._days)
