from __future__ import annotations

import itertools
import uuid
from typing import Callable

IdGenerator = Callable[[], str]


def uuid_ids() -> str:
    return str(uuid.uuid4())


class CounterIds:
    """Deterministic id source: region-1, region-2, ...

    Ids are never reused, even after the region that held one is deleted.
    """

    def __init__(self, prefix: str = "region-", start: int = 1) -> None:
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"
