"""Per-stage work queues of not-yet-visited URLs."""

import random
from collections.abc import Iterable, Iterator

from .errors import QueueExhausted


class WorkQueue:
    """URL stack: the last inserted URL is consumed first.

    Filled in shuffled order so consecutive runs do not scrape sequentially.
    A queue may only be refilled once it is empty.
    """

    def __init__(self, name: str):
        self.name = name
        self._items: list[str] = []

    def refill(self, urls: Iterable[str], rng: random.Random | None = None) -> int:
        """Store ``urls`` in shuffled order. Returns the new size."""
        if self._items:
            raise ValueError(f"{self.name} still holds {len(self._items)} URLs")

        items = list(urls)
        (rng or random).shuffle(items)
        self._items = items
        return len(items)

    def peek(self) -> str:
        """Return the URL that ``pop`` would return, without removing it."""
        if not self._items:
            raise QueueExhausted(self.name)
        return self._items[-1]

    def pop(self) -> str:
        if not self._items:
            raise QueueExhausted(self.name)
        return self._items.pop()

    def snapshot(self) -> tuple[str, ...]:
        """Immutable copy of the current contents, bottom first."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"WorkQueue({self.name!r}, size={len(self._items)})"
