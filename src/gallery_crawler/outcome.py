"""Outcomes emitted by the crawler, one per step."""

from dataclasses import dataclass

PROGRESS_IDLE = 1.0
PROGRESS_PAGE = 10.0
PROGRESS_SUB_PAGE = 20.0
PROGRESS_DONE = 30.0


@dataclass(frozen=True)
class Progress:
    """A stage finished; ``percent`` is a coarse milestone, not byte progress."""

    percent: float

    terminal = False


@dataclass(frozen=True)
class Completed:
    """An image was downloaded."""

    content: bytes
    url: str

    terminal = True

    def __repr__(self) -> str:
        return f"Completed(url={self.url!r}, size={len(self.content)})"


@dataclass(frozen=True)
class Failed:
    """The current cycle was aborted."""

    message: str

    terminal = True


FetchOutcome = Progress | Completed | Failed
