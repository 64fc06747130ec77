"""Per-requester generation tokens for discarding stale responses."""

import itertools
from typing import Hashable


class RequestGenerationTracker:
    """Tracks the latest request issued by each requester.

    A caller takes a token with :meth:`begin` before awaiting slow I/O and
    checks :meth:`is_current` afterwards; if the same requester started a
    newer request in between, the older response is stale and must not be
    shown. Scoped to the owning service instance, never module level.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: dict[Hashable, int] = {}

    def begin(self, requester: Hashable) -> int:
        token = next(self._counter)
        self._latest[requester] = token
        return token

    def is_current(self, requester: Hashable, token: int) -> bool:
        return self._latest.get(requester) == token

    def finish(self, requester: Hashable, token: int) -> None:
        """Forget the requester once its current request completes."""
        if self._latest.get(requester) == token:
            del self._latest[requester]
