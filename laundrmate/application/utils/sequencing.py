from __future__ import annotations


class RequestSequencer:
    """
    Hands out increasing tokens for fetches issued by one view.

    Only the most recent token is current, and nothing is current once the
    view is closed, so late or abandoned responses can be dropped.
    """

    def __init__(self) -> None:
        self._latest = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return not self._closed and token == self._latest

    def invalidate(self) -> None:
        self._latest += 1

    def close(self) -> None:
        self._closed = True
