from dataclasses import dataclass
from typing import Set


@dataclass(frozen=True)
class SessionContext:
    """Credential of the current identity session, passed into every operation."""
    access_token: str


class SingleFlight:
    """Tracks which sessions have a submit outstanding."""

    def __init__(self):
        self._active: Set[str] = set()

    def acquire(self, key: str) -> bool:
        if key in self._active:
            return False
        self._active.add(key)
        return True

    def release(self, key: str):
        self._active.discard(key)

    def busy(self, key: str) -> bool:
        return key in self._active
