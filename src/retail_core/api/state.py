"""Per-slice fetch status with stale-result protection.

Each report slice (e.g. "mtd", "last_year") has a status, its last good
data and an error message. Starting a query hands out a token; only the
token of the latest query for a slice may write a result back. A slow
response to an older filter selection is dropped instead of overwriting
the newer one.
"""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

IDLE = "idle"
LOADING = "loading"
SUCCEEDED = "succeeded"
FAILED = "failed"


@dataclass(frozen=True)
class QueryToken:
    """Handle for one in-flight query of a slice."""

    slice: str
    serial: int


@dataclass
class SliceState:
    """Status of one slice.

    Attributes:
        status: "idle", "loading", "succeeded" or "failed".
        data: Last successfully loaded rows.
        error: Message of the last failure, None after a success.
        serial: Serial of the query allowed to write back.
    """

    status: str = IDLE
    data: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None
    serial: int = 0


class QueryState:
    """Tracks fetch status for named slices."""

    def __init__(self) -> None:
        self._slices: dict[str, SliceState] = {}
        self._serials = itertools.count(1)
        self._lock = threading.Lock()

    def _slice(self, name: str) -> SliceState:
        return self._slices.setdefault(name, SliceState())

    def get(self, name: str) -> SliceState:
        """Current state of a slice (idle if never queried)."""
        with self._lock:
            return self._slice(name)

    def begin(self, name: str) -> QueryToken:
        """Start a query, superseding any in-flight query of the same slice."""
        with self._lock:
            state = self._slice(name)
            state.serial = next(self._serials)
            state.status = LOADING
            return QueryToken(name, state.serial)

    def cancel(self, name: str) -> None:
        """Drop any in-flight query of a slice without starting a new one."""
        with self._lock:
            state = self._slice(name)
            state.serial = next(self._serials)
            if state.status == LOADING:
                state.status = IDLE

    def is_current(self, token: QueryToken) -> bool:
        with self._lock:
            return self._slice(token.slice).serial == token.serial

    def resolve(self, token: QueryToken, data: list[dict[str, Any]]) -> bool:
        """Store a successful result. Returns False if the token was superseded."""
        with self._lock:
            state = self._slice(token.slice)
            if state.serial != token.serial:
                logger.warning("Discarding stale result for %s (query %d)", token.slice, token.serial)
                return False
            state.status = SUCCEEDED
            state.data = data
            state.error = None
            return True

    def reject(self, token: QueryToken, message: str) -> bool:
        """Record a failure. Returns False if the token was superseded."""
        with self._lock:
            state = self._slice(token.slice)
            if state.serial != token.serial:
                logger.warning("Discarding stale error for %s (query %d)", token.slice, token.serial)
                return False
            state.status = FAILED
            state.error = message or "Something went wrong"
            return True
