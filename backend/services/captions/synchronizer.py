"""Playback synchronizer: maps a playback position to the active cue."""

from __future__ import annotations

import math
from bisect import bisect_right
from collections.abc import Callable
from dataclasses import dataclass
from itertools import accumulate

from shared.models import Cue, SyncState
from shared.utils import setup_logging

from .store import CueStore

logger = setup_logging("caption-synchronizer")

CueListener = Callable[[int], None]


@dataclass(frozen=True)
class TickResult:
    """Outcome of one synchronization tick."""

    position: float
    active_index: int | None
    entered: int | None = None
    exited: int | None = None

    @property
    def state(self) -> SyncState:
        return SyncState.IDLE if self.active_index is None else SyncState.ACTIVE

    @property
    def changed(self) -> bool:
        return self.entered is not None or self.exited is not None


class PlaybackSynchronizer:
    """Two-state machine (Idle / Active(index)) driven by position samples.

    The host transport calls ``tick`` with its current position, at whatever
    rate it likes. A cue is active when ``start <= t < end``. When several
    cues contain ``t`` the one with the lowest start wins, then the lowest
    id, which is simply the first candidate in store order.

    ``on_enter`` listeners fire when the active index changes to a new cue,
    ``on_exit`` listeners when a cue stops being active. Each fires at most
    once per tick, exit before enter, and nothing fires when the active index
    is unchanged.
    """

    def __init__(self, store: CueStore | None = None) -> None:
        self._enter_listeners: list[CueListener] = []
        self._exit_listeners: list[CueListener] = []
        self._active: int | None = None
        self._index = self._build_index(store if store is not None else CueStore.empty())

    @staticmethod
    def _build_index(store: CueStore) -> tuple[CueStore, tuple[float, ...], tuple[float, ...]]:
        starts = tuple(cue.start for cue in store.iterate())
        # Running maximum of ends; non-decreasing, so it can be bisected.
        max_ends = tuple(accumulate((cue.end for cue in store.iterate()), max))
        return store, starts, max_ends

    @property
    def store(self) -> CueStore:
        return self._index[0]

    @property
    def active_index(self) -> int | None:
        return self._active

    @property
    def active_cue(self) -> Cue | None:
        if self._active is None:
            return None
        return self.store[self._active]

    @property
    def state(self) -> SyncState:
        return SyncState.IDLE if self._active is None else SyncState.ACTIVE

    def on_enter(self, callback: CueListener) -> CueListener:
        """Register a listener called with the index of a newly active cue."""
        self._enter_listeners.append(callback)
        return callback

    def on_exit(self, callback: CueListener) -> CueListener:
        """Register a listener called with the index of the cue being left."""
        self._exit_listeners.append(callback)
        return callback

    def resolve(self, position: float) -> int | None:
        """Return the index of the cue active at ``position`` without changing state."""
        store, starts, max_ends = self._index
        upper = bisect_right(starts, position)
        lower = bisect_right(max_ends, position)
        for index in range(lower, upper):
            if position < store.cues[index].end:
                return index
        return None

    def tick(self, position: float) -> TickResult:
        """Advance the state machine to ``position`` and emit transition events."""
        if not math.isfinite(position):
            raise ValueError(f"Playback position must be finite, got {position!r}")

        current = self.resolve(position)
        previous = self._active
        if current == previous:
            return TickResult(position=position, active_index=current)

        self._active = current
        logger.debug(f"Active cue changed at {position:.3f}s: {previous} -> {current}")
        if previous is not None:
            self._emit(self._exit_listeners, previous)
        if current is not None:
            self._emit(self._enter_listeners, current)

        return TickResult(position=position, active_index=current, entered=current, exited=previous)

    def seek_to(self, index: int) -> float:
        """Return the playback coordinate for cue ``index``.

        Pure lookup: the transport performs the actual seek.
        """
        return self.store[index].start

    def replace_store(self, store: CueStore) -> None:
        """Swap in a fully built store and return to Idle.

        If a cue was active, ``on_exit`` fires with its index in the old store.
        """
        previous = self._active
        self._index = self._build_index(store)
        self._active = None
        logger.debug(f"Synchronizer bound to store with {len(store)} cues")
        if previous is not None:
            self._emit(self._exit_listeners, previous)

    @staticmethod
    def _emit(listeners: list[CueListener], index: int) -> None:
        for listener in listeners:
            listener(index)
