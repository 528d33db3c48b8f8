"""Live game session: switches target nodes on and off as their windows open and close."""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from shooting_range.core.logger import APP_LOGGER, SessionLogger
from shooting_range.drivers.control import ControlHandle
from shooting_range.drivers.controller_driver import ControllerDriverError
from .models import Game

POLL_INTERVAL_S = 0.2
THREAD_JOIN_TIMEOUT_S = 1.0
OUTCOME_ERROR = "error"


class GameSession:
    """
    Runs one game against a control handle.

    The session polls a monotonic clock, truncates to whole seconds and applies
    the set of nodes whose window covers that second. Only transitions are
    sent: ``(node, True)`` when a node becomes active, ``(node, False)`` when
    it stops being active. A late poll applies the current second only; missed
    transitions in between are not replayed.
    """

    def __init__(
        self,
        control: ControlHandle,
        game: Game,
        session_logger: Optional[SessionLogger] = None,
        poll_interval_s: float = POLL_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.control = control
        self.game = game
        self.session_logger = session_logger
        self._poll_interval_s = poll_interval_s
        self._clock = clock
        self._state_lock = threading.RLock()
        self._active: set[int] = set()
        self._elapsed_s = 0
        self._running = False
        self._start: Optional[float] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def elapsed_s(self) -> int:
        return self._elapsed_s

    @property
    def active_nodes(self) -> frozenset[int]:
        with self._state_lock:
            return frozenset(self._active)

    def active_nodes_at(self, elapsed_s: int) -> set[int]:
        return {gt.target.node_id for gt in self.game.targets if gt.is_active(elapsed_s)}

    def begin(self) -> None:
        """Mark the session running at ``clock()`` without starting the poll thread."""
        with self._state_lock:
            self._active.clear()
            self._elapsed_s = 0
            self._start = self._clock()
            self._running = True
        APP_LOGGER.info(f"Game '{self.game.name}' started ({self.game.total_time}s)")

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self.begin()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop, daemon=True, name=f"GameSession-{self.game.name}"
        )
        self._thread.start()

    def _poll_loop(self):
        try:
            while not self._stop_event.is_set():
                start = self._start
                if start is None:
                    break
                elapsed = int(self._clock() - start)
                self.tick(elapsed)
                if elapsed >= self.game.total_time:
                    break
                self._stop_event.wait(self._poll_interval_s)
        except Exception:
            APP_LOGGER.error(f"Game '{self.game.name}' aborted by an unexpected error", exc_info=True)
        finally:
            try:
                self.end()
            except Exception:
                APP_LOGGER.error(f"Failed to switch targets off after game '{self.game.name}'", exc_info=True)

    def tick(self, elapsed_s: int) -> None:
        """Apply the node set for ``elapsed_s``, sending only the changes."""
        with self._state_lock:
            if not self._running:
                return
            self._elapsed_s = elapsed_s
            wanted = self.active_nodes_at(elapsed_s)
            for node_id in sorted(wanted - self._active):
                self._dispatch(node_id, True)
                self._active.add(node_id)
            for node_id in sorted(self._active - wanted):
                self._dispatch(node_id, False)
                self._active.discard(node_id)

    def end(self) -> None:
        """Deactivate every active node and mark the session finished. Idempotent."""
        with self._state_lock:
            if not self._running:
                return
            try:
                for node_id in sorted(self._active):
                    self._dispatch(node_id, False)
            finally:
                self._active.clear()
                self._running = False
                self._start = None
        APP_LOGGER.info(f"Game '{self.game.name}' ended at {self._elapsed_s}s")

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            if threading.current_thread() != self._thread:
                self._thread.join(timeout=THREAD_JOIN_TIMEOUT_S)
            self._thread = None
        self.end()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the poll thread finishes; returns False on timeout."""
        thread = self._thread
        if thread is None:
            return True
        thread.join(timeout=timeout)
        return not thread.is_alive()

    def _dispatch(self, node_id: int, state: bool) -> None:
        try:
            outcome = self.control.send(node_id, state).value
        except ControllerDriverError as e:
            APP_LOGGER.error(f"Failed to send command to node {node_id}: {e}")
            outcome = OUTCOME_ERROR
        if self.session_logger is not None:
            self.session_logger.log_activation(
                host_time_s=time.time(),
                elapsed_s=self._elapsed_s,
                node_id=node_id,
                state=state,
                outcome=outcome,
            )

    def remaining_time(self) -> int:
        if not self._running:
            return 0
        return max(0, self.game.total_time - self._elapsed_s)

    def is_node_active(self, node_id: int) -> bool:
        with self._state_lock:
            return node_id in self._active

    def time_remaining(self, node_id: int) -> int:
        """Seconds left in the window currently showing ``node_id``, or 0."""
        if not self.is_node_active(node_id):
            return 0
        for gt in self.game.targets:
            if gt.target.node_id == node_id and gt.is_active(self._elapsed_s):
                return gt.end_time - self._elapsed_s
        return 0
