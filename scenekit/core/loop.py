"""Scene run helpers and the background housekeeping loop.

- ``run_if`` runs a function, or a list of scenes, when a condition holds
- ``run_every_minute`` drives a timer scene aligned to minute boundaries
- ``HousekeepingLoop`` polls ``Housekeeper.run_due_tasks`` on a thread
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional, Union

from ..constants import DEFAULT_POLL_INTERVAL_SECONDS
from .host import HostPlatform
from .housekeeping import Housekeeper, RunReport

_logger = logging.getLogger("scene_loop")

SceneAction = Union[Callable[[], object], Iterable[Union[int, str]]]


def run_if(
    should_run: bool,
    to_run: SceneAction,
    sleep_seconds: float = 0,
    host: Optional[HostPlatform] = None,
) -> bool:
    """Run ``to_run`` when ``should_run`` is true, then pause ``sleep_seconds``.

    ``to_run`` is either a callable or an iterable of scene ids; disabled
    scenes are skipped. The pause only happens after something ran, which
    keeps a time-window check (see ``is_time``) from firing twice.

    Returns:
        True if ``to_run`` was executed.
    """
    if not should_run:
        return False

    if callable(to_run):
        to_run()
    else:
        if host is None:
            raise ValueError("A host is required to start scenes")
        for scene_id in to_run:
            scene_id = int(scene_id)
            if host.is_scene_enabled(scene_id):
                host.start_scene(scene_id)
            else:
                _logger.info("Not running disabled scene ID: %s", scene_id)

    if sleep_seconds and host is not None:
        host.sleep(sleep_seconds)
    return True


def seconds_until_next_minute(now: float) -> int:
    return 60 - int(now) % 60


def wait_until_next_minute(host: HostPlatform, stop_event: Optional[threading.Event] = None) -> None:
    delay = seconds_until_next_minute(host.now())
    if stop_event is not None:
        stop_event.wait(timeout=delay)
    else:
        host.sleep(delay)


def run_every_minute(
    fn: Callable[[], object],
    host: HostPlatform,
    stop_event: Optional[threading.Event] = None,
) -> None:
    """Call ``fn`` at the start of every minute until ``stop_event`` is set."""
    while stop_event is None or not stop_event.is_set():
        fn()
        wait_until_next_minute(host, stop_event)


class HousekeepingLoop:
    """Runs due housekeeping tasks every ``poll_interval_seconds`` on a daemon thread."""

    def __init__(self, housekeeper: Housekeeper, poll_interval_seconds: int = DEFAULT_POLL_INTERVAL_SECONDS):
        self.housekeeper = housekeeper
        self.poll_interval_seconds = max(1, int(poll_interval_seconds))
        self._thread: Optional[threading.Thread] = None
        self._wake_event = threading.Event()
        self._stop_event = threading.Event()
        self._lock = threading.RLock()
        self._running = False
        self.last_report: Optional[RunReport] = None
        self.passes = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run_loop, name="HousekeepingLoop", daemon=True)
            self._running = True
            self._thread.start()
            _logger.info("Housekeeping loop started (every %ss)", self.poll_interval_seconds)

    def wake(self) -> None:
        self._wake_event.set()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop_event.set()
        self._wake_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        with self._lock:
            self._running = False
            self._thread = None
        _logger.info("Housekeeping loop stopped")

    def run_once(self) -> Optional[RunReport]:
        """One pass; errors are logged so the loop keeps going."""
        try:
            report = self.housekeeper.run_due_tasks()
        except Exception:
            _logger.exception("Housekeeping pass failed")
            return None
        finally:
            self.passes += 1
        self.last_report = report
        if report.executed or report.failed or report.reset:
            _logger.info("Housekeeping pass: %s", report.to_dict())
        return report

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            self._wake_event.clear()
            self.run_once()
            self._wake_event.wait(timeout=self.poll_interval_seconds)


__all__ = [
    "HousekeepingLoop", "run_every_minute", "run_if",
    "seconds_until_next_minute", "wait_until_next_minute",
]
