from __future__ import annotations

from typing import Callable, Optional, Protocol

from PySide6 import QtCore


class Cancelable(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> Cancelable: ...


class ScheduledTask:
    """
    Fire-once deferred callback on the Qt event loop.

    cancel() is safe to call any number of times, before or after the task fired.
    """

    def __init__(self, timer: QtCore.QTimer, callback: Callable[[], None]):
        self._timer = timer
        self._callback = callback
        self._active = True
        self._timer.timeout.connect(self._fire)

    @property
    def active(self) -> bool:
        return self._active

    def _release(self) -> None:
        self._active = False
        self._timer.stop()
        self._timer.deleteLater()

    def _fire(self) -> None:
        if not self._active:
            return
        self._release()
        self._callback()

    def cancel(self) -> None:
        if self._active:
            self._release()


class QtScheduler:
    def __init__(self, parent: Optional[QtCore.QObject] = None):
        self._parent = parent

    def call_later(self, delay_sec: float, callback: Callable[[], None]) -> ScheduledTask:
        timer = QtCore.QTimer(self._parent)
        timer.setSingleShot(True)
        timer.setInterval(max(0, int(round(delay_sec * 1000))))
        task = ScheduledTask(timer, callback)
        timer.start()
        return task
