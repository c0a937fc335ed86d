# refresh.py
import threading
import time

from logger import logger
from state import REFRESH_HZ

IDLE_INTERVAL = 0.1


class RefreshLoop:
    """Runs `task` roughly REFRESH_HZ times a second on one worker thread.

    A pass is re-armed only after the previous one returns, so passes never
    overlap. While `is_active()` is false the loop does no work and polls at
    IDLE_INTERVAL. stop() sets the cancellation event and joins the thread.
    """

    def __init__(self, task, interval=1.0 / REFRESH_HZ, is_active=None,
                 idle_interval=IDLE_INTERVAL):
        self.task = task
        self.interval = interval
        self.is_active = is_active
        self.idle_interval = idle_interval
        self.passes = 0
        self._cancel = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def _active(self):
        return self.is_active is None or self.is_active()

    def run_once(self):
        if not self._active():
            return None
        try:
            result = self.task()
        except Exception as e:
            logger.error("Refresh pass failed", component="REFRESH", details=str(e))
            return None
        self.passes += 1
        return result

    def start(self):
        if self.running:
            return
        self._cancel = threading.Event()
        self._thread = threading.Thread(target=self._run, args=(self._cancel,),
                                        name="refresh", daemon=True)
        self._thread.start()

    def stop(self, timeout=1.0):
        self._cancel.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self, cancel):
        while not cancel.is_set():
            started = time.monotonic()
            if self._active():
                self.run_once()
                delay = self.interval
            else:
                delay = self.idle_interval
            cancel.wait(max(0.0, delay - (time.monotonic() - started)))
