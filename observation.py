# observation.py
import threading
from typing import NamedTuple

import numpy as np

from state import FFT_SIZE

# Analyser recipe: Blackman window, |rfft| / N, smoothed across reads, dB
SMOOTHING_TIME_CONSTANT = 0.8
MAGNITUDE_FLOOR = 1e-12


class ObservationSnapshot(NamedTuple):
    time_domain: np.ndarray
    frequency_db: np.ndarray


class ObservationPoint:
    """Tap holding the most recent fft_size samples of one side of the filter."""

    def __init__(self, fft_size=FFT_SIZE, smoothing=SMOOTHING_TIME_CONSTANT):
        self.fft_size = fft_size
        self.smoothing = smoothing
        self._buffer = np.zeros(fft_size)
        self._window = np.blackman(fft_size)
        self._smoothed = np.zeros(fft_size // 2)
        self._lock = threading.Lock()

    @property
    def frequency_bin_count(self):
        return self.fft_size // 2

    @property
    def samples(self):
        # Current window by reference; push() never writes into it
        return self._buffer

    def push(self, block):
        block = np.asarray(block, dtype=np.float64)
        n = self.fft_size
        if len(block) >= n:
            buf = block[-n:].copy()
        else:
            buf = np.concatenate((self._buffer[len(block):], block))
        self._buffer = buf

    def time_domain(self):
        return self._buffer.copy()

    def frequency_db(self, samples=None):
        if samples is None:
            samples = self._buffer
        n = self.fft_size
        spectrum = np.abs(np.fft.rfft(samples * self._window))[: n // 2] / n
        with self._lock:
            self._smoothed = self.smoothing * self._smoothed + (1.0 - self.smoothing) * spectrum
            smoothed = self._smoothed
        return 20.0 * np.log10(np.maximum(smoothed, MAGNITUDE_FLOOR))

    def snapshot(self, samples=None):
        if samples is None:
            samples = self._buffer
        return ObservationSnapshot(samples.copy(), self.frequency_db(samples))

    def clear(self):
        self._buffer = np.zeros(self.fft_size)
        with self._lock:
            self._smoothed = np.zeros(self.fft_size // 2)
