# analysis.py
# SNR here is the raw / filtered energy ratio, an attenuation proxy. The
# impulse curve is a damped sinusoid shaped by the cutoff, not a measurement.
import math
import sys
from typing import NamedTuple, Tuple

import numpy as np

from logger import logger
from response_model import magnitude_at
from synthesizer import STATUS_OK, STATUS_STOPPED

TIME_WINDOW = 512
TIME_STRIDE = 4
FREQUENCY_POINTS = 128
IMPULSE_POINTS = 50
DB_RANGE = 100.0
SNR_EPSILON = 1e-5


class TimePoint(NamedTuple):
    sample_index: int
    raw_amplitude: float
    filtered_amplitude: float


class FrequencyPoint(NamedTuple):
    frequency_hz: float
    raw_magnitude: float
    filtered_magnitude: float
    theoretical_response: float


class ImpulsePoint(NamedTuple):
    step_index: int
    value: float


class AnalysisFrame(NamedTuple):
    time_series: Tuple[TimePoint, ...]
    frequency_series: Tuple[FrequencyPoint, ...]
    impulse_series: Tuple[ImpulsePoint, ...]
    snr_db: float
    status: str = STATUS_OK

    @classmethod
    def empty(cls, status=STATUS_STOPPED):
        return cls((), (), (), 0.0, status)


def time_series(raw_time, filtered_time):
    return tuple(
        TimePoint(i, float(raw_time[i]), float(filtered_time[i]))
        for i in range(0, min(TIME_WINDOW, len(raw_time), len(filtered_time)), TIME_STRIDE)
    )


def normalize_db(magnitude_db):
    """Map -100..0 dB onto 0..1 (louder bins may exceed 1)."""
    return max(0.0, (float(magnitude_db) + DB_RANGE) / DB_RANGE)


def frequency_series(raw_db, filtered_db, config, sample_rate, fft_size):
    points = []
    for b in range(min(FREQUENCY_POINTS, len(raw_db), len(filtered_db))):
        freq = b * sample_rate / fft_size
        points.append(FrequencyPoint(
            freq,
            normalize_db(raw_db[b]),
            normalize_db(filtered_db[b]),
            magnitude_at(config.kind, config.cutoff_hz, freq),
        ))
    return tuple(points)


def energy(samples):
    x = np.asarray(samples, dtype=np.float64)
    return float(np.dot(x, x))


def snr_from_energy(raw_energy, filtered_energy):
    ratio = raw_energy / (filtered_energy + SNR_EPSILON)
    # Silent raw window: smallest positive float instead of log10(0)
    return 10.0 * math.log10(ratio if ratio > 0 else sys.float_info.min)


def snr_estimate(raw_time, filtered_time):
    return snr_from_energy(energy(raw_time), energy(filtered_time))


def impulse_series(cutoff_hz):
    return tuple(
        ImpulsePoint(i, math.exp(-i * cutoff_hz / 2000.0) * math.sin(i * cutoff_hz / 500.0))
        for i in range(IMPULSE_POINTS)
    )


def analyze(raw, filtered, config, sample_rate, fft_size=None, status=STATUS_OK):
    if fft_size is None:
        fft_size = len(raw.time_domain)
    return AnalysisFrame(
        time_series=time_series(raw.time_domain, filtered.time_domain),
        frequency_series=frequency_series(raw.frequency_db, filtered.frequency_db,
                                          config, sample_rate, fft_size),
        impulse_series=impulse_series(config.cutoff_hz),
        snr_db=snr_estimate(raw.time_domain, filtered.time_domain),
        status=status,
    )


class AnalysisSampler:
    def __init__(self, sample_rate):
        self.sample_rate = sample_rate
        self.last_frame = AnalysisFrame.empty()

    def sample(self, chain, config, status=STATUS_OK):
        if chain is None:
            self.last_frame = AnalysisFrame.empty()
            return self.last_frame

        try:
            raw, filtered = chain.snapshot_pair()
            frame = analyze(raw, filtered, config, self.sample_rate,
                            chain.fft_size, status)
        except Exception as e:
            logger.error("Analysis pass failed, keeping previous frame",
                         component="ANALYSIS", details=str(e))
            return self.last_frame

        self.last_frame = frame
        return frame
