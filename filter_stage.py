# filter_stage.py
import math

import numpy as np
from scipy import signal as sps

from logger import logger
from models import FilterKind
from state import SAMPLE_RATE

# Exponential approach toward a new cutoff / Q, in seconds
SMOOTHING_TIME_CONSTANT = 0.05


class SmoothedParam:
    def __init__(self, value, time_constant=SMOOTHING_TIME_CONSTANT):
        self.time_constant = time_constant
        # (start_value, target, start_time) swapped as one tuple
        self._segment = (float(value), float(value), 0.0)

    @property
    def target(self):
        return self._segment[1]

    def set_target(self, target, at_time):
        start = self.value_at(at_time)
        self._segment = (start, float(target), float(at_time))

    def value_at(self, t):
        start, target, t0 = self._segment
        if t <= t0:
            return start
        return target + (start - target) * math.exp(-(t - t0) / self.time_constant)


def biquad_coefficients(kind, cutoff_hz, q, sample_rate):
    """Return normalised (b, a) for one biquad section."""
    # Keep w0 strictly inside (0, pi) so a cutoff at Nyquist stays stable
    freq = min(max(float(cutoff_hz), 1.0), sample_rate * 0.499)
    q = max(float(q), 1e-3)
    w0 = 2.0 * math.pi * freq / sample_rate
    cos_w0 = math.cos(w0)
    alpha = math.sin(w0) / (2.0 * q)

    if kind == FilterKind.LOWPASS:
        b = [(1.0 - cos_w0) / 2.0, 1.0 - cos_w0, (1.0 - cos_w0) / 2.0]
    elif kind == FilterKind.HIGHPASS:
        b = [(1.0 + cos_w0) / 2.0, -(1.0 + cos_w0), (1.0 + cos_w0) / 2.0]
    elif kind == FilterKind.BANDPASS:
        b = [alpha, 0.0, -alpha]
    elif kind == FilterKind.BANDSTOP:
        b = [1.0, -2.0 * cos_w0, 1.0]
    else:
        raise ValueError(f"Unknown filter kind: {kind}")
    a = [1.0 + alpha, -2.0 * cos_w0, 1.0 - alpha]

    a0 = a[0]
    return np.array(b) / a0, np.array(a) / a0


class FilterStage:
    """One biquad section; coefficients re-evaluated once per rendered block."""

    def __init__(self, config, sample_rate=SAMPLE_RATE):
        self.sample_rate = sample_rate
        self.kind = config.kind
        self.cutoff = SmoothedParam(config.cutoff_hz)
        self.q = SmoothedParam(config.q_factor)
        self.zi = np.zeros(2)

    def apply(self, config, continuous_time):
        self.kind = config.kind
        self.cutoff.set_target(config.cutoff_hz, continuous_time)
        self.q.set_target(config.q_factor, continuous_time)
        logger.debug(f"{config.kind.value} -> {config.cutoff_hz:g} Hz, Q {config.q_factor:g}",
                     component="FILTER", details=f"t={continuous_time:.3f}s")

    def coefficients(self, t):
        return biquad_coefficients(self.kind, self.cutoff.value_at(t),
                                   self.q.value_at(t), self.sample_rate)

    def process(self, block, block_time):
        if len(block) == 0:
            return np.zeros(0)
        b, a = self.coefficients(block_time)
        out, self.zi = sps.lfilter(b, a, block, zi=self.zi)
        return out
