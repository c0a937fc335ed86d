# response_model.py
"""
Closed-form magnitude curve drawn over the live spectrum.

Second-order Butterworth-like shape for low-pass and high-pass. Band-pass and
band-stop are not modelled and read as a flat 1.0. The curve is a visual
reference only; it is not the realized response of the filter stage.
"""
import math

from models import FilterKind


def _rolloff(ratio):
    # ratio ** 4 raises OverflowError for huge floats, products saturate to inf
    r2 = ratio * ratio
    return 1.0 / math.sqrt(1.0 + r2 * r2)


def magnitude_at(kind, cutoff_hz, frequency_hz):
    if kind == FilterKind.LOWPASS:
        return _rolloff(frequency_hz / cutoff_hz)
    if kind == FilterKind.HIGHPASS:
        if frequency_hz <= 0:
            return 0.0
        return _rolloff(cutoff_hz / frequency_hz)
    return 1.0
