# autotune.py
import math

import numpy as np

from models import CUTOFF_MAX, CUTOFF_MIN, FilterKind

CUTOFF_FACTORS = {
    FilterKind.LOWPASS: 1.5,   # open up above the peak
    FilterKind.HIGHPASS: 0.7,  # sit just under it
}


def dominant_frequency(frequency_db, sample_rate):
    """Frequency of the loudest bin; the first one wins on ties."""
    data = np.asarray(frequency_db, dtype=np.float64)
    if data.size == 0:
        return 0.0
    max_index = int(np.argmax(data))
    return max_index * sample_rate / (2 * data.size)


def suggest_cutoff(frequency_db, kind, sample_rate):
    suggested = dominant_frequency(frequency_db, sample_rate) * CUTOFF_FACTORS.get(kind, 1.0)
    suggested = min(CUTOFF_MAX, max(CUTOFF_MIN, suggested))
    # Round half up
    return int(math.floor(suggested + 0.5))
