# models.py
from dataclasses import dataclass, replace
from enum import Enum


class SignalKind(Enum):
    SINE = "sine"
    SQUARE = "square"
    TRIANGLE = "triangle"
    COMPOSITE = "composite"
    AM = "am"
    FM = "fm"
    NOISE = "noise"
    LIVE_INPUT = "live_input"


class FilterKind(Enum):
    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"
    BANDSTOP = "notch"


class TuningMode(Enum):
    MANUAL = "manual"
    ADAPTIVE = "adaptive"


# --- RANGES (enforced by the caller, see clamp_*) ---
CUTOFF_MIN = 20.0
CUTOFF_MAX = 8000.0
Q_MIN = 0.1
Q_MAX = 15.0
CARRIER_MIN = 100.0
CARRIER_MAX = 5000.0
MOD_FREQ_MIN = 5.0
MOD_FREQ_MAX = 200.0


@dataclass(frozen=True)
class SignalModel:
    kind: SignalKind = SignalKind.SINE
    carrier_frequency_hz: float = 440.0
    modulator_frequency_hz: float = 20.0
    modulation_depth: float = 0.5
    amplitude: float = 0.5

    def with_changes(self, **changes):
        return replace(self, **changes)


@dataclass(frozen=True)
class FilterConfiguration:
    kind: FilterKind = FilterKind.LOWPASS
    cutoff_hz: float = 1000.0
    q_factor: float = 1.0
    order: int = 2
    tuning_mode: TuningMode = TuningMode.MANUAL

    def with_changes(self, **changes):
        return replace(self, **changes)


def _clip(value, lo, hi):
    return max(lo, min(hi, float(value)))


def clamp_filter(config):
    """Return a copy of config with cutoff and Q pulled into their UI ranges."""
    return replace(
        config,
        cutoff_hz=_clip(config.cutoff_hz, CUTOFF_MIN, CUTOFF_MAX),
        q_factor=_clip(config.q_factor, Q_MIN, Q_MAX),
        order=max(1, int(config.order)),
    )


def clamp_signal(model):
    return replace(
        model,
        carrier_frequency_hz=_clip(model.carrier_frequency_hz, CARRIER_MIN, CARRIER_MAX),
        modulator_frequency_hz=_clip(model.modulator_frequency_hz, MOD_FREQ_MIN, MOD_FREQ_MAX),
        modulation_depth=_clip(model.modulation_depth, 0.0, 1.0),
        amplitude=_clip(model.amplitude, 0.0, 1.0),
    )
