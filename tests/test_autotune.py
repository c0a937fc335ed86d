"""
Tests for the auto-tune heuristic.

Covers:
- Dominant bin conversion (sampleRate / (2 * bufferLength))
- Per-kind factors, rounding, clamping
- First peak wins on ties
"""
import numpy as np
import pytest

from autotune import dominant_frequency, suggest_cutoff
from models import FilterKind

SR = 44100


def spectrum_with_peak(index, length=1024, floor=-120.0, peak=-10.0):
    data = np.full(length, floor)
    data[index] = peak
    return data


def test_dominant_frequency():
    assert dominant_frequency(spectrum_with_peak(20), SR) == pytest.approx(20 * 44100 / 2048)


def test_lowpass_fixture():
    assert suggest_cutoff(spectrum_with_peak(20), FilterKind.LOWPASS, SR) == 646


def test_highpass_factor():
    # 430.66 * 0.7 = 301.46
    assert suggest_cutoff(spectrum_with_peak(20), FilterKind.HIGHPASS, SR) == 301


@pytest.mark.parametrize("kind", [FilterKind.BANDPASS, FilterKind.BANDSTOP])
def test_band_kinds_use_peak_directly(kind):
    assert suggest_cutoff(spectrum_with_peak(20), kind, SR) == 431


def test_first_peak_wins_on_tie():
    data = spectrum_with_peak(20)
    data[40] = data[20]
    assert dominant_frequency(data, SR) == pytest.approx(20 * 44100 / 2048)


def test_clamped_low():
    assert suggest_cutoff(spectrum_with_peak(0), FilterKind.LOWPASS, SR) == 20


def test_clamped_high():
    assert suggest_cutoff(spectrum_with_peak(1000), FilterKind.LOWPASS, SR) == 8000


def test_all_silent_spectrum():
    data = np.full(1024, -np.inf)
    assert suggest_cutoff(data, FilterKind.HIGHPASS, SR) == 20


def test_empty_spectrum():
    assert dominant_frequency([], SR) == 0.0
