"""
Tests for the per-refresh analysis.

Covers:
- Time series: 128 points, stride 4, values taken from both buffers
- Frequency series: 128 points, bin frequencies, dB normalisation, overlay
- SNR: hand-computed energy fixtures, epsilon guard, quiet and silent input
- Impulse series: 50 points of the damped sinusoid
- AnalysisSampler: empty frame without a chain, previous frame on failure
"""
import math

import numpy as np
import pytest

from analysis import (
    AnalysisFrame,
    AnalysisSampler,
    FREQUENCY_POINTS,
    SNR_EPSILON,
    analyze,
    frequency_series,
    impulse_series,
    normalize_db,
    snr_estimate,
    snr_from_energy,
    time_series,
)
from models import FilterConfiguration, FilterKind, SignalKind, SignalModel
from observation import ObservationSnapshot
from response_model import magnitude_at
from signal_chain import SignalChain
from synthesizer import STATUS_INPUT_UNAVAILABLE, STATUS_STOPPED, SignalSynthesizer
from tests.helpers.signal_helpers import FFT_SIZE, SAMPLE_RATE, render_blocks, sine


def make_snapshot(time_domain, frequency_db=None, fft_size=FFT_SIZE):
    if frequency_db is None:
        frequency_db = np.full(fft_size // 2, -100.0)
    return ObservationSnapshot(np.asarray(time_domain, dtype=np.float64),
                               np.asarray(frequency_db, dtype=np.float64))


class BrokenChain:
    fft_size = FFT_SIZE

    def snapshot_pair(self):
        raise RuntimeError("tap went away")


def sine_chain(frequency):
    synth = SignalSynthesizer()
    synth.configure(SignalModel(kind=SignalKind.SINE, carrier_frequency_hz=frequency))
    return SignalChain(synth, FilterConfiguration())


# =============================================================================
# TIME SERIES
# =============================================================================

def test_time_series_length_and_order():
    raw = np.arange(FFT_SIZE, dtype=float)
    filtered = -raw
    series = time_series(raw, filtered)
    assert len(series) == 128
    assert [p.sample_index for p in series] == list(range(0, 512, 4))
    assert series[3].raw_amplitude == 12.0
    assert series[3].filtered_amplitude == -12.0


def test_time_series_length_on_minimum_buffer():
    assert len(time_series(np.zeros(512), np.zeros(512))) == 128


# =============================================================================
# FREQUENCY SERIES
# =============================================================================

@pytest.mark.parametrize("db,expected", [(-100.0, 0.0), (-50.0, 0.5), (-130.0, 0.0),
                                         (0.0, 1.0), (20.0, 1.2)])
def test_normalize_db(db, expected):
    assert normalize_db(db) == pytest.approx(expected)


def test_frequency_series_bins():
    config = FilterConfiguration(kind=FilterKind.LOWPASS, cutoff_hz=1000.0)
    raw_db = np.full(FFT_SIZE // 2, -40.0)
    filtered_db = np.full(FFT_SIZE // 2, -70.0)
    series = frequency_series(raw_db, filtered_db, config, SAMPLE_RATE, FFT_SIZE)
    assert len(series) == FREQUENCY_POINTS
    assert series[0].frequency_hz == 0.0
    assert series[10].frequency_hz == pytest.approx(10 * SAMPLE_RATE / FFT_SIZE)
    assert series[10].raw_magnitude == pytest.approx(0.6)
    assert series[10].filtered_magnitude == pytest.approx(0.3)
    assert series[10].theoretical_response == magnitude_at(
        FilterKind.LOWPASS, 1000.0, 10 * SAMPLE_RATE / FFT_SIZE)


@pytest.mark.parametrize("fft_size", [256, 1024, 4096])
def test_frequency_series_length_independent_of_buffer(fft_size):
    db = np.full(fft_size // 2, -60.0)
    series = frequency_series(db, db, FilterConfiguration(), SAMPLE_RATE, fft_size)
    assert len(series) == 128


def test_bandpass_overlay_is_flat():
    db = np.zeros(FFT_SIZE // 2)
    config = FilterConfiguration(kind=FilterKind.BANDPASS)
    series = frequency_series(db, db, config, SAMPLE_RATE, FFT_SIZE)
    assert {p.theoretical_response for p in series} == {1.0}


# =============================================================================
# SNR
# =============================================================================

def test_snr_fixture():
    assert snr_from_energy(2.0, 0.5) == pytest.approx(10 * math.log10(2.0 / (0.5 + SNR_EPSILON)))
    assert snr_from_energy(2.0, 0.5) == pytest.approx(6.02, abs=0.01)


def test_snr_from_buffers():
    raw = np.zeros(FFT_SIZE)
    raw[:2] = 1.0                       # energy 2.0
    filtered = np.zeros(FFT_SIZE)
    filtered[:2] = 0.5                  # energy 0.5
    assert snr_estimate(raw, filtered) == snr_from_energy(2.0, 0.5)


def test_snr_zero_filtered_energy_is_finite():
    value = snr_estimate(np.ones(FFT_SIZE), np.zeros(FFT_SIZE))
    assert math.isfinite(value)
    assert value == pytest.approx(10 * math.log10(FFT_SIZE / SNR_EPSILON))


def test_snr_quiet_raw_below_minus_fifty_db():
    # Quiet raw window against a loud filtered one reads the plain ratio
    assert snr_from_energy(1e-8, 1.0) == pytest.approx(10 * math.log10(1e-8 / (1.0 + SNR_EPSILON)))
    assert snr_from_energy(1e-8, 1.0) == pytest.approx(-80.0, abs=1e-3)


def test_snr_silent_input_is_finite():
    assert math.isfinite(snr_estimate(np.zeros(FFT_SIZE), np.zeros(FFT_SIZE)))


def test_lowpass_reads_positive():
    raw = sine(5000.0, FFT_SIZE)
    filtered = 0.1 * raw
    assert snr_estimate(raw, filtered) > 0


# =============================================================================
# IMPULSE
# =============================================================================

def test_impulse_series():
    series = impulse_series(1000.0)
    assert len(series) == 50
    assert series[0].value == 0.0
    assert series[3].step_index == 3
    assert series[3].value == pytest.approx(math.exp(-1.5) * math.sin(6.0))


# =============================================================================
# ANALYZE / SAMPLER
# =============================================================================

def test_analyze_builds_consistent_frame():
    raw = make_snapshot(sine(440.0, FFT_SIZE))
    filtered = make_snapshot(0.5 * sine(440.0, FFT_SIZE))
    config = FilterConfiguration(cutoff_hz=2000.0)
    frame = analyze(raw, filtered, config, SAMPLE_RATE)
    assert len(frame.time_series) == 128
    assert len(frame.frequency_series) == 128
    assert len(frame.impulse_series) == 50
    assert frame.snr_db == pytest.approx(10 * math.log10(4.0), abs=1e-3)
    assert frame.time_series[5].filtered_amplitude == pytest.approx(
        0.5 * frame.time_series[5].raw_amplitude)


def test_sampler_without_chain_is_empty():
    sampler = AnalysisSampler(SAMPLE_RATE)
    frame = sampler.sample(None, FilterConfiguration())
    assert frame == AnalysisFrame.empty()
    assert frame.status == STATUS_STOPPED


def test_sampler_reads_chain():
    chain = sine_chain(1000.0)
    render_blocks(chain, 8)
    sampler = AnalysisSampler(SAMPLE_RATE)
    frame = sampler.sample(chain, FilterConfiguration(), STATUS_INPUT_UNAVAILABLE)
    assert len(frame.frequency_series) == 128
    assert frame.status == STATUS_INPUT_UNAVAILABLE
    assert sampler.last_frame is frame


def test_sampler_keeps_previous_frame_on_failure():
    chain = sine_chain(1000.0)
    render_blocks(chain, 8)
    sampler = AnalysisSampler(SAMPLE_RATE)
    good = sampler.sample(chain, FilterConfiguration())
    again = sampler.sample(BrokenChain(), FilterConfiguration())
    assert again is good
