# synthesizer.py
import numpy as np
from scipy import signal as sps

from logger import logger
from models import SignalKind
from state import SAMPLE_RATE

TWO_PI = 2 * np.pi

COMPOSITE_RATIOS = (1.0, 2.0, 3.5)
NOISE_SECONDS = 2.0

STATUS_OK = "ok"
STATUS_STOPPED = "stopped"
STATUS_INPUT_UNAVAILABLE = "live input unavailable"

WAVEFORMS = {
    SignalKind.SINE: np.sin,
    SignalKind.SQUARE: sps.square,
    SignalKind.TRIANGLE: lambda phases: sps.sawtooth(phases, width=0.5),
}


class Oscillator:
    """Phase-continuous waveform; phase carries over between render() calls."""

    def __init__(self, frequency, waveform=np.sin, sample_rate=SAMPLE_RATE):
        self.frequency = float(frequency)
        self.waveform = waveform
        self.sample_rate = sample_rate
        self.phase = 0.0

    def render(self, frame_count, frequency=None):
        """Render one block. `frequency` may be a per-sample array (FM)."""
        if frame_count <= 0:
            return np.zeros(0)
        freq = self.frequency if frequency is None else frequency
        phase_inc = TWO_PI * np.broadcast_to(np.asarray(freq, dtype=np.float64),
                                             (frame_count,)) / self.sample_rate
        # Sample n uses the phase accumulated over samples 0..n-1
        offsets = np.concatenate(([0.0], np.cumsum(phase_inc[:-1])))
        phases = self.phase + offsets
        self.phase = float((self.phase + phase_inc.sum()) % TWO_PI)
        return self.waveform(phases)


class CompositeGenerator:
    """Sine partials at non-integer ratios, weighted 0.3 / (index + 1)."""

    def __init__(self, carrier_hz, sample_rate=SAMPLE_RATE):
        self.partials = []
        for i, ratio in enumerate(COMPOSITE_RATIOS):
            osc = Oscillator(carrier_hz * ratio, np.sin, sample_rate)
            self.partials.append((osc, 0.3 / (i + 1)))

    def render(self, frame_count):
        out = np.zeros(frame_count)
        for osc, weight in self.partials:
            out += weight * osc.render(frame_count)
        return out


class AMGenerator:
    def __init__(self, carrier_hz, modulator_hz, depth, sample_rate=SAMPLE_RATE):
        self.carrier = Oscillator(carrier_hz, np.sin, sample_rate)
        self.modulator = Oscillator(modulator_hz, np.sin, sample_rate)
        self.depth = float(depth)
        self.last_envelope = np.zeros(0)

    def render(self, frame_count):
        mod = self.modulator.render(frame_count)
        # mod = +1 -> 1.0, mod = -1 -> 1 - depth
        envelope = 1.0 - self.depth * (1.0 - mod) / 2.0
        self.last_envelope = envelope
        return self.carrier.render(frame_count) * envelope


class FMGenerator:
    def __init__(self, carrier_hz, modulator_hz, depth, sample_rate=SAMPLE_RATE):
        self.carrier = Oscillator(carrier_hz, np.sin, sample_rate)
        self.modulator = Oscillator(modulator_hz, np.sin, sample_rate)
        # Depth is a fraction of the carrier, not an absolute deviation
        self.deviation = float(depth) * float(carrier_hz)
        self.last_frequency = np.zeros(0)

    def render(self, frame_count):
        inst_freq = self.carrier.frequency + self.deviation * self.modulator.render(frame_count)
        self.last_frequency = inst_freq
        return self.carrier.render(frame_count, frequency=inst_freq)


class NoiseLoop:
    def __init__(self, sample_rate=SAMPLE_RATE, seconds=NOISE_SECONDS, rng=None):
        rng = rng if rng is not None else np.random.default_rng()
        self.buffer = rng.uniform(-1.0, 1.0, int(sample_rate * seconds))
        self.position = 0

    def render(self, frame_count):
        idx = (self.position + np.arange(frame_count)) % len(self.buffer)
        self.position = (self.position + frame_count) % len(self.buffer)
        return self.buffer[idx]


class LiveInputGenerator:
    """Pulls captured samples from a live source; silence while unavailable."""

    def __init__(self, source):
        self.source = source

    @property
    def available(self):
        return self.source is not None and self.source.available

    def render(self, frame_count):
        if not self.available:
            return np.zeros(frame_count)
        return self.source.read(frame_count)

    def close(self):
        if self.source is not None:
            self.source.close()


class SynthesisHandle:
    def __init__(self, model, generator):
        self.model = model
        self.generator = generator
        self.active = True

    @property
    def status(self):
        if not self.active:
            return STATUS_STOPPED
        if isinstance(self.generator, LiveInputGenerator) and not self.generator.available:
            return STATUS_INPUT_UNAVAILABLE
        return STATUS_OK

    def render(self, frame_count):
        if not self.active:
            return np.zeros(frame_count)
        return self.generator.render(frame_count) * self.model.amplitude

    def stop(self):
        if not self.active:
            return
        self.active = False
        if isinstance(self.generator, LiveInputGenerator):
            self.generator.close()


class SignalSynthesizer:
    def __init__(self, sample_rate=SAMPLE_RATE, input_factory=None, rng=None):
        self.sample_rate = sample_rate
        self.input_factory = input_factory
        self.rng = rng
        self.handle = None

    def configure(self, model):
        self.stop()
        handle = SynthesisHandle(model, self._build(model))
        self.handle = handle
        logger.info(f"Configured {model.kind.value} source", component="SYNTH",
                    details=f"carrier={model.carrier_frequency_hz:g} Hz")
        if handle.status == STATUS_INPUT_UNAVAILABLE:
            logger.warning("Live input unavailable, rendering silence", component="SYNTH")
        return handle

    def render(self, frame_count):
        handle = self.handle
        if handle is None:
            return np.zeros(frame_count)
        return handle.render(frame_count)

    def stop(self):
        handle, self.handle = self.handle, None
        if handle is not None:
            handle.stop()

    def _build(self, model):
        sr = self.sample_rate
        kind = model.kind
        if kind in WAVEFORMS:
            return Oscillator(model.carrier_frequency_hz, WAVEFORMS[kind], sr)
        if kind == SignalKind.COMPOSITE:
            return CompositeGenerator(model.carrier_frequency_hz, sr)
        if kind == SignalKind.AM:
            return AMGenerator(model.carrier_frequency_hz, model.modulator_frequency_hz,
                               model.modulation_depth, sr)
        if kind == SignalKind.FM:
            return FMGenerator(model.carrier_frequency_hz, model.modulator_frequency_hz,
                               model.modulation_depth, sr)
        if kind == SignalKind.NOISE:
            return NoiseLoop(sr, NOISE_SECONDS, self.rng)
        if kind == SignalKind.LIVE_INPUT:
            source = self.input_factory() if self.input_factory else None
            if source is not None:
                source.open()
            return LiveInputGenerator(source)
        raise ValueError(f"Unknown signal kind: {kind}")
