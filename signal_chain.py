# signal_chain.py
import threading

from filter_stage import FilterStage
from observation import ObservationPoint
from state import FFT_SIZE, MASTER_GAIN, SAMPLE_RATE


class SignalChain:
    """synthesizer -> raw tap -> filter -> filtered tap -> master gain

    render() is driven by whoever owns the clock: the device callback in the
    app, the test itself otherwise. The clock only advances by rendering.
    """

    def __init__(self, synthesizer, filter_config, sample_rate=SAMPLE_RATE,
                 fft_size=FFT_SIZE, master_gain=MASTER_GAIN):
        self.synthesizer = synthesizer
        self.sample_rate = sample_rate
        self.fft_size = fft_size
        self.master_gain = master_gain
        self.filter_stage = FilterStage(filter_config, sample_rate)
        self.raw_point = ObservationPoint(fft_size)
        self.filtered_point = ObservationPoint(fft_size)
        self.frames_rendered = 0
        # Guards publishing / capturing the two taps as one pair
        self._taps_lock = threading.Lock()

    @property
    def current_time(self):
        return self.frames_rendered / self.sample_rate

    def apply_filter(self, config):
        self.filter_stage.apply(config, self.current_time)

    def render(self, frame_count):
        t = self.current_time
        raw = self.synthesizer.render(frame_count)
        filtered = self.filter_stage.process(raw, t)
        with self._taps_lock:
            self.raw_point.push(raw)
            self.filtered_point.push(filtered)
        self.frames_rendered += frame_count
        return filtered * self.master_gain

    def snapshot_pair(self):
        """Raw and filtered snapshots covering the same rendered frames."""
        with self._taps_lock:
            raw = self.raw_point.samples
            filtered = self.filtered_point.samples
        return self.raw_point.snapshot(raw), self.filtered_point.snapshot(filtered)
