# lab.py
import state
from analysis import AnalysisFrame, AnalysisSampler
from autotune import suggest_cutoff
from logger import logger
from models import TuningMode, clamp_filter, clamp_signal
from refresh import RefreshLoop
from signal_chain import SignalChain
from synthesizer import STATUS_STOPPED, SignalSynthesizer


class Lab:
    """Owns the synthesizer, chain, output device and refresh loop.

    Config writes go through set_signal() / set_filter(), which swap whole
    snapshots into the shared AppState.
    """

    def __init__(self, app_state=None, engine_factory=None, input_factory=None,
                 on_frame=None, sample_rate=state.SAMPLE_RATE, fft_size=state.FFT_SIZE,
                 refresh_hz=state.REFRESH_HZ):
        self.state = app_state if app_state is not None else state.shared
        self.engine_factory = engine_factory
        self.on_frame = on_frame
        self.sample_rate = sample_rate
        self.fft_size = fft_size

        self.synthesizer = SignalSynthesizer(sample_rate, input_factory)
        self.sampler = AnalysisSampler(sample_rate)
        self.refresh = RefreshLoop(self.refresh_pass, 1.0 / refresh_hz,
                                   is_active=lambda: self.active)
        self.chain = None
        self.engine = None
        self.latest_frame = AnalysisFrame.empty()

    @property
    def active(self):
        return self.chain is not None

    @property
    def status(self):
        handle = self.synthesizer.handle
        return handle.status if handle is not None else STATUS_STOPPED

    def start(self):
        if self.active:
            return
        self.synthesizer.configure(self.state.signal)
        chain = SignalChain(self.synthesizer, self.state.filter,
                            self.sample_rate, self.fft_size)
        if self.engine_factory is not None:
            try:
                self.engine = self.engine_factory(chain)
            except OSError:
                self.synthesizer.stop()
                raise
        self.chain = chain
        self.refresh.start()
        logger.info("Pipeline started", component="LAB")

    def stop(self):
        self.refresh.stop()
        self.synthesizer.stop()
        engine, self.engine = self.engine, None
        if engine is not None:
            engine.shutdown()
        was_active = self.active
        self.chain = None
        self.latest_frame = AnalysisFrame.empty()
        if was_active:
            logger.info("Pipeline stopped", component="LAB")

    def toggle(self):
        if self.active:
            self.stop()
        else:
            self.start()

    def set_signal(self, model):
        model = clamp_signal(model)
        self.state.signal = model
        if self.active:
            self.synthesizer.configure(model)
        return model

    def set_filter(self, config):
        config = clamp_filter(config)
        self.state.filter = config
        chain = self.chain
        if chain is not None:
            chain.apply_filter(config)
        return config

    def auto_tune(self):
        """Move the cutoff relative to the dominant input peak.

        Only acts in adaptive mode with a running pipeline; returns the new
        cutoff or None.
        """
        config = self.state.filter
        chain = self.chain
        if config.tuning_mode != TuningMode.ADAPTIVE or chain is None:
            return None
        spectrum = chain.raw_point.frequency_db()
        cutoff = suggest_cutoff(spectrum, config.kind, self.sample_rate)
        self.set_filter(config.with_changes(cutoff_hz=float(cutoff)))
        logger.info(f"Auto-tuned cutoff to {cutoff} Hz", component="LAB")
        return cutoff

    def refresh_pass(self):
        chain = self.chain
        if chain is None:
            return None
        frame = self.sampler.sample(chain, self.state.filter, self.status)
        self.latest_frame = frame
        if self.on_frame is not None:
            self.on_frame(frame)
        return frame
