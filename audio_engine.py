import numpy as np
import pyaudio

from logger import logger
from state import BUFFER_SIZE

class AudioEngine:
    """Plays a SignalChain on the default output device.

    The PortAudio callback is the clock of the whole pipeline: every block it
    asks for advances the generators, the filter and both observation taps.
    """

    def __init__(self, chain, device_index=None):
        self.chain = chain
        self.p = pyaudio.PyAudio()
        try:
            self.stream = self.p.open(
                format=pyaudio.paFloat32,
                channels=2,
                rate=chain.sample_rate,
                output=True,
                output_device_index=device_index,
                frames_per_buffer=BUFFER_SIZE,
                stream_callback=self.callback
            )
        except OSError:
            self.p.terminate()
            raise
        self.stream.start_stream()
        logger.info("Output stream started", component="AUDIO",
                    details=f"{chain.sample_rate} Hz / {BUFFER_SIZE} frames")

    def callback(self, in_data, frame_count, time_info, status):
        try:
            mono = self.chain.render(frame_count)
        except Exception as e:
            # An exception here would kill the stream; play silence instead
            logger.error("Render failed", component="AUDIO", details=str(e))
            mono = np.zeros(frame_count)

        # Same signal on both channels
        stereo = np.zeros(frame_count * 2, dtype=np.float32)
        stereo[0::2] = mono
        stereo[1::2] = mono

        return (stereo.tobytes(), pyaudio.paContinue)

    def shutdown(self):
        self.stream.stop_stream()
        self.stream.close()
        self.p.terminate()
        logger.info("Output stream closed", component="AUDIO")
