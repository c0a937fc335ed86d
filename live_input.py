# live_input.py
import queue

import numpy as np
import pyaudio

from logger import logger
from state import BUFFER_SIZE, SAMPLE_RATE

MAX_PENDING_BLOCKS = 32


class LiveInputSource:
    """Microphone capture feeding the synthesizer.

    The PyAudio input callback pushes blocks onto a queue; read() drains it
    from the rendering side. Opening never raises: a missing device or a
    refused permission leaves the source unavailable and read() is never fed.
    """

    def __init__(self, sample_rate=SAMPLE_RATE, frames_per_buffer=BUFFER_SIZE,
                 device_index=None):
        self.sample_rate = sample_rate
        self.frames_per_buffer = frames_per_buffer
        self.device_index = device_index
        self.data_queue = queue.Queue(maxsize=MAX_PENDING_BLOCKS)
        self.available = False
        self.p = None
        self.stream = None
        self._pending = np.zeros(0)

    def open(self):
        if self.available:
            return True
        try:
            self.p = pyaudio.PyAudio()
            self.stream = self.p.open(
                format=pyaudio.paFloat32,
                channels=1,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=self.frames_per_buffer,
                stream_callback=self.callback
            )
            self.stream.start_stream()
        except OSError as e:
            logger.warning("Live input unavailable", component="INPUT", details=str(e))
            self._release()
            return False

        self.available = True
        logger.info("Live input capturing", component="INPUT",
                    details=f"{self.sample_rate} Hz")
        return True

    def callback(self, in_data, frame_count, time_info, status):
        block = np.frombuffer(in_data, dtype=np.float32).astype(np.float64)
        try:
            self.data_queue.put_nowait(block)
        except queue.Full:
            # Renderer fell behind: drop the oldest block to stay live
            try:
                self.data_queue.get_nowait()
            except queue.Empty:
                pass
            self.data_queue.put_nowait(block)
        return (None, pyaudio.paContinue)

    def read(self, frame_count):
        chunks = [self._pending]
        have = len(self._pending)
        while have < frame_count:
            try:
                block = self.data_queue.get_nowait()
            except queue.Empty:
                break
            chunks.append(block)
            have += len(block)

        data = np.concatenate(chunks)
        out, self._pending = data[:frame_count], data[frame_count:]
        if len(out) < frame_count:
            out = np.concatenate((out, np.zeros(frame_count - len(out))))
        return out

    def close(self):
        was_open = self.available
        self.available = False
        self._release()
        if was_open:
            logger.info("Live input released", component="INPUT")

    def _release(self):
        if self.stream is not None:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning("Input stream close failed", component="INPUT", details=str(e))
            self.stream = None
        if self.p is not None:
            self.p.terminate()
            self.p = None
