# state.py
from models import FilterConfiguration, SignalModel

SAMPLE_RATE = 44100
BUFFER_SIZE = 256
FFT_SIZE = 2048
MASTER_GAIN = 0.4
REFRESH_HZ = 60.0


class AppState:
    def __init__(self):
        # --- Signal & Filter (swapped whole, never mutated field by field) ---
        self.signal = SignalModel()
        self.filter = FilterConfiguration()

        # --- Visuals ---
        self.show_theoretical = True  # Overlay analytic response curve
        self.time_y_range = 1.2       # Oscilloscope half-height


# Create a single shared instance
shared = AppState()
