import dearpygui.dearpygui as dpg

import state
from audio_engine import AudioEngine
from lab import Lab
from live_input import LiveInputSource
from logger import LogLevel, logger
from models import FilterKind, SignalKind, TuningMode
from synthesizer import STATUS_OK

# --- SETTINGS ---
W_WIDTH = 1280
W_HEIGHT = 900
PLOT_HEIGHT = 220
CONSOLE_LINES = 12

SIGNAL_LABELS = {
    "Pure Sine": SignalKind.SINE,
    "Square (Harmonics)": SignalKind.SQUARE,
    "Triangle": SignalKind.TRIANGLE,
    "Composite (Sum of Sines)": SignalKind.COMPOSITE,
    "AM Modulated": SignalKind.AM,
    "FM Modulated": SignalKind.FM,
    "White Noise (AWGN)": SignalKind.NOISE,
    "Microphone Input": SignalKind.LIVE_INPUT,
}
FILTER_LABELS = {kind.value.upper(): kind for kind in FilterKind}
MODE_LABELS = {"MAN": TuningMode.MANUAL, "ADAPT": TuningMode.ADAPTIVE}

console_lines = []


def push_frame(frame):
    """Called from the refresh thread with each new AnalysisFrame."""
    if not dpg.is_dearpygui_running():
        return

    # --- TIME DOMAIN ---
    idx = [p.sample_index for p in frame.time_series]
    dpg.set_value("time_raw", [idx, [p.raw_amplitude for p in frame.time_series]])
    dpg.set_value("time_filtered", [idx, [p.filtered_amplitude for p in frame.time_series]])

    # --- SPECTRUM ---
    freqs = [p.frequency_hz for p in frame.frequency_series]
    dpg.set_value("freq_raw", [freqs, [p.raw_magnitude for p in frame.frequency_series]])
    dpg.set_value("freq_filtered", [freqs, [p.filtered_magnitude for p in frame.frequency_series]])
    theory = [p.theoretical_response for p in frame.frequency_series] if state.shared.show_theoretical else []
    dpg.set_value("freq_theory", [freqs if theory else [], theory])

    # --- IMPULSE ---
    dpg.set_value("impulse_series", [[p.step_index for p in frame.impulse_series],
                                     [p.value for p in frame.impulse_series]])

    dpg.set_value("snr_text", f"{frame.snr_db:.1f} dB")
    dpg.set_value("status_text", "SYNCHRONIZED" if frame.status == STATUS_OK else frame.status.upper())


lab = Lab(engine_factory=AudioEngine, input_factory=LiveInputSource, on_frame=push_frame)


def on_console(message, level, timestamp):
    marker = "!" if level >= LogLevel.WARNING else " "
    console_lines.append(f"{timestamp}{marker}{message}")
    del console_lines[:-CONSOLE_LINES]
    if dpg.does_item_exist("console_text"):
        dpg.set_value("console_text", "\n".join(console_lines))


# --- CALLBACKS ---
def toggle_audio(sender, app_data, user_data):
    try:
        lab.toggle()
    except OSError as e:
        logger.error("Audio device unavailable", component="AUDIO", details=str(e))
    dpg.set_item_label("toggle_button", "Terminate Stream" if lab.active else "Initialize Laboratory")
    if not lab.active:
        dpg.set_value("status_text", "STANDBY")


def update_signal(sender, app_data, user_data):
    if user_data == "kind":
        app_data = SIGNAL_LABELS[app_data]
    lab.set_signal(state.shared.signal.with_changes(**{user_data: app_data}))


def update_filter(sender, app_data, user_data):
    if user_data == "kind":
        app_data = FILTER_LABELS[app_data]
    elif user_data == "tuning_mode":
        app_data = MODE_LABELS[app_data]
        dpg.configure_item("autotune_button", show=app_data == TuningMode.ADAPTIVE)
    lab.set_filter(state.shared.filter.with_changes(**{user_data: app_data}))


def auto_tune(sender, app_data, user_data):
    cutoff = lab.auto_tune()
    if cutoff is not None:
        dpg.set_value("cutoff_slider", cutoff)


def update_visual(sender, app_data, user_data):
    setattr(state.shared, user_data, app_data)


# --- DPG GUI SETUP ---
dpg.create_context()
signal = state.shared.signal
filt = state.shared.filter

with dpg.window(tag="Primary Window"):

    # Split Layout: Left (Controls) | Right (Visuals)
    with dpg.group(horizontal=True):

        # --- LEFT PANEL: CONFIGURATION ---
        with dpg.child_window(width=320):
            dpg.add_text("TRANSMITTER SOURCE", color=(59, 130, 246))
            dpg.add_separator()
            dpg.add_combo(list(SIGNAL_LABELS), label="Waveform", default_value="Pure Sine",
                          callback=update_signal, user_data="kind")
            dpg.add_slider_float(label="Carrier Freq", default_value=signal.carrier_frequency_hz,
                                 min_value=100.0, max_value=5000.0, format="%.0f Hz",
                                 callback=update_signal, user_data="carrier_frequency_hz")
            dpg.add_slider_float(label="Mod Freq", default_value=signal.modulator_frequency_hz,
                                 min_value=5.0, max_value=200.0, format="%.0f Hz",
                                 callback=update_signal, user_data="modulator_frequency_hz")
            dpg.add_slider_float(label="Mod Depth", default_value=signal.modulation_depth,
                                 min_value=0.0, max_value=1.0,
                                 callback=update_signal, user_data="modulation_depth")
            dpg.add_slider_float(label="Amplitude", default_value=signal.amplitude,
                                 min_value=0.0, max_value=1.0,
                                 callback=update_signal, user_data="amplitude")
            dpg.add_button(label="Initialize Laboratory", tag="toggle_button", width=-1,
                           callback=toggle_audio)

            dpg.add_spacer(height=20)
            dpg.add_text("FILTER STAGE", color=(16, 185, 129))
            dpg.add_separator()
            dpg.add_radio_button(list(MODE_LABELS), default_value="MAN", horizontal=True,
                                 callback=update_filter, user_data="tuning_mode")
            dpg.add_radio_button(list(FILTER_LABELS), default_value=filt.kind.value.upper(),
                                 horizontal=True, callback=update_filter, user_data="kind")
            dpg.add_slider_float(label="Cutoff (f_c)", tag="cutoff_slider",
                                 default_value=filt.cutoff_hz, min_value=20.0, max_value=8000.0,
                                 format="%.0f Hz", callback=update_filter, user_data="cutoff_hz")
            dpg.add_slider_float(label="Q", default_value=filt.q_factor,
                                 min_value=0.1, max_value=15.0,
                                 callback=update_filter, user_data="q_factor")
            dpg.add_button(label="Analyze & Auto-Tune Cutoff", tag="autotune_button", width=-1,
                           show=False, callback=auto_tune)

            dpg.add_spacer(height=20)
            dpg.add_text("VISUAL SETTINGS", color=(0, 255, 204))
            dpg.add_separator()
            dpg.add_checkbox(label="Theoretical Response", default_value=True,
                             callback=update_visual, user_data="show_theoretical")

            dpg.add_spacer(height=20)
            dpg.add_text("CONSOLE", color=(0, 255, 204))
            dpg.add_text("", tag="console_text", wrap=300)

        # --- RIGHT PANEL: VISUALS ---
        with dpg.child_window(width=-1):

            dpg.add_text("s(t) Temporal Domain")
            with dpg.plot(height=PLOT_HEIGHT, width=-1, no_menus=True):
                dpg.add_plot_axis(dpg.mvXAxis, no_tick_labels=True)
                y_axis = dpg.add_plot_axis(dpg.mvYAxis, label="Amp")
                dpg.set_axis_limits(y_axis, -state.shared.time_y_range, state.shared.time_y_range)
                dpg.add_line_series([], [], label="Input", tag="time_raw", parent=y_axis)
                dpg.add_line_series([], [], label="Filtered", tag="time_filtered", parent=y_axis)

            dpg.add_text("S(f) Spectral Power")
            with dpg.plot(height=PLOT_HEIGHT, width=-1, no_menus=True):
                dpg.add_plot_legend()
                dpg.add_plot_axis(dpg.mvXAxis, label="Hz")
                y_axis = dpg.add_plot_axis(dpg.mvYAxis, label="Mag")
                dpg.set_axis_limits(y_axis, 0.0, 1.2)
                dpg.add_line_series([], [], label="In Spectrum", tag="freq_raw", parent=y_axis)
                dpg.add_line_series([], [], label="Out Spectrum", tag="freq_filtered", parent=y_axis)
                dpg.add_line_series([], [], label="H(f) Theory", tag="freq_theory", parent=y_axis)

            dpg.add_text("h(t) Filter Impulse Response")
            with dpg.plot(height=PLOT_HEIGHT, width=-1, no_menus=True):
                dpg.add_plot_axis(dpg.mvXAxis, no_tick_labels=True)
                y_axis = dpg.add_plot_axis(dpg.mvYAxis)
                dpg.add_shade_series([], [], tag="impulse_series", parent=y_axis)

            dpg.add_spacer(height=10)
            with dpg.group(horizontal=True):
                dpg.add_text("ESTIMATED ATTENUATION GAIN:")
                dpg.add_text("0.0 dB", tag="snr_text", color=(59, 130, 246))
                dpg.add_spacer(width=30)
                dpg.add_text("STATUS:")
                dpg.add_text("STANDBY", tag="status_text", color=(16, 185, 129))
                dpg.add_spacer(width=30)
                dpg.add_text(f"BUFFER: {state.FFT_SIZE} SAMPLES")

# --- STARTUP ---
logger.add_listener(on_console)

dpg.create_viewport(title="CommLab Filter Laboratory", width=W_WIDTH, height=W_HEIGHT)
dpg.setup_dearpygui()
dpg.set_primary_window("Primary Window", True)
dpg.show_viewport()
dpg.start_dearpygui()

# --- CLEANUP ---
logger.remove_listener(on_console)
lab.stop()
dpg.destroy_context()
