"""Live MIDI capture of A6 SysEx updates."""

from a6tools.midi.capture import CaptureResult, capture_sysex, find_input_port, sysex_bytes

__all__ = ["CaptureResult", "capture_sysex", "find_input_port", "sysex_bytes"]
