"""
Capture A6 SysEx from a MIDI input port.

Listens on a MIDI input for SysEx messages and collects them into a raw
.syx byte buffer the decoder can read. The A6 sends an update with no
start or end marker, so the capture ends after a total timeout or when
no SysEx has arrived for a while after the first one.

Usage:
    result = capture_sysex("USB Midi Cable", timeout=120, idle_timeout=5)
    image = UpdateReader().parse_bytes(result.data)
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import mido

from a6tools.formats.sysex_parser import FrameExtractor

logger = logging.getLogger(__name__)

SYSEX_START = 0xF0
SYSEX_END = 0xF7

POLL_INTERVAL = 0.005  # seconds


@dataclass
class CaptureResult:
    """Raw bytes and counters from one capture session."""

    port: str
    data: bytes
    message_count: int
    update_frames: int
    idle_stop: bool


def sysex_bytes(messages: Iterable[mido.Message]) -> bytes:
    """
    Serialize SysEx messages to raw ``F0 ... F7`` bytes.

    Messages of any other type are skipped.

    Args:
        messages: mido messages in arrival order

    Returns:
        Raw .syx data
    """
    raw_data = bytearray()
    for msg in messages:
        if msg.type != "sysex":
            continue
        raw_data.append(SYSEX_START)
        raw_data.extend(msg.data)
        raw_data.append(SYSEX_END)
    return bytes(raw_data)


def find_input_port(port_name: Optional[str] = None) -> Optional[str]:
    """
    Find a MIDI input port by name or return the first available.

    An exact name wins over a case-insensitive substring match.

    Args:
        port_name: Full or partial port name (None for auto-detect)

    Returns:
        Port name, or None if no port matches
    """
    ports = mido.get_input_names()
    if not ports:
        return None
    if port_name:
        if port_name in ports:
            return port_name
        matches = [p for p in ports if port_name.lower() in p.lower()]
        return matches[0] if matches else None
    return ports[0]


def capture_sysex(
    port_name: Optional[str] = None,
    timeout: float = 60.0,
    idle_timeout: float = 5.0,
    on_message: Optional[Callable[[mido.Message], None]] = None,
    clock: Callable[[], float] = time.monotonic,
) -> CaptureResult:
    """
    Record SysEx messages from a MIDI input port.

    Args:
        port_name: MIDI port name (auto-detect if None)
        timeout: Maximum total wait time in seconds
        idle_timeout: Stop after this many seconds with no SysEx message,
            once at least one message has arrived
        on_message: Called with every SysEx message received
        clock: Time source

    Returns:
        CaptureResult with the raw .syx data

    Raises:
        OSError: If no matching input port exists
    """
    in_port_name = find_input_port(port_name)
    if not in_port_name:
        raise OSError(f"No MIDI input port found matching {port_name!r}")

    messages: List[mido.Message] = []
    idle_stop = False
    logger.info("Listening on %s", in_port_name)

    with mido.open_input(in_port_name) as inport:
        # Flush pending
        for _ in inport.iter_pending():
            pass

        start_time = clock()
        last_msg_time = start_time

        while True:
            now = clock()
            if now - start_time > timeout:
                logger.info("Total timeout (%ss) reached", timeout)
                break
            if messages and now - last_msg_time > idle_timeout:
                logger.info("Idle timeout (%ss) reached", idle_timeout)
                idle_stop = True
                break

            received = 0
            for msg in inport.iter_pending():
                # Clock and active sensing do not count as activity
                if msg.type != "sysex":
                    continue
                messages.append(msg)
                received += 1
                if on_message is not None:
                    on_message(msg)

            if received:
                last_msg_time = clock()
            else:
                time.sleep(POLL_INTERVAL)

    data = sysex_bytes(messages)
    update_frames = sum(1 for _ in FrameExtractor().extract(data))

    return CaptureResult(
        port=in_port_name,
        data=data,
        message_count=len(messages),
        update_frames=update_frames,
        idle_stop=idle_stop,
    )
