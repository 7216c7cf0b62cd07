"""
A6 SysEx frame extractor.

Scans raw MIDI data for Alesis Andromeda A6 System Exclusive messages and
unpacks their 7-bit payloads.

A6 SysEx Format:
- Manufacturer ID: 00 00 0E (Alesis)
- Family ID: 1D (Andromeda)

Frame Format:
    F0 00 00 0E 1D OP [data...] F7

Where:
    - OP: Opcode (0x30 = OS update block, 0x3F = bootloader update block)
    - data: 7-bit packed payload (311 bytes per update block)

Anything that does not match this format is treated as noise and skipped.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import AbstractSet, Iterator, Optional, Tuple, Union

from a6tools.utils.seven_bit import decode_7bit

logger = logging.getLogger(__name__)


class Opcode(IntEnum):
    """Operation types in an A6 SysEx message."""

    PGM_DUMP = 0x00
    PGM_DUMP_REQ = 0x01
    PGM_EDIT_BUF_DUMP = 0x02
    PGM_EDIT_BUF_DUMP_REQ = 0x03
    MIX_DUMP = 0x04
    MIX_DUMP_REQ = 0x05
    MIX_EDIT_BUF_DUMP = 0x06
    MIX_EDIT_BUF_DUMP_REQ = 0x07
    GLOBAL_DATA_DUMP = 0x08
    GLOBAL_DATA_DUMP_REQ = 0x09
    PGM_BANK_REQ = 0x0A
    MIX_BANK_REQ = 0x0B
    DUMP_ALL_REQ = 0x0C
    MODE_SELECT = 0x0D
    EDIT = 0x0E
    UPDATE_OS = 0x30
    UPDATE_BOOT = 0x3F


class UpdateKind(Enum):
    """Kind of update image carried by a SysEx stream."""

    OS = "os"
    BOOT = "boot"

    @classmethod
    def from_opcode(cls, opcode: int) -> Optional["UpdateKind"]:
        """Stream kind for a first-frame opcode, or None for non-update opcodes."""
        if opcode == Opcode.UPDATE_OS:
            return cls.OS
        if opcode == Opcode.UPDATE_BOOT:
            return cls.BOOT
        return None


UPDATE_OPCODES = frozenset({Opcode.UPDATE_OS, Opcode.UPDATE_BOOT})
ALL_OPCODES = frozenset(range(0x80))


def opcode_name(opcode: int) -> str:
    """Readable name for an opcode, or its hex value if unknown."""
    try:
        return Opcode(opcode).name
    except ValueError:
        return f"0x{opcode:02X}"


@dataclass
class SysExFrame:
    """
    One A6 SysEx message found in a capture.

    Attributes:
        offset: Position of the F0 byte in the source buffer
        opcode: Opcode byte
        payload: 7-bit data run, exactly as captured
    """

    offset: int
    opcode: int
    payload: bytes

    # Position of the opcode byte relative to F0
    OPCODE_POS = 5

    @property
    def opcode_offset(self) -> int:
        return self.offset + self.OPCODE_POS

    @property
    def end(self) -> int:
        """Position just past the F7 byte."""
        return self.offset + self.OPCODE_POS + len(self.payload) + 2

    @property
    def decoded(self) -> bytes:
        """Payload unpacked to 8-bit bytes."""
        return decode_7bit(self.payload)


class SysExFrames:
    """
    Lazy, restartable sequence of the frames in one buffer.

    Every iteration rescans the buffer from the start.
    """

    def __init__(self, data: bytes, pattern: "re.Pattern"):
        self.data = data
        self._pattern = pattern

    def __iter__(self) -> Iterator[SysExFrame]:
        position = 0

        for match in self._pattern.finditer(self.data):
            start = match.start()
            if start > position:
                logger.debug("Skipped %d bytes at offset %d", start - position, position)

            frame = SysExFrame(offset=start, opcode=match.group(1)[0], payload=match.group(2))
            logger.debug(
                "Frame at offset %d: opcode %s, %d data bytes",
                frame.offset,
                opcode_name(frame.opcode),
                len(frame.payload),
            )
            yield frame
            position = match.end()

        if position < len(self.data):
            logger.debug(
                "Skipped %d bytes at offset %d", len(self.data) - position, position
            )

    def blocks(self) -> Iterator[Tuple[int, bytes]]:
        """Yield ``(opcode, unpacked block bytes)`` for every frame."""
        for frame in self:
            yield frame.opcode, frame.decoded


class FrameExtractor:
    """
    Extractor for A6 SysEx frames.

    Example:
        extractor = FrameExtractor()

        for opcode, block in extractor.extract(data).blocks():
            print(f"Opcode {opcode:02X}: {len(block)} bytes")
    """

    # Constants
    SYSEX_START = 0xF0
    SYSEX_END = 0xF7
    SIGNATURE = bytes([0x00, 0x00, 0x0E, 0x1D])

    def __init__(self, opcodes: Optional[AbstractSet[int]] = None):
        """
        Args:
            opcodes: Opcodes to accept (default: OS and bootloader update)
        """
        self.opcodes = frozenset(UPDATE_OPCODES if opcodes is None else opcodes)
        self._pattern = self._compile(self.opcodes)

    @classmethod
    def _compile(cls, opcodes: AbstractSet[int]) -> "re.Pattern":
        invalid = [op for op in opcodes if not 0x00 <= op <= 0x7F]
        if invalid or not opcodes:
            raise ValueError(f"Opcodes must be non-empty and in 0x00-0x7F, got {sorted(opcodes)}")

        opcode_class = b"".join(re.escape(bytes([op])) for op in sorted(opcodes))
        return re.compile(
            re.escape(bytes([cls.SYSEX_START]))
            + re.escape(cls.SIGNATURE)
            + b"([" + opcode_class + b"])"
            + b"([\x00-\x7f]*)"
            + re.escape(bytes([cls.SYSEX_END])),
        )

    def extract(self, data: Union[bytes, bytearray, memoryview]) -> SysExFrames:
        """
        Find all matching frames in a buffer.

        Args:
            data: Raw captured bytes

        Returns:
            Restartable sequence of SysExFrame
        """
        return SysExFrames(bytes(data), self._pattern)

    def frames(self, data: Union[bytes, bytearray, memoryview]) -> Iterator[SysExFrame]:
        """Iterate over the frames in ``data``."""
        return iter(self.extract(data))
