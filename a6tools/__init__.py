"""
a6tools - Decoder for Alesis Andromeda A6 SysEx software updates.

This library provides tools to:
- Extract A6 SysEx frames from a raw MIDI capture (.syx)
- Unpack the 7-bit frame payloads into 8-bit update blocks
- Reassemble the blocks into a verified OS or bootloader image

Example usage:
    from a6tools import UpdateReader

    image = UpdateReader.read("a6_os_2_0_0.syx")
    print(f"Version {image.version_string}, {image.length} bytes")

    with open("a6_os.bin", "wb") as f:
        image.write_to(f)
"""

__version__ = "0.2.0"
__author__ = "a6tools Contributors"

from a6tools.formats.assembler import BlockAssembler, Image
from a6tools.formats.block import BlockHeader
from a6tools.formats.reader import UpdateKind, UpdateReader
from a6tools.formats.sysex_parser import FrameExtractor, Opcode, SysExFrame
from a6tools.utils.validation import DecodeError

__all__ = [
    "BlockAssembler",
    "BlockHeader",
    "DecodeError",
    "FrameExtractor",
    "Image",
    "Opcode",
    "SysExFrame",
    "UpdateKind",
    "UpdateReader",
]
