"""Format handlers for A6 SysEx update streams."""

from a6tools.formats.assembler import BlockAssembler, Image
from a6tools.formats.block import BlockHeader
from a6tools.formats.reader import UpdateReader
from a6tools.formats.sysex_parser import FrameExtractor, Opcode, SysExFrame, UpdateKind

__all__ = [
    "BlockAssembler",
    "BlockHeader",
    "FrameExtractor",
    "Image",
    "Opcode",
    "SysExFrame",
    "UpdateKind",
    "UpdateReader",
]
