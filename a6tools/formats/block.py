"""
A6 update block layout.

Each SysEx update frame unpacks to one fixed-size block:

    Offset  Size  Field
    0x00    4     Version (major * 10000 + minor * 100 + patch)
    0x04    4     Checksum (32-bit sum of all image data bytes)
    0x08    4     Image length in bytes
    0x0C    2     Block count
    0x0E    2     Block index (0-based)
    0x10    256   Data

All header fields are big-endian.
"""

import struct
from dataclasses import dataclass
from typing import Union

from a6tools.utils.validation import MalformedBlock

HEADER_FORMAT = ">IIIHH"

BLOCK_HEAD_LEN = 16  # Unpacked header length (bytes)
BLOCK_DATA_LEN = 256  # Unpacked data length (bytes)
BLOCK_LEN = BLOCK_HEAD_LEN + BLOCK_DATA_LEN
BLOCK_7BIT_LEN = 311  # Packed SysEx payload length (bytes)

# Largest image the A6 update protocol carries
IMAGE_MAX_BYTES = 2 * 1024 * 1024


def format_version(version: int) -> str:
    """Format a packed version number as ``major.minor.patch``."""
    return f"{version // 10000}.{version // 100 % 100}.{version % 100}"


@dataclass(frozen=True)
class BlockHeader:
    """
    Metadata at the start of every update block.

    Attributes:
        version: Firmware version of the image
        checksum: Checksum of the whole image
        length: Length of the whole image in bytes
        block_count: Number of 256-byte blocks in the image
        block_index: 0-based position of this block
    """

    version: int
    checksum: int
    length: int
    block_count: int
    block_index: int

    @classmethod
    def unpack(cls, block: Union[bytes, bytearray], offset: int = 0) -> "BlockHeader":
        """
        Read the header of an unpacked block.

        Args:
            block: Unpacked block bytes (exactly BLOCK_LEN)
            offset: Stream offset of the block, for diagnostics

        Returns:
            Parsed header

        Raises:
            MalformedBlock: If the block is not exactly BLOCK_LEN bytes
        """
        if len(block) != BLOCK_LEN:
            raise MalformedBlock(len(block), BLOCK_LEN, offset)
        return cls(*struct.unpack_from(HEADER_FORMAT, block))

    def pack(self) -> bytes:
        """Serialize the header to its 16-byte wire form."""
        return struct.pack(
            HEADER_FORMAT,
            self.version,
            self.checksum,
            self.length,
            self.block_count,
            self.block_index,
        )

    @property
    def version_string(self) -> str:
        return format_version(self.version)


def data_length_for(index: int, length: int) -> int:
    """
    Usable data bytes in block ``index`` of an image of ``length`` bytes.

    Every block carries BLOCK_DATA_LEN bytes except the last, which carries
    the remainder.
    """
    return max(0, min(length - index * BLOCK_DATA_LEN, BLOCK_DATA_LEN))
