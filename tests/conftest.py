"""Test configuration and fixtures."""

import sys
from pathlib import Path
from typing import List, Optional

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from a6tools.formats.block import BLOCK_DATA_LEN, BlockHeader
from a6tools.utils.checksum import calculate_checksum
from a6tools.utils.seven_bit import encode_7bit

FRAME_PREFIX = bytes([0xF0, 0x00, 0x00, 0x0E, 0x1D])
VERSION = 20003  # 2.0.3


def build_blocks(
    image: bytes,
    version: int = VERSION,
    checksum: Optional[int] = None,
    length: Optional[int] = None,
    block_count: Optional[int] = None,
    pad: int = 0xEE,
) -> List[bytes]:
    """Split an image into unpacked 272-byte update blocks."""
    length = len(image) if length is None else length
    checksum = calculate_checksum(image) if checksum is None else checksum
    count = -(-length // BLOCK_DATA_LEN) if block_count is None else block_count

    blocks = []
    for index in range(count):
        data = image[index * BLOCK_DATA_LEN : (index + 1) * BLOCK_DATA_LEN]
        data = data.ljust(BLOCK_DATA_LEN, bytes([pad]))
        header = BlockHeader(version, checksum, length, count, index)
        blocks.append(header.pack() + data)
    return blocks


def build_frame(block: bytes, opcode: int = 0x30) -> bytes:
    """Wrap an unpacked block in an A6 SysEx frame."""
    return FRAME_PREFIX + bytes([opcode]) + encode_7bit(block) + b"\xf7"


def sample_image(length: int, seed: int = 3) -> bytes:
    return bytes((i * 7 + seed) & 0xFF for i in range(length))


@pytest.fixture
def image_600():
    """600-byte image spanning three blocks (256 + 256 + 88)."""
    return sample_image(600)


@pytest.fixture
def blocks_600(image_600):
    return build_blocks(image_600)


@pytest.fixture
def make_blocks():
    return build_blocks


@pytest.fixture
def make_frame():
    return build_frame


@pytest.fixture
def update_syx(blocks_600, make_frame):
    """Raw capture of the 600-byte image with noise between frames."""
    noise = bytes([0xF8, 0x90, 0x3C, 0x40])
    return noise.join(make_frame(block) for block in blocks_600) + noise


@pytest.fixture
def update_file(tmp_path, update_syx):
    path = tmp_path / "a6_os_2_0_3.syx"
    path.write_bytes(update_syx)
    return path
