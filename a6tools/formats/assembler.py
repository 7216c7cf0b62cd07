"""
A6 update image assembler.

Collects unpacked update blocks in arrival order and rebuilds the image
they belong to. Blocks are placed by their header index, so arrival order
does not matter; the first block received fixes the version, checksum,
length and block count that every other block must repeat.
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Tuple, Union

from a6tools.formats.block import (
    BLOCK_DATA_LEN,
    BLOCK_HEAD_LEN,
    IMAGE_MAX_BYTES,
    BlockHeader,
    data_length_for,
    format_version,
)
from a6tools.formats.sysex_parser import UpdateKind
from a6tools.utils.checksum import calculate_checksum, subtract_checksum
from a6tools.utils.validation import (
    ChecksumMismatch,
    DecodeError,
    DuplicateBlock,
    IndexOutOfRange,
    InvalidBlockCount,
    InvalidImageLength,
    MissingBlocks,
    block_count_for,
    require_same,
)

logger = logging.getLogger(__name__)

# Header field positions, for error offsets
VERSION_POS = 0
CHECKSUM_POS = 4
LENGTH_POS = 8
BLOCK_COUNT_POS = 12
BLOCK_INDEX_POS = 14


@dataclass(frozen=True)
class Image:
    """
    A verified update image.

    Attributes:
        data: Image bytes, exactly ``length`` long
        version: Firmware version from the block headers
        checksum: Checksum from the block headers
        length: Image length in bytes
        block_count: Number of blocks the image was sent in
        kind: OS or bootloader image, when known
    """

    data: bytes
    version: int
    checksum: int
    length: int
    block_count: int
    kind: Optional[UpdateKind] = None

    @property
    def version_string(self) -> str:
        return format_version(self.version)

    def metadata(self) -> List[Tuple[str, str]]:
        """Label/value pairs describing the image."""
        rows = [
            ("Version", self.version_string),
            ("Checksum", f"{self.checksum:08X}"),
            ("Length", f"{self.length} bytes"),
            ("Blocks", f"{self.block_count} {BLOCK_DATA_LEN}-byte blocks"),
        ]
        if self.kind is not None:
            rows.append(("Kind", self.kind.value))
        return rows

    def write_to(self, stream: BinaryIO) -> "Image":
        """Write the image bytes to a binary stream."""
        stream.write(self.data)
        return self


class BlockAssembler:
    """
    Builds one update image from its blocks.

    Construct one assembler per image. Any fatal DecodeError halts the
    assembler: later ``ingest`` and ``finalize`` calls raise the same error.

    Example:
        assembler = BlockAssembler()
        for opcode, block in FrameExtractor().extract(data).blocks():
            assembler.ingest(block)
        image = assembler.finalize()
    """

    def __init__(self, capacity: int = IMAGE_MAX_BYTES, strict: bool = False):
        """
        Args:
            capacity: Largest image length to accept, in bytes
            strict: Treat duplicate blocks as fatal instead of warning
        """
        if capacity > IMAGE_MAX_BYTES:
            raise ValueError(
                f"Capacity {capacity} is beyond the supported maximum of {IMAGE_MAX_BYTES} bytes"
            )

        self.capacity = capacity
        self.strict = strict

        self.header: Optional[BlockHeader] = None
        self.warnings: List[DecodeError] = []
        self.error: Optional[DecodeError] = None

        # Position of the next block in the unpacked block stream
        self.position = 0
        # Image bytes stored so far
        self.consumed = 0

        self._blocks: List[Optional[bytes]] = []
        self._sum = 0

    @property
    def checksum(self) -> int:
        """Running 32-bit sum of the stored data."""
        return self._sum

    @property
    def received(self) -> int:
        """Number of distinct blocks stored."""
        return sum(1 for block in self._blocks if block is not None)

    @property
    def first_missing_block(self) -> Optional[int]:
        if self.header is None:
            return 0
        for index, block in enumerate(self._blocks):
            if block is None:
                return index
        return None

    def ingest(self, block: Union[bytes, bytearray]) -> None:
        """
        Add one unpacked block to the image in progress.

        Args:
            block: Unpacked block bytes (header + data)

        Raises:
            MalformedBlock: Block is not BLOCK_LEN bytes
            InvalidImageLength: First header declares an oversized image
            InvalidBlockCount: First header's block count does not fit its length
            InconsistentHeader: Header disagrees with the first block
            IndexOutOfRange: Block index is not below the block count
            DuplicateBlock: Index received twice, in strict mode only
        """
        self._check_halted()
        try:
            self._ingest(block)
        except DecodeError as e:
            self.error = e
            raise

    def finalize(self) -> Image:
        """
        Verify the image and return it.

        Raises:
            MissingBlocks: No blocks received, or a gap remains
            ChecksumMismatch: Data sum disagrees with the header checksum
        """
        self._check_halted()
        try:
            return self._finalize()
        except DecodeError as e:
            self.error = e
            raise

    def _check_halted(self) -> None:
        if self.error is not None:
            raise self.error

    def _ingest(self, block: Union[bytes, bytearray]) -> None:
        position = self.position
        header = BlockHeader.unpack(block, position)
        index = header.block_index

        if self.header is None:
            self._check_length(header)
            self.header = header
            self._blocks = [None] * header.block_count
        else:
            self._check_match(header, position)

        if not 0 <= index < header.block_count:
            raise IndexOutOfRange(index, header.block_count, position + BLOCK_INDEX_POS)

        size = data_length_for(index, header.length)
        data = bytes(block[BLOCK_HEAD_LEN : BLOCK_HEAD_LEN + size])

        previous = self._blocks[index]
        if previous is not None:
            duplicate = DuplicateBlock(index, position + BLOCK_INDEX_POS)
            if self.strict:
                raise duplicate
            logger.warning("%s", duplicate)
            self.warnings.append(duplicate)

            # Newer copy replaces the older one
            self._sum = subtract_checksum(self._sum, previous)
            self.consumed -= len(previous)

        self._blocks[index] = data
        self._sum = calculate_checksum(data, self._sum)
        self.consumed += size
        self.position += len(block)

        logger.debug(
            "Block %d/%d: %d data bytes, running sum %08X",
            index,
            header.block_count,
            size,
            self._sum,
        )

    def _check_length(self, header: BlockHeader) -> None:
        """Validate the image length and block count of the first block."""
        if header.length > self.capacity:
            raise InvalidImageLength(header.length, self.capacity)

        expected = block_count_for(header.length, BLOCK_DATA_LEN)
        if header.block_count != expected:
            raise InvalidBlockCount(header.block_count, expected)

    def _check_match(self, header: BlockHeader, position: int) -> None:
        """Verify that a header repeats the first block's fields."""
        reference = self.header
        index = header.block_index

        require_same(
            "version", header.version, reference.version, index, position + VERSION_POS
        )
        require_same(
            "checksum", header.checksum, reference.checksum, index, position + CHECKSUM_POS
        )
        require_same("length", header.length, reference.length, index, position + LENGTH_POS)
        require_same(
            "block count",
            header.block_count,
            reference.block_count,
            index,
            position + BLOCK_COUNT_POS,
        )

    def _finalize(self) -> Image:
        missing = self.first_missing_block
        if missing is not None:
            raise MissingBlocks(missing)

        header = self.header
        if self._sum != header.checksum:
            raise ChecksumMismatch(header.checksum, self._sum)

        return Image(
            data=b"".join(self._blocks),
            version=header.version,
            checksum=header.checksum,
            length=header.length,
            block_count=header.block_count,
        )
