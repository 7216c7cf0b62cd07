"""
A6 SysEx update reader.

Reads .syx captures containing an A6 OS or bootloader update and returns
the reassembled binary image.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Union

from a6tools.formats.assembler import BlockAssembler, Image
from a6tools.formats.block import IMAGE_MAX_BYTES
from a6tools.formats.sysex_parser import (
    UPDATE_OPCODES,
    FrameExtractor,
    SysExFrame,
    UpdateKind,
)
from a6tools.utils.validation import DecodeError, InconsistentOpcode

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray]


class UpdateReader:
    """
    Reader for A6 SysEx update files.

    The first frame's opcode selects the stream kind (OS or bootloader);
    every later frame, across all buffers, must carry the same opcode.
    One reader decodes one image.

    Example:
        image = UpdateReader.read("a6_os.syx")
        print(f"OS {image.version_string}: {image.length} bytes")

        # Capture split over several files
        reader = UpdateReader()
        image = reader.parse_buffers([part1, part2])
    """

    def __init__(
        self,
        capacity: int = IMAGE_MAX_BYTES,
        strict: bool = False,
        extractor: Optional[FrameExtractor] = None,
    ):
        """
        Args:
            capacity: Largest image length to accept, in bytes
            strict: Treat duplicate blocks as fatal
            extractor: Frame extractor (default: update opcodes only)
        """
        self.extractor = extractor or FrameExtractor(UPDATE_OPCODES)
        self.assembler = BlockAssembler(capacity=capacity, strict=strict)
        self.first_opcode: Optional[int] = None
        self.kind: Optional[UpdateKind] = None
        self.frame_count = 0

    @classmethod
    def read(cls, filepath: Union[str, Path], **kwargs) -> Image:
        """
        Read an A6 SysEx update file and return the image.

        Args:
            filepath: Path to .syx file
            **kwargs: Passed to the constructor

        Returns:
            Verified Image
        """
        reader = cls(**kwargs)
        return reader.parse_file(filepath)

    def parse_file(self, filepath: Union[str, Path]) -> Image:
        """
        Parse a SysEx file.

        Args:
            filepath: Path to .syx file

        Returns:
            Verified Image
        """
        filepath = Path(filepath)

        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")

        with open(filepath, "rb") as f:
            data = f.read()

        return self.parse_bytes(data)

    def parse_bytes(self, data: Buffer) -> Image:
        """Decode a single buffer holding a complete update."""
        return self.parse_buffers([data])

    def parse_buffers(self, buffers: Iterable[Buffer]) -> Image:
        """
        Decode an update spread across several buffers, in order.

        Args:
            buffers: Raw capture buffers

        Returns:
            Verified Image
        """
        for data in buffers:
            self.feed(data)
        return self.finish()

    def feed(self, data: Buffer) -> None:
        """
        Add every update block found in ``data`` to the image in progress.

        Raises:
            InconsistentOpcode: A frame's opcode differs from the first frame's
            DecodeError: A block fails validation
        """
        for frame in self.extractor.extract(data):
            self._check_opcode(frame)
            self.assembler.ingest(frame.decoded)
            self.frame_count += 1

    def finish(self) -> Image:
        """Verify the collected blocks and return the image."""
        image = self.assembler.finalize()
        logger.debug(
            "Decoded %s image %s from %d frames",
            self.kind.value if self.kind else "unknown",
            image.version_string,
            self.frame_count,
        )
        return replace(image, kind=self.kind)

    @property
    def warnings(self) -> List[DecodeError]:
        return self.assembler.warnings

    def read_blocks(self, buffers: Iterable[Buffer]) -> bytes:
        """
        Unpack all frames without assembling them.

        Args:
            buffers: Raw capture buffers

        Returns:
            Concatenated unpacked blocks, in arrival order
        """
        blocks = bytearray()
        for data in buffers:
            for frame in self.extractor.extract(data):
                self._check_opcode(frame)
                blocks.extend(frame.decoded)
                self.frame_count += 1
        return bytes(blocks)

    def _check_opcode(self, frame: SysExFrame) -> None:
        if self.first_opcode is None:
            self.first_opcode = frame.opcode
            self.kind = UpdateKind.from_opcode(frame.opcode)
        elif frame.opcode != self.first_opcode:
            raise InconsistentOpcode(frame.opcode_offset, self.first_opcode, frame.opcode)
