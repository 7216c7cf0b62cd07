"""Tests for the A6 update block assembler."""

import io
import itertools
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from a6tools.formats.assembler import BlockAssembler
from a6tools.formats.block import BLOCK_LEN, IMAGE_MAX_BYTES, BlockHeader, data_length_for
from a6tools.utils.checksum import calculate_checksum
from a6tools.utils.validation import (
    ChecksumMismatch,
    DuplicateBlock,
    IndexOutOfRange,
    InconsistentHeader,
    InvalidBlockCount,
    InvalidImageLength,
    MalformedBlock,
    MissingBlocks,
)


def with_header(block: bytes, **fields) -> bytes:
    """Copy of ``block`` with some header fields replaced."""
    header = BlockHeader.unpack(block)
    values = {
        "version": header.version,
        "checksum": header.checksum,
        "length": header.length,
        "block_count": header.block_count,
        "block_index": header.block_index,
    }
    values.update(fields)
    return BlockHeader(**values).pack() + block[16:]


class TestBlockHeader:
    """Test header parsing."""

    def test_unpack_fields(self):
        block = bytes(range(16)) + bytes(256)
        header = BlockHeader.unpack(block)

        assert header.version == 0x00010203
        assert header.checksum == 0x04050607
        assert header.length == 0x08090A0B
        assert header.block_count == 0x0C0D
        assert header.block_index == 0x0E0F

    def test_unpack_wrong_size(self):
        with pytest.raises(MalformedBlock) as exc_info:
            BlockHeader.unpack(bytes(42))
        assert exc_info.value.actual == 42
        assert exc_info.value.expected == BLOCK_LEN

    def test_version_string(self):
        header = BlockHeader(20003, 0, 0, 0, 0)
        assert header.version_string == "2.0.3"
        assert BlockHeader(10112, 0, 0, 0, 0).version_string == "1.1.12"

    def test_data_length_for(self):
        assert [data_length_for(i, 600) for i in range(4)] == [256, 256, 88, 0]
        assert data_length_for(1, 512) == 256


class TestBlockAssembler:
    """Test cases for image assembly."""

    def test_out_of_order(self, image_600, blocks_600):
        """Ingest index 1, then 0, then 2."""
        assembler = BlockAssembler()
        for index in (1, 0, 2):
            assembler.ingest(blocks_600[index])

        image = assembler.finalize()

        assert image.data == image_600
        assert len(image.data) == 600
        assert image.length == 600
        assert image.block_count == 3
        assert image.version == 20003
        assert image.checksum == calculate_checksum(image_600)
        assert assembler.consumed == 600
        assert assembler.warnings == []

    def test_any_order_same_image(self, image_600, blocks_600):
        """Arrival order does not change the result."""
        for order in itertools.permutations(range(3)):
            assembler = BlockAssembler()
            for index in order:
                assembler.ingest(blocks_600[index])
            assert assembler.finalize().data == image_600

    def test_duplicate_warns_and_continues(self, image_600, blocks_600):
        """A repeated block is reported and the image still verifies."""
        assembler = BlockAssembler()
        for index in (1, 0, 1, 2):
            assembler.ingest(blocks_600[index])

        image = assembler.finalize()

        assert image.data == image_600
        assert len(assembler.warnings) == 1
        warning = assembler.warnings[0]
        assert isinstance(warning, DuplicateBlock)
        assert warning.index == 1
        assert not warning.fatal
        assert assembler.consumed == 600
        assert assembler.received == 3

    def test_duplicate_overwrites(self, image_600, make_blocks):
        """The newer copy of a block replaces the older one."""
        final = image_600[:256] + bytes([0x55] * 256) + image_600[512:]
        old_blocks = make_blocks(image_600, checksum=calculate_checksum(final))
        new_blocks = make_blocks(final)

        assembler = BlockAssembler()
        assembler.ingest(old_blocks[0])
        assembler.ingest(old_blocks[1])
        assembler.ingest(new_blocks[1])
        assembler.ingest(new_blocks[2])

        assert assembler.finalize().data == final

    def test_duplicate_strict(self, blocks_600):
        """In strict mode a duplicate is fatal."""
        assembler = BlockAssembler(strict=True)
        assembler.ingest(blocks_600[0])

        with pytest.raises(DuplicateBlock) as exc_info:
            assembler.ingest(blocks_600[0])
        assert exc_info.value.index == 0

        with pytest.raises(DuplicateBlock):
            assembler.finalize()

    def test_missing_block(self, make_blocks):
        """Two declared blocks, only index 0 received."""
        blocks = make_blocks(bytes(range(256)) * 2)
        assembler = BlockAssembler()
        assembler.ingest(blocks[0])

        with pytest.raises(MissingBlocks) as exc_info:
            assembler.finalize()
        assert exc_info.value.first_missing_index == 1

    def test_finalize_early_never_partial(self, blocks_600):
        """Every incomplete subset fails to finalize."""
        for count in range(3):
            for subset in itertools.combinations(range(3), count):
                assembler = BlockAssembler()
                for index in subset:
                    assembler.ingest(blocks_600[index])
                with pytest.raises(MissingBlocks):
                    assembler.finalize()

    def test_finalize_empty(self):
        with pytest.raises(MissingBlocks) as exc_info:
            BlockAssembler().finalize()
        assert exc_info.value.first_missing_index == 0

    def test_malformed_block(self, blocks_600):
        assembler = BlockAssembler()
        with pytest.raises(MalformedBlock) as exc_info:
            assembler.ingest(blocks_600[0][:-1])
        assert exc_info.value.actual == BLOCK_LEN - 1

    @pytest.mark.parametrize(
        "field, changes",
        [
            ("version", {"version": 20004}),
            ("checksum", {"checksum": 1}),
            ("length", {"length": 599}),
            ("block count", {"block_count": 4}),
        ],
    )
    def test_inconsistent_header(self, blocks_600, field, changes):
        """Later blocks must repeat the first block's header."""
        assembler = BlockAssembler()
        assembler.ingest(blocks_600[0])

        with pytest.raises(InconsistentHeader) as exc_info:
            assembler.ingest(with_header(blocks_600[1], **changes))

        error = exc_info.value
        assert error.field == field
        assert error.index == 1
        assert error.actual == list(changes.values())[0]

    def test_inconsistent_header_offset(self, blocks_600):
        assembler = BlockAssembler()
        assembler.ingest(blocks_600[0])

        with pytest.raises(InconsistentHeader) as exc_info:
            assembler.ingest(with_header(blocks_600[1], checksum=1))
        assert exc_info.value.offset == BLOCK_LEN + 4
        assert exc_info.value.expected == BlockHeader.unpack(blocks_600[0]).checksum

    def test_index_out_of_range(self, blocks_600):
        assembler = BlockAssembler()
        assembler.ingest(blocks_600[0])

        with pytest.raises(IndexOutOfRange) as exc_info:
            assembler.ingest(with_header(blocks_600[2], block_index=3))
        assert exc_info.value.index == 3
        assert exc_info.value.block_count == 3

    def test_halted_after_error(self, blocks_600):
        """A fatal error blocks further ingestion and finalize."""
        assembler = BlockAssembler()
        assembler.ingest(blocks_600[0])

        with pytest.raises(InconsistentHeader) as exc_info:
            assembler.ingest(with_header(blocks_600[1], version=1))

        with pytest.raises(InconsistentHeader) as again:
            assembler.ingest(blocks_600[1])
        assert again.value is exc_info.value

        with pytest.raises(InconsistentHeader):
            assembler.finalize()

    def test_checksum_mismatch(self, image_600, make_blocks):
        good = calculate_checksum(image_600)
        blocks = make_blocks(image_600, checksum=good + 1)
        assembler = BlockAssembler()
        for block in blocks:
            assembler.ingest(block)

        with pytest.raises(ChecksumMismatch) as exc_info:
            assembler.finalize()
        assert exc_info.value.expected == good + 1
        assert exc_info.value.actual == good

    def test_checksum_is_32_bit(self, make_blocks):
        """The sum is not truncated to 16 bits."""
        image = bytes([0xFF] * 600)
        full = calculate_checksum(image)
        assert full > 0xFFFF

        assembler = BlockAssembler()
        for block in make_blocks(image):
            assembler.ingest(block)
        assert assembler.finalize().checksum == full

        truncated = BlockAssembler()
        for block in make_blocks(image, checksum=full & 0xFFFF):
            truncated.ingest(block)
        with pytest.raises(ChecksumMismatch):
            truncated.finalize()

    def test_padding_not_counted(self, image_600, make_blocks):
        """Bytes past the image length are ignored."""
        blocks = make_blocks(image_600, pad=0xFF)
        assembler = BlockAssembler()
        for block in blocks:
            assembler.ingest(block)

        image = assembler.finalize()
        assert image.data == image_600
        assert assembler.checksum == calculate_checksum(image_600)

    def test_image_length_over_capacity(self, image_600, blocks_600):
        assembler = BlockAssembler(capacity=512)
        with pytest.raises(InvalidImageLength) as exc_info:
            assembler.ingest(blocks_600[0])
        assert exc_info.value.actual == 600
        assert exc_info.value.maximum == 512

    def test_block_count_must_fit_length(self, image_600, make_blocks):
        blocks = make_blocks(image_600, block_count=4)
        with pytest.raises(InvalidBlockCount) as exc_info:
            BlockAssembler().ingest(blocks[0])
        assert exc_info.value.actual == 4
        assert exc_info.value.expected == 3

    def test_capacity_limit(self):
        with pytest.raises(ValueError):
            BlockAssembler(capacity=IMAGE_MAX_BYTES + 1)

    def test_independent_assemblers(self, make_blocks):
        """Images with different versions decode separately."""
        first = make_blocks(bytes(range(256)), version=10000)
        second = make_blocks(bytes(range(255, -1, -1)) * 2, version=20000)

        a = BlockAssembler()
        b = BlockAssembler()
        for block in first:
            a.ingest(block)
        for block in second:
            b.ingest(block)

        assert a.finalize().version_string == "1.0.0"
        assert b.finalize().version_string == "2.0.0"

    def test_image_metadata(self, blocks_600):
        assembler = BlockAssembler()
        for block in blocks_600:
            assembler.ingest(block)
        metadata = dict(assembler.finalize().metadata())

        assert metadata["Version"] == "2.0.3"
        assert metadata["Length"] == "600 bytes"
        assert metadata["Blocks"] == "3 256-byte blocks"
        assert "Kind" not in metadata

    def test_image_write_to(self, image_600, blocks_600):
        assembler = BlockAssembler()
        for block in blocks_600:
            assembler.ingest(block)
        image = assembler.finalize()

        stream = io.BytesIO()
        assert image.write_to(stream) is image
        assert stream.getvalue() == image_600
