"""
Decode errors for A6 update images.

Every error carries the context needed for a readable diagnostic as
attributes; ``str(error)`` gives a ready-made message. The decoder itself
never prints.
"""

from typing import Optional


class DecodeError(ValueError):
    """Raised when SysEx update data cannot be decoded into an image."""

    fatal = True


class MalformedBlock(DecodeError):
    """An unpacked block does not have the fixed block length."""

    def __init__(self, actual: int, expected: int, offset: int = 0):
        self.actual = actual
        self.expected = expected
        self.offset = offset
        super().__init__(
            f"at blocks offset {offset}: expected block of {expected} bytes, "
            f"but got {actual} bytes"
        )


class InvalidImageLength(DecodeError):
    """The image length in the first header exceeds the decoder capacity."""

    def __init__(self, actual: int, maximum: int):
        self.actual = actual
        self.maximum = maximum
        super().__init__(
            f"invalid image length: {actual} bytes; the maximum image length is {maximum} bytes"
        )


class InvalidBlockCount(DecodeError):
    """The block count in the first header does not fit the image length."""

    def __init__(self, actual: int, expected: int):
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"invalid block count: {actual} blocks; this image requires {expected} blocks"
        )


class InconsistentHeader(DecodeError):
    """A later block disagrees with the first block on a header field."""

    def __init__(
        self, field: str, expected: int, actual: int, index: Optional[int] = None, offset: int = 0
    ):
        self.field = field
        self.expected = expected
        self.actual = actual
        self.index = index
        self.offset = offset
        super().__init__(
            f"at blocks offset {offset}: {field} does not match previous blocks "
            f"(expected 0x{expected:X}, found 0x{actual:X})"
        )


class IndexOutOfRange(DecodeError):
    """A block index is not below the declared block count."""

    def __init__(self, index: int, block_count: int, offset: int = 0):
        self.index = index
        self.block_count = block_count
        self.offset = offset
        super().__init__(
            f"at blocks offset {offset}: block index {index} is out of range "
            f"(image has {block_count} blocks)"
        )


class DuplicateBlock(DecodeError):
    """A block index was received more than once.

    Not fatal by default: the decoder reports it and keeps the newer copy.
    """

    fatal = False

    def __init__(self, index: int, offset: int = 0):
        self.index = index
        self.offset = offset
        super().__init__(f"at blocks offset {offset}: duplicate block {index}")


class MissingBlocks(DecodeError):
    """The image was finalized with one or more blocks never received."""

    def __init__(self, first_missing_index: int):
        self.first_missing_index = first_missing_index
        super().__init__(
            f"one or more blocks missing, starting at block {first_missing_index}"
        )


class ChecksumMismatch(DecodeError):
    """The computed data sum disagrees with the header checksum."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"header checksum 0x{expected:08X} does not match calculated sum 0x{actual:08X}"
        )


class InconsistentOpcode(DecodeError):
    """A frame's opcode differs from the opcode of the first frame."""

    def __init__(self, offset: int, expected: int, actual: int):
        self.offset = offset
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"sysex offset {offset}: expected {expected:02X}, but found {actual:02X}"
        )


def block_count_for(length: int, data_len: int = 256) -> int:
    """
    Number of data blocks needed to carry ``length`` image bytes.

    Args:
        length: Image length in bytes
        data_len: Data bytes per block

    Returns:
        Ceiling of ``length / data_len``
    """
    return -(-length // data_len)


def require_same(field: str, actual: int, expected: int, index: int, offset: int) -> None:
    """
    Check a header field against the value recorded from the first block.

    Raises:
        InconsistentHeader: If the values differ
    """
    if actual != expected:
        raise InconsistentHeader(field, expected, actual, index=index, offset=offset)
