"""
A6 update image checksum utilities.

The checksum stored in every block header is the plain sum of all image
data bytes, wrapped to 32 bits. Header and padding bytes past the image
length are not included.
"""

from typing import List, Union

CHECKSUM_MASK = 0xFFFFFFFF


def calculate_checksum(data: Union[bytes, bytearray, List[int]], initial: int = 0) -> int:
    """
    Calculate the 32-bit wrapping byte sum of ``data``.

    Args:
        data: Image data bytes
        initial: Running sum to continue from

    Returns:
        Checksum value (0 to 0xFFFFFFFF)

    Example:
        >>> calculate_checksum(bytes([0xFF, 0xFF, 0x02]))
        512
    """
    return (initial + sum(data)) & CHECKSUM_MASK


def subtract_checksum(total: int, data: Union[bytes, bytearray, List[int]]) -> int:
    """Remove the contribution of ``data`` from a running checksum."""
    return (total - sum(data)) & CHECKSUM_MASK
