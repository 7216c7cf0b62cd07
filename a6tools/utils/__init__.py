"""Utility functions for a6tools."""

from a6tools.utils.seven_bit import encode_7bit, decode_7bit, decoded_length, encoded_length
from a6tools.utils.checksum import calculate_checksum, subtract_checksum

__all__ = [
    "encode_7bit",
    "decode_7bit",
    "decoded_length",
    "encoded_length",
    "calculate_checksum",
    "subtract_checksum",
]
