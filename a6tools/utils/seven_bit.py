"""
A6 7-bit packing utilities.

MIDI SysEx data bytes must have the high bit (bit 7) clear, so the A6
spreads its 8-bit update data over 7-bit bytes as one continuous
little-endian bit stream:

- Every 7 bytes of raw 8-bit data become 8 bytes of 7-bit data
- Bits are taken least significant first; no separate high-bit header
- Leftover bits at the end are padded with zeros

Bit layout of one group (decoding direction):

    input   leftover        output
    0:      ........ .0000000   (not enough bits for a byte)
    1:      ..111111 10000000 -> byte
    2:      ...22222 22111111 -> byte
    ...
    7:      ........ 77777776 -> byte

Example:
    Input:  [0x71, 0x45, 0x4F, 0x26, 0x5C, 0x56, 0x69, 0x4B]  (8 bytes)
    Output: [0xF1, 0xE2, 0xD3, 0xC4, 0xB5, 0xA6, 0x97]        (7 bytes)
"""

from typing import List, Union


def decode_7bit(encoded_data: Union[bytes, bytearray, List[int]]) -> bytes:
    """
    Unpack A6 7-bit data to 8-bit raw data.

    For every 8 bytes of encoded data, produces 7 bytes of decoded data.
    A trailing partial group yields one byte less than its length, and its
    final leftover bits are dropped.

    Args:
        encoded_data: The 7-bit data run from a SysEx frame

    Returns:
        Decoded 8-bit raw data

    Example:
        >>> decode_7bit(bytes([0x71, 0x45]))
        b'\\xf1'
    """
    result = bytearray()
    bits8 = 0

    for offset, bits7 in enumerate(encoded_data):
        bits7 &= 0x7F
        n = offset % 8

        if n == 0:
            # No leftover bits: 7 bits are not enough for a byte yet
            bits8 = bits7
        else:
            bits8 |= bits7 << (8 - n)
            result.append(bits8 & 0xFF)
            bits8 >>= 8

    return bytes(result)


def encode_7bit(raw_data: Union[bytes, bytearray, List[int]]) -> bytes:
    """
    Pack 8-bit raw data into A6 7-bit format.

    For every 7 bytes of raw data, produces 8 bytes of encoded data. Any
    leftover bits of a partial group are emitted zero-padded as one final
    byte.

    Args:
        raw_data: The raw 8-bit data to pack

    Returns:
        7-bit data suitable for a SysEx frame
    """
    result = bytearray()
    data = 0  # shift register
    bits = 0  # leftover bits from the previous byte

    for byte in raw_data:
        data |= (byte & 0xFF) << bits
        result.append(data & 0x7F)
        data >>= 7
        bits += 1

        # Every 7 bytes, 7 leftover bits have accrued
        if bits == 7:
            result.append(data & 0x7F)
            data = 0
            bits = 0

    if bits > 0:
        result.append(data & 0x7F)

    return bytes(result)


def decoded_length(encoded_length: int) -> int:
    """Number of bytes ``decode_7bit`` yields for ``encoded_length`` input bytes."""
    return encoded_length - (encoded_length + 7) // 8


def encoded_length(raw_length: int) -> int:
    """Number of bytes ``encode_7bit`` yields for ``raw_length`` input bytes."""
    return raw_length + (raw_length + 6) // 7
