"""
Pure Python Apple PackBits decoder.

PackBits uses a single header byte per packet:

- Values 0-127: Copy the next (n+1) literal bytes
- Values 129-255: Repeat the next byte (257-n) times
- Value 128: No-op

Example::

    from psd2png.compression.rle import decode

    decode(b'\\xfe\\x01\\x00\\x02', 4)  # b'\\x01\\x01\\x01\\x02'
"""


def decode(data: bytes, size: int) -> bytes:
    """decode(data, size) -> bytes

    Apple PackBits RLE decoder. ``size`` is the expected decoded length;
    packets that overrun it or a short result raise :exc:`ValueError`.
    """

    i, j = 0, 0
    length = len(data)
    data = bytearray(data)
    result = bytearray()

    if length == 1:
        if data[0] != 128:
            raise ValueError("Invalid RLE compression")
        return bytes(result)

    while i < length:
        i, bit = i + 1, data[i]
        if bit > 128:
            bit = 256 - bit
            if i >= length or j + 1 + bit > size:
                raise ValueError("Invalid RLE compression")
            result.extend((data[i : i + 1]) * (1 + bit))
            j += 1 + bit
            i += 1
        elif bit < 128:
            if i + 1 + bit > length or (j + 1 + bit > size):
                raise ValueError("Invalid RLE compression")
            result.extend(data[i : i + 1 + bit])
            j += 1 + bit
            i += 1 + bit

    if size and (len(result) != size):
        raise ValueError("Expected %d bytes but decoded %d bytes" % (size, j))

    return bytes(result)
