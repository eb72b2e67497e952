EOD = -1  #: Sentinel returned by :meth:`BitReader.read_bits` when data runs out


class BitWriter:
    """Bit-packing writer.

    Accumulates individual bits into bytes and buffers them until
    flushed.

    :ivar buffer: Internal byte buffer holding fully written bytes.
    :type buffer: bytearray
    :ivar bit_buffer: 8-bit scratch register for accumulating pending bits.
    :type bit_buffer: int
    :ivar bit_count: Number of valid bits currently stored in ``bit_buffer`` (0-7).
    :type bit_count: int
    :ivar bits_written: Total payload bits written, padding excluded.
    :type bits_written: int
    """

    def __init__(self):
        self.buffer = bytearray()
        self.bit_buffer = 0
        self.bit_count = 0
        self.bits_written = 0

    def write_bits(self, value: int, nbits: int):
        """Write the lowest ``nbits`` of ``value`` to the buffer, MSB first.

        :param value: Integer whose bits will be written.
        :type value: int
        :param nbits: Number of bits from ``value`` to write. Zero is a no-op.
        :type nbits: int
        :returns: None
        :rtype: None
        """
        for i in range(nbits - 1, -1, -1):
            self.bit_buffer = (self.bit_buffer << 1) | ((value >> i) & 1)
            self.bit_count += 1
            if self.bit_count == 8:
                self.buffer.append(self.bit_buffer)
                self.bit_buffer = 0
                self.bit_count = 0
        self.bits_written += max(nbits, 0)

    def flush(self) -> bytes:
        """Pad the pending partial byte with zeros and return all bytes.

        Calling it more than once is harmless: padding happens only while
        bits are pending.

        :returns: The accumulated bytes written so far.
        :rtype: bytes
        """
        if self.bit_count > 0:
            self.bit_buffer <<= (8 - self.bit_count)
            self.buffer.append(self.bit_buffer)
            self.bit_buffer = 0
            self.bit_count = 0
        return bytes(self.buffer)

    close = flush


class BitReader:
    """Bit reader over a bytes-like object.

    Unlike a plain file, the source can be rewound with :meth:`reset`, which
    the compressor needs to traverse its input twice.

    :ivar data: Input data to read bits from.
    :type data: bytes
    :ivar pos: Index of the next unread byte in ``data``.
    :type pos: int
    :ivar bit_buffer: Scratch register holding the current source byte.
    :type bit_buffer: int
    :ivar bit_count: Number of unread bits remaining in ``bit_buffer`` (0-8).
    :type bit_count: int
    :ivar bits_read: Total bits consumed since the last reset.
    :type bits_read: int
    """

    def __init__(self, data: bytes):
        self.data = data
        self.reset()

    def __len__(self) -> int:
        """Size of the underlying data in bytes."""
        return len(self.data)

    def reset(self):
        """Rewind to the first bit of the data.

        :returns: None
        :rtype: None
        """
        self.pos = 0
        self.bit_buffer = 0
        self.bit_count = 0
        self.bits_read = 0

    def bits_left(self) -> int:
        """Number of bits that can still be read."""
        return (len(self.data) - self.pos) * 8 + self.bit_count

    def read_bits(self, nbits: int) -> int:
        """Read ``nbits`` bits from the stream and return them as an integer.

        Bits are returned MSB-first in the integer. When fewer than ``nbits``
        bits remain nothing is consumed and :data:`EOD` is returned.

        :param nbits: Number of bits to read.
        :type nbits: int
        :returns: The next ``nbits`` bits, or ``EOD``.
        :rtype: int
        """
        if nbits > self.bits_left():
            return EOD
        result = 0
        for _ in range(nbits):
            if self.bit_count == 0:
                self.bit_buffer = self.data[self.pos]
                self.pos += 1
                self.bit_count = 8
            result = (result << 1) | ((self.bit_buffer >> (self.bit_count - 1)) & 1)
            self.bit_count -= 1
        self.bits_read += nbits
        return result
