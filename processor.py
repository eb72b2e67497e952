from typing import Callable, Dict, Optional, Tuple

from bitops import BitReader, BitWriter, EOD
from errors import CorruptHeaderError, FormatError, TruncatedStreamError
from header import read_header, write_header
from huffman import (
    BITS_PER_INT,
    BITS_PER_WORD,
    PSEUDO_EOF,
    HuffmanNode,
    build_tree,
    count_frequencies,
    count_leaves,
    format_code,
    make_codes,
)

HUFF_NUMBER = 0xFACE8200
HUFF_TREE = HUFF_NUMBER | 1  #: Magic number of the tree-header format

ProgressCallback = Callable[[int, int], None]
DebugCallback = Callable[[str], None]


def write_compressed_bits(
    codes: Dict[int, Tuple[int, int]],
    reader: BitReader,
    writer: BitWriter,
    on_progress: Optional[ProgressCallback] = None,
):
    """Write the code of every byte in ``reader``, then the end-of-stream code.

    :param codes: Code table covering every byte that occurs in ``reader``.
    :type codes: Dict[int, Tuple[int, int]]
    :param reader: Bit source positioned at the first byte.
    :type reader: BitReader
    :param writer: Destination bit sink; closed once the body is written.
    :type writer: BitWriter
    :param on_progress: Optional callback ``on_progress(done, total)`` with
                        the number of input bytes encoded so far.
    :type on_progress: Optional[Callable[[int, int], None]]
    :returns: None
    :rtype: None
    """
    total = len(reader)
    done = 0
    while True:
        value = reader.read_bits(BITS_PER_WORD)
        if value == EOD:
            break
        code, length = codes[value]
        writer.write_bits(code, length)
        done += 1
        if on_progress is not None:
            on_progress(done, total)
    code, length = codes[PSEUDO_EOF]
    writer.write_bits(code, length)
    writer.close()


def decode_symbol(reader: BitReader, root: HuffmanNode) -> int:
    """Walk from ``root`` to a leaf following the bits in ``reader``.

    :param reader: Bit source positioned at the start of a code.
    :type reader: BitReader
    :param root: Root of the decoding tree.
    :type root: HuffmanNode
    :returns: The leaf symbol (a byte value or ``PSEUDO_EOF``), or ``EOD``
              if the bits ran out before a leaf was reached.
    :rtype: int
    """
    node = root
    while not node.is_leaf:
        bit = reader.read_bits(1)
        if bit == EOD:
            return EOD
        node = node.right if bit else node.left
    return node.symbol


def read_compressed_bits(
    root: HuffmanNode,
    reader: BitReader,
    writer: BitWriter,
    on_progress: Optional[ProgressCallback] = None,
):
    """Decode symbols from ``reader`` until the end-of-stream symbol.

    Every decoded byte is written to ``writer`` as an 8-bit unit. Padding
    after the end-of-stream code is never read.

    :param root: Root of the tree parsed from the header.
    :type root: HuffmanNode
    :param reader: Bit source positioned at the first body bit.
    :type reader: BitReader
    :param writer: Destination for the decoded bytes; closed on success.
    :type writer: BitWriter
    :param on_progress: Optional callback ``on_progress(done, total)`` with
                        the number of compressed bits consumed so far.
    :type on_progress: Optional[Callable[[int, int], None]]
    :returns: None
    :rtype: None
    :raises TruncatedStreamError: If the bits run out before the
        end-of-stream code.
    :raises CorruptHeaderError: If the tree is a single literal leaf, which
        leaves no way to encode the end of the stream.
    """
    if root.is_leaf and root.symbol != PSEUDO_EOF:
        raise CorruptHeaderError(
            f"Tree holds the single literal {root.symbol} and no end marker"
        )
    total = reader.bits_read + reader.bits_left()
    while True:
        symbol = decode_symbol(reader, root)
        if symbol == EOD:
            raise TruncatedStreamError(
                f"Stream ended after {reader.bits_read} bits "
                "without an end-of-stream code"
            )
        if symbol == PSEUDO_EOF:
            break
        writer.write_bits(symbol, BITS_PER_WORD)
        if on_progress is not None:
            on_progress(reader.bits_read, total)
    writer.close()


class HuffProcessor:
    """Compressor/decompressor for the Huffman tree-header format.

    Stream layout:
    - Magic: ``HUFF_TREE`` (32 bits)
    - Tree header, pre-order (see :func:`header.write_header`)
    - Body: concatenated codes, ending with the end-of-stream code
    - Zero padding up to the next byte boundary

    Instances hold no state between calls.

    :ivar MAGIC: Magic number written before the tree header.
    :type MAGIC: int
    """

    MAGIC = HUFF_TREE

    def compress(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
        on_debug: Optional[DebugCallback] = None,
    ) -> bytes:
        """Compress ``data``.

        :param data: Input bytes to compress; may be empty.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting input bytes encoded.
        :type on_progress: Optional[Callable[[int, int], None]]
        :param on_debug: Optional callback receiving diagnostic lines.
        :type on_debug: Optional[Callable[[str], None]]
        :returns: Compressed byte stream.
        :rtype: bytes
        """
        reader = BitReader(data)
        counts = count_frequencies(reader)
        root = build_tree(counts)
        codes = make_codes(root)

        if on_debug is not None:
            distinct = sum(1 for c in counts if c > 0)
            on_debug(f"counted {len(data)} bytes, {distinct} distinct symbols")
            for symbol in sorted(codes):
                on_debug(f"encoding for {symbol} is {format_code(*codes[symbol])}")

        output = BitWriter()
        output.write_bits(self.MAGIC, BITS_PER_INT)
        write_header(root, output)
        body_start = output.bits_written

        reader.reset()
        write_compressed_bits(codes, reader, output, on_progress=on_progress)

        if on_debug is not None:
            on_debug(
                f"wrote {body_start - BITS_PER_INT} header bits and "
                f"{output.bits_written - body_start} body bits"
            )

        if on_progress is not None:
            try:
                on_progress(len(data), len(data))
            except Exception:
                pass

        return output.flush()

    def decompress(
        self,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
        on_debug: Optional[DebugCallback] = None,
    ) -> bytes:
        """Decompress data produced by :meth:`compress`.

        :param data: Compressed byte stream.
        :type data: bytes
        :param on_progress: Optional callback ``on_progress(done, total)``
                            reporting compressed bits consumed.
        :type on_progress: Optional[Callable[[int, int], None]]
        :param on_debug: Optional callback receiving diagnostic lines.
        :type on_debug: Optional[Callable[[str], None]]
        :returns: Original uncompressed bytes.
        :rtype: bytes
        :raises FormatError: If the stream does not start with ``MAGIC``.
        :raises CorruptHeaderError: If the tree header is malformed.
        :raises TruncatedStreamError: If the body ends too early.
        """
        reader = BitReader(data)

        magic = reader.read_bits(BITS_PER_INT)
        if magic != self.MAGIC:
            raise FormatError(magic)

        root = read_header(reader)
        if on_debug is not None:
            on_debug(
                f"read tree with {count_leaves(root)} leaves "
                f"in {reader.bits_read - BITS_PER_INT} header bits"
            )

        output = BitWriter()
        read_compressed_bits(root, reader, output, on_progress=on_progress)

        if on_debug is not None:
            on_debug(
                f"read {reader.bits_read} bits, "
                f"wrote {output.bits_written // BITS_PER_WORD} bytes"
            )

        if on_progress is not None:
            total = len(data) * 8
            try:
                on_progress(total, total)
            except Exception:
                pass

        return output.flush()
