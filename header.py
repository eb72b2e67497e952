from bitops import BitReader, BitWriter, EOD
from errors import CorruptHeaderError
from huffman import ALPH_SIZE, PSEUDO_EOF, SYMBOL_BITS, HuffmanNode


def write_header(root: HuffmanNode, writer: BitWriter):
    """Serialize the tree shape in pre-order.

    Internal nodes are written as a single ``0`` bit followed by their left
    and right subtrees; leaves as a ``1`` bit followed by the 9-bit symbol.

    :param root: Root of the tree to serialize.
    :type root: HuffmanNode
    :param writer: Destination bit sink.
    :type writer: BitWriter
    :returns: None
    :rtype: None
    """
    if root.is_leaf:
        writer.write_bits(1, 1)
        writer.write_bits(root.symbol, SYMBOL_BITS)
        return
    writer.write_bits(0, 1)
    write_header(root.left, writer)
    write_header(root.right, writer)


def read_header(reader: BitReader) -> HuffmanNode:
    """Rebuild a tree written by :func:`write_header`.

    Parsed nodes carry weight 0.

    :param reader: Bit source positioned at the start of the header.
    :type reader: BitReader
    :returns: Root of the reconstructed tree.
    :rtype: HuffmanNode
    :raises CorruptHeaderError: If the header is truncated, nests deeper
        than any tree over the symbol alphabet can, or names a symbol
        outside of it.
    """
    return _read_node(reader, 0)


def _read_node(reader: BitReader, depth: int) -> HuffmanNode:
    # A full tree over ALPH_SIZE + 1 leaves is at most ALPH_SIZE deep
    if depth > ALPH_SIZE:
        raise CorruptHeaderError(f"Tree header nests deeper than {ALPH_SIZE}")
    bit = reader.read_bits(1)
    if bit == EOD:
        raise CorruptHeaderError("Tree header is truncated")
    if bit == 0:
        left = _read_node(reader, depth + 1)
        right = _read_node(reader, depth + 1)
        return HuffmanNode(left=left, right=right)
    symbol = reader.read_bits(SYMBOL_BITS)
    if symbol == EOD:
        raise CorruptHeaderError("Tree header is truncated inside a leaf")
    if symbol > PSEUDO_EOF:
        raise CorruptHeaderError(f"Leaf carries invalid symbol {symbol}")
    return HuffmanNode(symbol=symbol)
