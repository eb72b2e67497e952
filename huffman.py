import heapq
import itertools
from typing import Dict, List, Tuple

from bitops import BitReader, EOD

BITS_PER_WORD = 8
BITS_PER_INT = 32
ALPH_SIZE = 1 << BITS_PER_WORD
PSEUDO_EOF = ALPH_SIZE  #: End-of-stream symbol, one past the largest byte
SYMBOL_BITS = BITS_PER_WORD + 1  #: Enough bits for 0..PSEUDO_EOF


class HuffmanNode:
    """Node for a binary Huffman tree.

    A node is either a leaf (no children) or internal (exactly two
    children). Internal nodes keep ``symbol`` at 0 as a placeholder.

    :ivar symbol: Byte value or ``PSEUDO_EOF`` stored at a leaf.
    :type symbol: int
    :ivar weight: Weight of the subtree rooted at this node.
    :type weight: int
    :ivar left: Left child node (bit 0).
    :type left: HuffmanNode | None
    :ivar right: Right child node (bit 1).
    :type right: HuffmanNode | None
    """

    def __init__(self, symbol=0, weight=0, left=None, right=None):
        self.symbol = symbol
        self.weight = weight
        self.left = left
        self.right = right

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    def __eq__(self, other):
        """Compare tree shape and leaf symbols, ignoring weights.

        Parsed trees carry no weights, so only structure takes part.
        """
        if not isinstance(other, HuffmanNode):
            return NotImplemented
        if self.is_leaf or other.is_leaf:
            return (
                self.is_leaf and other.is_leaf
                and self.symbol == other.symbol
            )
        return self.left == other.left and self.right == other.right

    __hash__ = None

    def __repr__(self):
        if self.is_leaf:
            return f"HuffmanNode(symbol={self.symbol}, weight={self.weight})"
        return (
            f"HuffmanNode(weight={self.weight}, "
            f"left={self.left!r}, right={self.right!r})"
        )


def count_frequencies(reader: BitReader) -> List[int]:
    """Count occurrences of every byte value in ``reader``.

    The ``PSEUDO_EOF`` slot is always 1, it never comes from the data.

    :param reader: Bit source positioned at the first byte.
    :type reader: BitReader
    :returns: List of ``ALPH_SIZE + 1`` counts indexed by symbol.
    :rtype: List[int]
    """
    counts = [0] * (ALPH_SIZE + 1)
    while True:
        value = reader.read_bits(BITS_PER_WORD)
        if value == EOD:
            break
        counts[value] += 1
    counts[PSEUDO_EOF] = 1
    return counts


def build_tree(counts: List[int]) -> HuffmanNode:
    """Build a Huffman tree by repeatedly merging the two lightest nodes.

    Only symbols with a positive count get a leaf. Equal weights are
    ordered by insertion: leaves in ascending symbol order, then merged
    nodes in the order they were created. The first node popped becomes
    the left child.

    :param counts: Count per symbol, as returned by :func:`count_frequencies`.
    :type counts: List[int]
    :returns: Root of the tree; a leaf when only one symbol occurs.
    :rtype: HuffmanNode
    :raises ValueError: If no symbol has a positive count.
    """
    sequence = itertools.count()
    heap = [
        (count, next(sequence), HuffmanNode(symbol=symbol, weight=count))
        for symbol, count in enumerate(counts)
        if count > 0
    ]
    if not heap:
        raise ValueError("Cannot build a Huffman tree without symbols")
    heapq.heapify(heap)

    while len(heap) > 1:
        _, _, left = heapq.heappop(heap)
        _, _, right = heapq.heappop(heap)
        weight = left.weight + right.weight
        merged = HuffmanNode(weight=weight, left=left, right=right)
        heapq.heappush(heap, (weight, next(sequence), merged))

    return heap[0][2]


def make_codes(root: HuffmanNode) -> Dict[int, Tuple[int, int]]:
    """Assign every leaf the path leading to it from ``root``.

    :param root: Root of a Huffman tree.
    :type root: HuffmanNode
    :returns: Mapping from symbol to ``(code, length)``; a leaf root gets
              the empty code ``(0, 0)``.
    :rtype: Dict[int, Tuple[int, int]]
    """
    codes: Dict[int, Tuple[int, int]] = {}
    _collect_codes(root, 0, 0, codes)
    return codes


def _collect_codes(node: HuffmanNode, code: int, length: int, codes: Dict):
    if node.is_leaf:
        codes[node.symbol] = (code, length)
        return
    _collect_codes(node.left, code << 1, length + 1, codes)
    _collect_codes(node.right, (code << 1) | 1, length + 1, codes)


def format_code(code: int, length: int) -> str:
    """Render a ``(code, length)`` pair as a string of ``0`` and ``1``."""
    if length == 0:
        return ""
    return format(code, f"0{length}b")


def count_leaves(root: HuffmanNode) -> int:
    if root.is_leaf:
        return 1
    return count_leaves(root.left) + count_leaves(root.right)
