import random

import pytest

from bitops import BitReader
from huffman import (
    ALPH_SIZE,
    PSEUDO_EOF,
    HuffmanNode,
    build_tree,
    count_frequencies,
    count_leaves,
    format_code,
    make_codes,
)


def _counts(mapping):
    counts = [0] * (ALPH_SIZE + 1)
    for symbol, count in mapping.items():
        counts[symbol] = count
    return counts


def _is_full(node):
    if node.is_leaf:
        return True
    if node.left is None or node.right is None:
        return False
    return _is_full(node.left) and _is_full(node.right)


def test_count_frequencies_basic():
    counts = count_frequencies(BitReader(b"AAAB"))
    assert len(counts) == ALPH_SIZE + 1
    assert counts[65] == 3
    assert counts[66] == 1
    assert counts[PSEUDO_EOF] == 1
    assert sum(counts) == 5


def test_count_frequencies_empty_has_only_eof():
    counts = count_frequencies(BitReader(b""))
    assert counts[PSEUDO_EOF] == 1
    assert sum(counts) == 1


def test_count_frequencies_eof_slot_not_from_data():
    counts = count_frequencies(BitReader(bytes(range(256)) * 3))
    assert counts[:ALPH_SIZE] == [3] * ALPH_SIZE
    assert counts[PSEUDO_EOF] == 1


def test_build_tree_aaab(aaab_tree):
    root = build_tree(_counts({65: 3, 66: 1, PSEUDO_EOF: 1}))
    assert root.weight == 5
    assert root == aaab_tree
    assert root.left.weight == 2
    assert _is_full(root)


def test_build_tree_single_symbol_is_leaf():
    root = build_tree(_counts({PSEUDO_EOF: 1}))
    assert root.is_leaf
    assert root.symbol == PSEUDO_EOF
    assert make_codes(root) == {PSEUDO_EOF: (0, 0)}


def test_build_tree_skips_zero_counts():
    root = build_tree(_counts({10: 4, 20: 0, PSEUDO_EOF: 1}))
    assert count_leaves(root) == 2
    assert set(make_codes(root)) == {10, PSEUDO_EOF}


def test_build_tree_no_symbols_raises():
    with pytest.raises(ValueError):
        build_tree([0] * (ALPH_SIZE + 1))


def test_build_tree_is_deterministic_with_ties():
    counts = _counts({s: 1 for s in range(0, 257, 7)})
    assert build_tree(counts) == build_tree(list(counts))


def test_build_tree_weights_sum_children():
    root = build_tree(_counts({1: 5, 2: 9, 3: 12, 4: 13, 5: 16, 6: 45}))

    def check(node):
        if node.is_leaf:
            return
        assert node.weight == node.left.weight + node.right.weight
        check(node.left)
        check(node.right)

    check(root)
    assert root.weight == 100


def test_make_codes_aaab(aaab_tree):
    codes = make_codes(aaab_tree)
    assert codes[65] == (1, 1)
    assert codes[66] == (0b00, 2)
    assert codes[PSEUDO_EOF] == (0b01, 2)


def test_codes_are_prefix_free_for_random_tables():
    rng = random.Random(1234)
    for _ in range(25):
        symbols = rng.sample(range(ALPH_SIZE + 1), rng.randint(2, 257))
        counts = _counts({s: rng.randint(1, 1000) for s in symbols})
        codes = [
            format_code(*c) for c in make_codes(build_tree(counts)).values()
        ]
        assert len(codes) == len(symbols)
        for a in codes:
            for b in codes:
                if a is not b:
                    assert not b.startswith(a)


def test_lighter_symbols_never_get_shorter_codes():
    counts = _counts({ord("e"): 100, ord("z"): 1, ord("q"): 2, PSEUDO_EOF: 1})
    codes = make_codes(build_tree(counts))
    assert codes[ord("e")][1] <= codes[ord("q")][1] <= codes[ord("z")][1]


def test_format_code():
    assert format_code(0, 0) == ""
    assert format_code(1, 1) == "1"
    assert format_code(0b01, 2) == "01"
    assert format_code(5, 5) == "00101"


def test_node_equality_ignores_weight():
    a = HuffmanNode(left=HuffmanNode(symbol=1, weight=4),
                    right=HuffmanNode(symbol=2, weight=9), weight=13)
    b = HuffmanNode(left=HuffmanNode(symbol=1), right=HuffmanNode(symbol=2))
    c = HuffmanNode(left=HuffmanNode(symbol=2), right=HuffmanNode(symbol=1))
    assert a == b
    assert a != c
    assert a != HuffmanNode(symbol=1)
