import sys
from pathlib import Path
import importlib
import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture()
def m():
    """Lazily import the main module for tests to avoid module-level import."""
    return importlib.import_module("main")


@pytest.fixture()
def no_progress(monkeypatch, m):
    """Suppress progress rendering in main module during tests."""
    calls = []

    def _stub(line: str):
        calls.append(line)

    monkeypatch.setattr(m, "_print_progress", _stub)
    return calls


@pytest.fixture()
def progress_recorder():
    """Provide a reusable progress callback and its call log."""
    calls = []

    def cb(done, total):
        calls.append((done, total))

    return cb, calls


@pytest.fixture()
def sample_file(tmp_path: Path):
    """Write a small text file with a skewed byte distribution."""
    path = tmp_path / "sample.txt"
    path.write_bytes(b"abracadabra, abracadabra!\n" * 200 + bytes(range(256)))
    return path


@pytest.fixture()
def aaab_tree():
    """Tree built from the counts of ``b"AAAB"``."""
    from huffman import PSEUDO_EOF, HuffmanNode

    return HuffmanNode(
        weight=5,
        left=HuffmanNode(
            weight=2,
            left=HuffmanNode(symbol=66, weight=1),
            right=HuffmanNode(symbol=PSEUDO_EOF, weight=1),
        ),
        right=HuffmanNode(symbol=65, weight=3),
    )
