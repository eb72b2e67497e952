import argparse
import os
import sys

from errors import HuffError
from processor import HuffProcessor

SUFFIX = ".hf"  #: Default extension of compressed files


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Huffman-tree file compressor"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    compress = subparsers.add_parser(
        "compress", aliases=["c"], help="Compress a file"
    )
    compress.add_argument("input", help="File to compress")
    compress.add_argument(
        "-o", "--output", help=f"Output file path (default: INPUT{SUFFIX})"
    )

    decompress = subparsers.add_parser(
        "decompress", aliases=["d"], help="Decompress a file"
    )
    decompress.add_argument("input", help="Compressed file to restore")
    decompress.add_argument(
        "-o",
        "--output",
        help=f"Output file path (default: INPUT without {SUFFIX})",
    )

    for sub in (compress, decompress):
        sub.add_argument(
            "-P",
            "--no-progress",
            action="store_true",
            help="Hide the progress line",
        )
        sub.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Print code table and bit counts to stderr",
        )

    return parser


def _default_output(input_path: str, compressing: bool) -> str:
    """Derive an output path when ``-o`` is not given.

    :param input_path: Path of the file being processed.
    :type input_path: str
    :param compressing: ``True`` for compression, ``False`` otherwise.
    :type compressing: bool
    :returns: Output file path.
    :rtype: str
    """
    if compressing:
        return input_path + SUFFIX
    if input_path.endswith(SUFFIX) and len(input_path) > len(SUFFIX):
        return input_path[:-len(SUFFIX)]
    return input_path + ".out"


def _print_progress(line: str) -> None:
    """Render and flush a single progress line in-place (carriage return).

    :param line: The textual progress line to display.
    :type line: str
    :returns: None
    :rtype: None
    """
    sys.stdout.write("\r" + line)
    sys.stdout.flush()


def _print_debug(line: str) -> None:
    print(line, file=sys.stderr)


def _fmt_pct(done: int, total: int) -> str:
    """Format a completion percentage string like ``12.34%``.

    :param done: Units completed.
    :type done: int
    :param total: Total units to complete.
    :type total: int
    :returns: Percentage.
    :rtype: str
    """
    if total <= 0:
        return "0%"
    pct = 100.0 * (done / float(total))
    return f"{pct:6.2f}%"


def _fmt_bytes(n: int) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


class FileProgress:
    """Callable progress reporter for one file.

    Redraws the line only when the whole-percent value changes.

    :ivar label: Action label (e.g., "Compressing" or "Decompressing").
    :type label: str
    :ivar path: Path displayed for the file being processed.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress display.

        :param done: Units processed so far.
        :type done: int
        :param total: Total units for the file.
        :type total: int
        :returns: None
        :rtype: None
        """
        if total <= 0:
            return
        percent_bucket = int((done * 100) / total)
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def _read_input(path: str):
    try:
        with open(path, "rb") as f:
            return f.read()
    except FileNotFoundError:
        print(f"[!] Input file not found: {path}")
        return None


def compress_file(
    input_path: str, output_path: str, hide_progress: bool,
    verbose: bool = False,
) -> bool:
    """Compress ``input_path`` into ``output_path``.

    :param input_path: File to compress.
    :type input_path: str
    :param output_path: Destination file path.
    :type output_path: str
    :param hide_progress: Whether to suppress the progress line.
    :type hide_progress: bool
    :param verbose: Whether to print diagnostics to stderr.
    :type verbose: bool
    :returns: ``True`` if the output file was written.
    :rtype: bool
    """
    data = _read_input(input_path)
    if data is None:
        return False
    on_prog = None if hide_progress else FileProgress("Compressing", input_path)
    comp = HuffProcessor().compress(
        data,
        on_progress=on_prog,
        on_debug=_print_debug if verbose else None,
    )
    with open(output_path, "wb") as out:
        out.write(comp)
    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()
    print("Size before compression: ", _fmt_bytes(len(data)))
    print("Size after compression: ", _fmt_bytes(len(comp)))
    print(f"Compression ratio: {len(data) / len(comp):.2f}")
    return True


def decompress_file(
    input_path: str, output_path: str, hide_progress: bool,
    verbose: bool = False,
) -> bool:
    """Restore a file written by :func:`compress_file`.

    Nothing is written when the input is malformed.

    :param input_path: Compressed file.
    :type input_path: str
    :param output_path: Destination file path.
    :type output_path: str
    :param hide_progress: Whether to suppress the progress line.
    :type hide_progress: bool
    :param verbose: Whether to print diagnostics to stderr.
    :type verbose: bool
    :returns: ``True`` if the output file was written.
    :rtype: bool
    :raises HuffError: If the compressed data is malformed.
    """
    comp = _read_input(input_path)
    if comp is None:
        return False
    on_prog = (
        None if hide_progress else FileProgress("Decompressing", input_path)
    )
    data = HuffProcessor().decompress(
        comp,
        on_progress=on_prog,
        on_debug=_print_debug if verbose else None,
    )
    out_dir = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(out_dir, exist_ok=True)
    with open(output_path, "wb") as out:
        out.write(data)
    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()
    print("Restored size: ", _fmt_bytes(len(data)))
    return True


def main(argv=None) -> int:
    """Entry point for the CLI tool.

    :param argv: Argument list; defaults to ``sys.argv[1:]``.
    :type argv: List[str] | None
    :returns: Process exit status.
    :rtype: int
    """
    parser = get_parser()
    args = parser.parse_args(argv)

    compressing = args.cmd in ["compress", "c"]
    output = args.output or _default_output(args.input, compressing)
    try:
        if compressing:
            ok = compress_file(
                args.input, output, args.no_progress, args.verbose
            )
        else:
            ok = decompress_file(
                args.input, output, args.no_progress, args.verbose
            )
    except HuffError as e:
        if not args.no_progress:
            sys.stdout.write("\n")
        print(f"[!] Cannot decompress {args.input}: {e}")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
