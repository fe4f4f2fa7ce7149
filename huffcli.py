"""
huffpack command line front end

How to run:
  huffpack compress notes.txt notes.huff
  huffpack decompress notes.huff notes.out
  huffpack decompress notes.huff            (writes the text to stdout)
  huffpack visualize --text "hello world"
  huffpack visualize --file notes.txt --chart freqs.png
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import huffcontainer
import huffviz
from huffman import HuffmanError
from hufflog import logger


def cmd_compress(args: argparse.Namespace) -> int:
    report = huffcontainer.compress_file(args.src, args.dst)
    logger.debug(f"{len(report.frequencies)} unique symbols, root weight {report.original_bytes}")
    ratio = report.compression_ratio * 100.0
    logger.log(
        f"encoded {report.original_bytes} bytes -> {report.artifact_bytes} bytes "
        f"({ratio:.2f}%) into {args.dst}"
    )
    return 0


def cmd_decompress(args: argparse.Namespace) -> int:
    data = huffcontainer.decompress_file(args.src, args.dst)
    if args.dst is None:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    else:
        logger.log(f"decoded {Path(args.src).stat().st_size} bytes -> {len(data)} bytes into {args.dst}")
    return 0


def cmd_visualize(args: argparse.Namespace) -> int:
    if args.text is not None:
        data = args.text.encode("utf-8")
    else:
        data = Path(args.file).read_bytes()

    if not data:
        logger.error("can't visualize empty text")
        return 1

    report = huffcontainer.analyze(data)
    print(huffviz.render_report(report))
    if args.chart:
        huffviz.plot_frequencies(report, Path(args.chart))
        logger.log(f"chart saved to {args.chart}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="huffpack", description="Huffman file compressor")
    ap.add_argument("-v", "--verbose", action="store_true", help="Print debug diagnostics")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("compress", help="Compress SRC into the artifact DST")
    p.add_argument("src", type=str, help="Input file")
    p.add_argument("dst", type=str, help="Output artifact")
    p.set_defaults(func=cmd_compress)

    p = sub.add_parser("decompress", help="Restore the original bytes from an artifact")
    p.add_argument("src", type=str, help="Compressed artifact")
    p.add_argument("dst", type=str, nargs="?", default=None, help="Output file (stdout when omitted)")
    p.set_defaults(func=cmd_decompress)

    p = sub.add_parser("visualize", help="Show frequency table, codes and tree for some input")
    source = p.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", type=str, help="Literal text to analyze (UTF-8 encoded)")
    source.add_argument("--file", type=str, help="File to analyze")
    p.add_argument("--chart", type=str, default=None, help="Optional PNG path for a frequency chart")
    p.set_defaults(func=cmd_visualize)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger.set_logger_id("huffpack")
    logger.set_verbose(args.verbose)
    try:
        return args.func(args)
    except HuffmanError as e:
        logger.error(f"{args.command} failed: {e}")
    except OSError as e:
        logger.error(f"{args.command} failed: {e}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
