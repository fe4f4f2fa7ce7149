"""
Human readable views of a CompressionReport: frequency table, code table,
tree diagram and size stats. Nothing here feeds back into the codec.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import matplotlib.pyplot as plt

from huffcontainer import CompressionReport
from huffman import HuffmanNode

RULE = "=" * 60

_NAMED = {ord(" "): "SPACE", ord("\n"): "NEWLINE", ord("\t"): "TAB", ord("\r"): "RETURN"}


def display_symbol(symbol: int) -> str:
    if symbol in _NAMED:
        return _NAMED[symbol]
    if 0x21 <= symbol <= 0x7E:
        return f"'{chr(symbol)}'"
    return f"0x{symbol:02X}"


def format_frequency_table(frequencies: Dict[int, int], width: int = 20) -> List[str]:
    total = sum(frequencies.values())
    lines = ["Frequency Table:"]
    # Most frequent first, ties by symbol
    for symbol, count in sorted(frequencies.items(), key=lambda kv: (-kv[1], kv[0])):
        bar = "█" * ((count * width) // max(1, total) + 1)
        lines.append(f"  {display_symbol(symbol)} -> {count} times {bar}")
    return lines


def format_codes(codes: Dict[int, str]) -> List[str]:
    lines = ["Huffman Codes:"]
    for symbol, code in sorted(codes.items(), key=lambda kv: (len(kv[1]), kv[1])):
        lines.append(f"  {display_symbol(symbol)} -> {code} ({len(code)} bits)")
    return lines


def format_tree(root: Optional[HuffmanNode]) -> List[str]:
    lines = ["Tree Structure:"]
    if root is None:
        lines.append("  (empty)")
        return lines

    # (node, prefix, is_tail); children pushed right first so left prints first
    stack = [(root, "", True)]
    while stack:
        node, prefix, is_tail = stack.pop()
        connector = "└── " if is_tail else "├── "
        if node.is_leaf():
            lines.append(f"{prefix}{connector}{display_symbol(node.symbol)} ({node.frequency})")
            continue
        lines.append(f"{prefix}{connector}[{node.frequency}]")
        extension = prefix + ("    " if is_tail else "│   ")
        stack.append((node.right, extension, True))
        stack.append((node.left, extension, False))
    return lines


def format_stats(report: CompressionReport) -> List[str]:
    ratio = report.bit_ratio * 100.0
    return [
        "Compression Stats:",
        f"  original: {report.original_bits} bits ({report.original_bytes} bytes x 8)",
        f"  compressed: {report.bit_length} bits",
        f"  ratio: {ratio:.2f}%",
        f"  saved: {100.0 - ratio:.2f}%" if report.original_bytes else "  saved: 0.00%",
        f"  artifact: {report.artifact_bytes} bytes "
        f"(header {report.header_bytes}, payload {report.payload_bytes})",
    ]


def render_report(report: CompressionReport) -> str:
    if not report.original_bytes:
        return "\n".join([RULE, "HUFFMAN TREE VISUALIZATION", RULE, "(empty input)", RULE])

    sections = [
        format_frequency_table(report.frequencies),
        format_codes(report.codes),
        format_tree(report.root),
        format_stats(report),
    ]
    out = [RULE, "HUFFMAN TREE VISUALIZATION", RULE]
    for section in sections:
        out.append("")
        out.extend(section)
    out.append(RULE)
    return "\n".join(out)


def plot_frequencies(report: CompressionReport, path: Path) -> None:
    """
    Bar chart of symbol counts with each bar labelled by its code length
    """
    items = sorted(report.frequencies.items(), key=lambda kv: (-kv[1], kv[0]))
    labels = [display_symbol(s) for s, _ in items]
    counts = [c for _, c in items]
    code_lengths = [len(report.codes.get(s, "")) for s, _ in items]

    plt.figure(figsize=(max(6.0, 0.35 * len(items)), 4.0))
    x = list(range(len(items)))
    plt.bar(x, counts)
    for xi, count, n_bits in zip(x, counts, code_lengths):
        plt.text(xi, count, str(n_bits), ha="center", va="bottom", fontsize=7)
    plt.xticks(x, labels, rotation=90, fontsize=7)
    plt.ylabel("Occurrences")
    plt.title("Symbol Frequencies (bar labels: code length in bits)")
    plt.tight_layout()
    plt.savefig(path, dpi=200)
    plt.close()
