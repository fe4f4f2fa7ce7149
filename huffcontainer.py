"""
Self-describing artifact format for Huffman compressed data.

Layout (ASCII header, then binary payload):

    <tableSize>\\n
    <symbol>:<code>\\n        repeated tableSize times
    END_HEADER\\n
    <bitLength>\\n
    <payload bytes, MSB first, zero padded to a byte boundary>
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import huffbits
from huffman import (
    HeaderMalformedError,
    HuffmanNode,
    PrefixCollisionError,
    analyze_frequency,
    build_huffman_tree,
    check_prefix_free,
    generate_huffman_codes,
)

END_HEADER = b"END_HEADER"
EMPTY_ARTIFACT = b"0\n" + END_HEADER + b"\n0\n"
MAX_INT_DIGITS = 20 # count and bit length fields; anything longer is corrupt

PathLike = Union[str, "os.PathLike[str]"]


@dataclass
class CompressionReport:
    frequencies: Dict[int, int]
    root: Optional[HuffmanNode]
    codes: Dict[int, str]
    original_bytes: int
    bit_length: int
    header_bytes: int
    payload_bytes: int
    artifact: bytes = field(repr=False, default=b"")

    @property
    def original_bits(self) -> int:
        return self.original_bytes * 8

    @property
    def artifact_bytes(self) -> int:
        return self.header_bytes + self.payload_bytes

    @property
    def bit_ratio(self) -> float: # payload bits / original bits
        return self.bit_length / self.original_bits if self.original_bytes else 0.0

    @property
    def compression_ratio(self) -> float: # whole artifact / original, header included
        return self.artifact_bytes / max(1, self.original_bytes)


# Encoding

def write_header(code_map: Dict[int, str], bit_length: int) -> bytes:
    lines = [str(len(code_map))]
    for symbol in sorted(code_map):
        lines.append(f"{symbol}:{code_map[symbol]}")
    lines.append(END_HEADER.decode("ascii"))
    lines.append(str(bit_length))
    return ("\n".join(lines) + "\n").encode("ascii")


def write_artifact(code_map: Dict[int, str], bits: str) -> bytes:
    return write_header(code_map, len(bits)) + huffbits.pack_bits(bits)


def analyze(data: bytes) -> CompressionReport:
    """
    Runs the whole compression pipeline and returns every intermediate result
    (frequency table, tree, code table, sizes) alongside the finished artifact.
    """
    data = _as_bytes(data)
    if not data:
        return CompressionReport(
            frequencies={},
            root=None,
            codes={},
            original_bytes=0,
            bit_length=0,
            header_bytes=len(EMPTY_ARTIFACT),
            payload_bytes=0,
            artifact=EMPTY_ARTIFACT,
        )

    frequencies = analyze_frequency(data)
    root = build_huffman_tree(frequencies)
    codes = generate_huffman_codes(root)
    bits = huffbits.encode_bits(data, codes)

    header = write_header(codes, len(bits))
    payload = huffbits.pack_bits(bits)
    return CompressionReport(
        frequencies=frequencies,
        root=root,
        codes=codes,
        original_bytes=len(data),
        bit_length=len(bits),
        header_bytes=len(header),
        payload_bytes=len(payload),
        artifact=header + payload,
    )


def compress(data: bytes) -> bytes:
    data = _as_bytes(data)
    if not data:
        return EMPTY_ARTIFACT
    return analyze(data).artifact


# Decoding

class _HeaderReader: # line reader over the raw artifact bytes
    def __init__(self, blob: bytes):
        self.blob = blob
        self.pos = 0

    def readline(self, what: str) -> bytes:
        end = self.blob.find(b"\n", self.pos)
        if end < 0:
            raise HeaderMalformedError(f"unexpected end of data while reading {what}")
        line = self.blob[self.pos:end]
        self.pos = end + 1
        return line

    def read_int(self, what: str) -> int:
        line = self.readline(what)
        if not line.isdigit() or len(line) > MAX_INT_DIGITS:
            raise HeaderMalformedError(f"{what} is not a decimal integer: {line!r}")
        return int(line)


def read_artifact(blob: bytes) -> Tuple[Dict[int, str], int, bytes]:
    """
    Parses an artifact into (symbol -> code table, exact bit length, payload bytes)
    """
    blob = _as_bytes(blob)
    reader = _HeaderReader(blob)

    table_size = reader.read_int("table size")
    if table_size > 256:
        raise HeaderMalformedError(f"table size {table_size} exceeds the 8-bit alphabet")

    code_map: Dict[int, str] = {}
    seen_codes = set()
    for n in range(table_size):
        line = reader.readline(f"table entry {n}")
        symbol_field, sep, code_field = line.partition(b":")
        if not sep:
            if line == END_HEADER:
                raise HeaderMalformedError(f"END_HEADER after {n} of {table_size} table entries")
            raise HeaderMalformedError(f"table entry {n} has no ':' separator: {line!r}")
        if not symbol_field.isdigit() or len(symbol_field) > 3 or int(symbol_field) > 255:
            raise HeaderMalformedError(f"table entry {n} has a bad symbol: {symbol_field!r}")
        if not code_field or code_field.strip(b"01"):
            raise HeaderMalformedError(f"table entry {n} has a bad code: {code_field!r}")

        symbol = int(symbol_field)
        code = code_field.decode("ascii")
        if symbol in code_map:
            raise HeaderMalformedError(f"symbol {symbol} appears twice in the table")
        if code in seen_codes:
            raise HeaderMalformedError(f"code {code} appears twice in the table")
        code_map[symbol] = code
        seen_codes.add(code)

    terminator = reader.readline("header terminator")
    if terminator != END_HEADER:
        raise HeaderMalformedError(f"expected END_HEADER, found {terminator!r}")

    bit_length = reader.read_int("bit length")

    try:
        check_prefix_free(code_map)
    except PrefixCollisionError as e:
        raise HeaderMalformedError(f"code table is not prefix-free: {e}") from e

    return code_map, bit_length, blob[reader.pos:]


def decompress(blob: bytes) -> bytes:
    code_map, bit_length, payload = read_artifact(blob)
    if bit_length == 0:
        return b""

    inverse = {code: symbol for symbol, code in code_map.items()}
    bits = huffbits.unpack_bits(payload, bit_length)
    return huffbits.decode_bits(bits, inverse)


# Files

def compress_file(src: PathLike, dst: PathLike) -> CompressionReport:
    report = analyze(Path(src).read_bytes())
    _atomic_write(Path(dst), report.artifact)
    return report


def decompress_file(src: PathLike, dst: Optional[PathLike] = None) -> bytes:
    data = decompress(Path(src).read_bytes())
    if dst is not None:
        _atomic_write(Path(dst), data)
    return data


def _atomic_write(path: Path, data: bytes) -> None:
    # Sibling temp file, then swap it into place
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_name, 0o666 & ~_current_umask()) # mkstemp creates 0600
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def _as_bytes(data) -> bytes:
    if isinstance(data, str):
        raise TypeError("expected bytes; encode text before compressing")
    return bytes(data)
