import os
import random

import pytest

import huffcontainer
from huffman import HeaderMalformedError, HuffmanError, IncompleteCodeError


def _random_bytes(n, seed=0):
    rng = random.Random(seed)
    return bytes(rng.getrandbits(8) for _ in range(n))


def test_empty_input_artifact_is_fixed():
    assert huffcontainer.compress(b"") == b"0\nEND_HEADER\n0\n"
    assert huffcontainer.decompress(b"0\nEND_HEADER\n0\n") == b""


def test_single_symbol_vector():
    data = b"aaaaaaaaaa"
    artifact = huffcontainer.compress(data)
    assert artifact == b"1\n97:0\nEND_HEADER\n10\n" + b"\x00\x00"

    codes, bit_length, payload = huffcontainer.read_artifact(artifact)
    assert codes == {ord("a"): "0"}
    assert bit_length == 10
    assert payload == b"\x00\x00"
    assert huffcontainer.decompress(artifact) == data


def test_two_symbol_skewed_vector_is_byte_exact():
    artifact = huffcontainer.compress(b"AAAAB")
    assert artifact == b"2\n65:1\n66:0\nEND_HEADER\n5\n" + b"\xf0"
    assert huffcontainer.decompress(artifact) == b"AAAAB"


@pytest.mark.parametrize("data", [
    b"a",
    b"ab",
    b"\x00",
    b"\n\n\n:",
    b"hello world",
    b"This is a test" * 100,
    bytes(range(256)),
    bytes(range(256)) * 3 + b"\x00" * 500,
    b"END_HEADER\nEND_HEADER\n",
    _random_bytes(10 * 1024),
])
def test_roundtrip(data):
    assert huffcontainer.decompress(huffcontainer.compress(data)) == data


def test_compress_is_deterministic():
    data = _random_bytes(5000, seed=3)
    assert huffcontainer.compress(data) == huffcontainer.compress(bytes(data))


def test_compress_accepts_bytearray_and_rejects_str():
    assert huffcontainer.compress(bytearray(b"abc")) == huffcontainer.compress(b"abc")
    with pytest.raises(TypeError):
        huffcontainer.compress("abc")


def test_write_artifact_matches_compress():
    artifact = huffcontainer.write_artifact({65: "1", 66: "0"}, "11110")
    assert artifact == huffcontainer.compress(b"AAAAB")


def test_header_lists_symbols_in_ascending_order():
    header = huffcontainer.write_header({200: "1", 3: "01", 50: "00"}, 7)
    assert header == b"3\n3:01\n50:00\n200:1\nEND_HEADER\n7\n"


def test_overlong_bit_length_raises_incomplete_code():
    artifact = huffcontainer.compress(b"AAAAB").replace(b"END_HEADER\n5\n", b"END_HEADER\n9\n")
    with pytest.raises(IncompleteCodeError):
        huffcontainer.decompress(artifact)


def test_truncated_payload_raises():
    artifact = huffcontainer.compress(b"This is a test" * 100)
    with pytest.raises(IncompleteCodeError):
        huffcontainer.decompress(artifact[:-3])


def test_leftover_bits_raise_incomplete_code():
    # "10" -> A, then a dangling "1"
    artifact = b"2\n65:10\n66:11\nEND_HEADER\n3\n" + bytes([0b10100000])
    with pytest.raises(IncompleteCodeError):
        huffcontainer.decompress(artifact)


def test_zero_bit_length_skips_payload():
    assert huffcontainer.decompress(b"1\n65:0\nEND_HEADER\n0\n" + b"\xff\xff") == b""


def test_trailing_payload_bytes_are_ignored():
    artifact = huffcontainer.compress(b"AAAAB") + b"\xff\xff"
    assert huffcontainer.decompress(artifact) == b"AAAAB"


@pytest.mark.parametrize("blob", [
    b"",
    b"0\nEND_HEADER",
    b"x\nEND_HEADER\n0\n",
    b"-1\nEND_HEADER\n0\n",
    b"257\nEND_HEADER\n0\n",
    b"1\n65:0\n0\n",
    b"2\n65:0\nEND_HEADER\n1\n\x00",
    b"1\n65-0\nEND_HEADER\n1\n\x00",
    b"1\n300:0\nEND_HEADER\n1\n\x00",
    b"1\n:0\nEND_HEADER\n1\n\x00",
    b"1\n65:012\nEND_HEADER\n1\n\x00",
    b"1\n65:\nEND_HEADER\n1\n\x00",
    b"2\n65:0\n65:1\nEND_HEADER\n1\n\x00",
    b"2\n65:0\n66:0\nEND_HEADER\n1\n\x00",
    b"2\n65:0\n66:01\nEND_HEADER\n1\n\x00",
    b"1\n65:0\nEND_HEADER\n",
    b"1\n65:0\nEND_HEADER\n-1\n",
    b"1\n65:0\nEND_HEADER\n1.5\n\x00",
    b"1\n65:0\nEND\n1\n\x00",
    b"1\n65:0\nEND_HEADER\n" + b"9" * 5000 + b"\n\x00",
    b"9" * 5000 + b"\nEND_HEADER\n0\n",
    b"1\n" + b"6" * 5000 + b":0\nEND_HEADER\n1\n\x00",
    b"1\n0065:0\nEND_HEADER\n1\n\x00",
])
def test_malformed_headers(blob):
    with pytest.raises(HeaderMalformedError):
        huffcontainer.decompress(blob)


def test_corrupted_first_byte_is_rejected():
    compressed = bytearray(huffcontainer.compress(b"Hello World" * 50))
    compressed[0] ^= 0xFF
    with pytest.raises(HuffmanError):
        huffcontainer.decompress(bytes(compressed))


def test_analyze_report_for_skewed_input():
    report = huffcontainer.analyze(b"AAAAB")
    assert report.frequencies == {65: 4, 66: 1}
    assert report.codes == {65: "1", 66: "0"}
    assert report.root.frequency == 5
    assert report.bit_length == 5
    assert report.original_bits == 40
    assert report.header_bytes == len(b"2\n65:1\n66:0\nEND_HEADER\n5\n")
    assert report.payload_bytes == 1
    assert report.artifact_bytes == len(report.artifact)
    assert report.bit_ratio == pytest.approx(5 / 40)
    assert report.compression_ratio == pytest.approx(len(report.artifact) / 5)


def test_analyze_empty_input():
    report = huffcontainer.analyze(b"")
    assert report.root is None
    assert report.codes == {}
    assert report.artifact == huffcontainer.EMPTY_ARTIFACT
    assert report.bit_ratio == 0.0


def test_file_roundtrip(tmp_path):
    src = tmp_path / "notes.txt"
    src.write_bytes(b"hello world\n" * 20)
    packed = tmp_path / "notes.huff"
    restored = tmp_path / "notes.out"

    report = huffcontainer.compress_file(src, packed)
    assert packed.read_bytes() == report.artifact
    assert huffcontainer.decompress_file(packed, restored) == src.read_bytes()
    assert restored.read_bytes() == src.read_bytes()
    assert sorted(os.listdir(tmp_path)) == ["notes.huff", "notes.out", "notes.txt"]


def test_empty_file_roundtrip(tmp_path):
    src = tmp_path / "empty.txt"
    src.write_bytes(b"")
    packed = tmp_path / "empty.huff"
    huffcontainer.compress_file(src, packed)
    assert packed.read_bytes() == b"0\nEND_HEADER\n0\n"
    assert huffcontainer.decompress_file(packed) == b""


def test_failed_decompress_writes_nothing(tmp_path):
    bad = tmp_path / "bad.huff"
    bad.write_bytes(b"1\n65:0\nEND_HEADER\n99\n\x00")
    out = tmp_path / "out.txt"
    with pytest.raises(IncompleteCodeError):
        huffcontainer.decompress_file(bad, out)
    assert sorted(os.listdir(tmp_path)) == ["bad.huff"]


def test_unmatchable_payload_fails_fast():
    size = 128 * 1024
    artifact = b"2\n65:00\n66:01\nEND_HEADER\n" + str(size * 8).encode() + b"\n" + b"\xff" * size
    with pytest.raises(IncompleteCodeError):
        huffcontainer.decompress(artifact)


@pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")
def test_written_files_follow_umask(tmp_path):
    src = tmp_path / "in.txt"
    src.write_bytes(b"permissions")
    reference = tmp_path / "plain.txt"
    reference.write_bytes(b"")
    packed = tmp_path / "in.huff"
    restored = tmp_path / "in.out"

    huffcontainer.compress_file(src, packed)
    huffcontainer.decompress_file(packed, restored)
    expected = reference.stat().st_mode & 0o777
    assert packed.stat().st_mode & 0o777 == expected
    assert restored.stat().st_mode & 0o777 == expected
