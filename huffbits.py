from typing import Dict

from huffman import IncompleteCodeError, UnknownSymbolError


def encode_bits(data: bytes, code_map: Dict[int, str]) -> str: # data: input bytes to encode, code_map: dict of symbol -> Huffman code
    try:
        return ''.join(code_map[byte] for byte in data)
    except KeyError as e:
        raise UnknownSymbolError(e.args[0]) from None


def pack_bits(bits: str) -> bytes:
    """
    Converts a '0'/'1' string into packed bytes, most significant bit first.
    The final byte is padded with 0 bits; callers must keep len(bits) to undo it.
    """
    out = bytearray()
    acc = 0
    acc_bits = 0

    for ch in bits:
        acc = (acc << 1) | (1 if ch == '1' else 0)
        acc_bits += 1
        if acc_bits == 8:
            out.append(acc)
            acc = 0
            acc_bits = 0

    if acc_bits != 0:
        out.append((acc << (8 - acc_bits)) & 0xFF)

    return bytes(out)


def unpack_bits(payload: bytes, bit_length: int) -> str:
    """
    Expands packed bytes back into a '0'/'1' string truncated to bit_length
    """
    if bit_length < 0:
        raise ValueError(f"bit length must be non-negative, got {bit_length}")
    available = len(payload) * 8
    if bit_length > available:
        raise IncompleteCodeError(
            f"payload holds {available} bits but {bit_length} were declared"
        )

    needed = (bit_length + 7) // 8
    bits = ''.join(format(byte, '08b') for byte in payload[:needed])
    return bits[:bit_length] # drop the padding bits


def decode_bits(bits: str, inverse: Dict[str, int]) -> bytes: # inverse: code -> symbol
    max_len = max(map(len, inverse), default=0)
    decoded = bytearray()
    current = ''
    for i, bit in enumerate(bits):
        current += bit
        symbol = inverse.get(current)
        if symbol is not None: # prefix-free, so the first exact match is final
            decoded.append(symbol)
            current = ''
        elif len(current) >= max_len:
            raise IncompleteCodeError(f"no code matches the bits ending at offset {i}: {current!r}")

    if current:
        raise IncompleteCodeError(f"incomplete code at end of stream: {current!r}")
    return bytes(decoded)
