from __future__ import annotations
from typing import Dict, Iterable, List, Union

from .errors import MalformedInputError

# Same symbol set as RFC 4648 base64; shot strings use it with '=' padding.
ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PAD = "="

_INDEX: Dict[str, int] = {ch: i for i, ch in enumerate(ALPHABET)}

BytesLike = Union[bytes, bytearray, memoryview, Iterable[int]]


def encode_bytes(data: BytesLike) -> str:
    """Encode bytes as 4-character blocks, 6 bits per character, MSB first.

    A final group of 2 bytes ends in one '=', a final group of 1 byte in two.
    """
    b = bytes(data)
    out: List[str] = []
    for i in range(0, len(b), 3):
        group = b[i:i + 3]
        n = len(group)
        bitmap = int.from_bytes(group + b"\x00" * (3 - n), "big")
        out.append(ALPHABET[(bitmap >> 18) & 63])
        out.append(ALPHABET[(bitmap >> 12) & 63])
        out.append(ALPHABET[(bitmap >> 6) & 63] if n > 1 else PAD)
        out.append(ALPHABET[bitmap & 63] if n > 2 else PAD)
    return "".join(out)


def _validate(text: str) -> None:
    if len(text) % 4:
        raise MalformedInputError(f"length {len(text)} is not a multiple of 4")
    body = text.rstrip(PAD)
    if len(text) - len(body) > 2:
        raise MalformedInputError(f"too much padding: {len(text) - len(body)} '{PAD}'")
    for pos, ch in enumerate(body):
        if ch not in _INDEX:
            raise MalformedInputError(f"invalid character {ch!r} at offset {pos}")


def decode_bytes(text: str, strict: bool = True) -> bytes:
    """Decode text produced by encode_bytes.

    With strict=False the legacy lookup is used instead of validation: any
    character outside the alphabet reads as 0 and a short final block is
    filled with zero characters. '=' still suppresses output bytes.
    """
    if not isinstance(text, str):
        raise MalformedInputError(f"expected str, got {type(text).__name__}")
    if strict:
        _validate(text)
    out = bytearray()
    for i in range(0, len(text), 4):
        block = text[i:i + 4].ljust(4, ALPHABET[0])
        a, b, c, d = (_INDEX.get(ch, 0) for ch in block)
        bitmap = (a << 18) | (b << 12) | (c << 6) | d
        out.append((bitmap >> 16) & 0xFF)
        if block[2] != PAD:
            out.append((bitmap >> 8) & 0xFF)
        if block[3] != PAD:
            out.append(bitmap & 0xFF)
    return bytes(out)
