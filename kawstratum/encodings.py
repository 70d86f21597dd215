"""Hex, base64 and base32 helpers with lenient, prefix-based decoding."""

from __future__ import annotations

import base64
from collections.abc import Sequence
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview, str]

_HEX_DIGITS = {c: int(c, 16) for c in "0123456789abcdefABCDEF"}
_C_SPACE = frozenset(" \t\n\v\f\r")

_BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_VALUES = {c: i for i, c in enumerate(_BASE64_ALPHABET)}

_BASE32_ALPHABET = "abcdefghijklmnopqrstuvwxyz234567"
_BASE32_VALUES = {c: i for i, c in enumerate(_BASE32_ALPHABET)}
_BASE32_VALUES.update({c.upper(): i for c, i in list(_BASE32_VALUES.items()) if c.isalpha()})

# Number of '=' characters required after a partial base32 group, by decoder state.
_BASE32_PADDING = {2: 6, 4: 4, 5: 3, 7: 1}


def _as_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _as_text(text: Union[str, bytes, bytearray]) -> str:
    if isinstance(text, (bytes, bytearray)):
        return text.decode("latin-1")
    return text


def hex_digit(char: Union[str, int]) -> int | None:
    """Return the value of a single hex digit, or None if it is not one."""
    if isinstance(char, int):
        char = chr(char) if 0 <= char < 0x110000 else ""
    return _HEX_DIGITS.get(char)


def is_hex(text: str) -> bool:
    """True if text is non-empty, all hex digits, and of even length."""
    return bool(text) and len(text) % 2 == 0 and all(c in _HEX_DIGITS for c in text)


def is_hex_number(text: str) -> bool:
    """True if text is a hex number, optionally prefixed with a lower-case "0x"."""
    start = 2 if len(text) > 2 and text.startswith("0x") else 0
    body = text[start:]
    return bool(body) and all(c in _HEX_DIGITS for c in body)


def parse_hex(text: Union[str, bytes, bytearray]) -> bytes:
    """Decode hex digit pairs, skipping whitespace between pairs.

    Decoding stops at the first character that is not a hex digit; a lone
    trailing digit is dropped.
    """
    text = _as_text(text)
    out = bytearray()
    pos, end = 0, len(text)
    while True:
        while pos < end and text[pos] in _C_SPACE:
            pos += 1
        if pos >= end or text[pos] not in _HEX_DIGITS:
            break
        high = _HEX_DIGITS[text[pos]]
        pos += 1
        if pos >= end or text[pos] not in _HEX_DIGITS:
            break
        out.append((high << 4) | _HEX_DIGITS[text[pos]])
        pos += 1
    return bytes(out)


def hex_str(data: BytesLike, spaces: bool = False) -> str:
    """Render bytes as lower-case hex, optionally separating bytes with spaces."""
    raw = _as_bytes(data)
    return raw.hex(" ") if spaces else raw.hex()


def encode_base64(data: BytesLike) -> str:
    """Encode bytes (or UTF-8 text) as padded standard base64."""
    return base64.b64encode(_as_bytes(data)).decode("ascii")


def _valid_padding(rest: str, count: int, table: dict[str, int]) -> bool:
    if rest[:count] != "=" * count:
        return False
    return len(rest) <= count or rest[count] not in table


def decode_base64(text: Union[str, bytes, bytearray], strict: bool = False) -> bytes:
    """Decode base64 up to the first character outside the alphabet.

    With strict set, raise ValueError when the input length or padding is
    not a valid base64 encoding.
    """
    text = _as_text(text)
    length = 0
    while length < len(text) and text[length] in _BASE64_VALUES:
        length += 1

    out = bytearray()
    mode = left = 0
    for ch in text[:length]:
        dec = _BASE64_VALUES[ch]
        if mode == 0:
            left = dec
            mode = 1
        elif mode == 1:
            out.append(((left << 2) | (dec >> 4)) & 0xFF)
            left = dec & 15
            mode = 2
        elif mode == 2:
            out.append(((left << 4) | (dec >> 2)) & 0xFF)
            left = dec & 3
            mode = 3
        else:
            out.append(((left << 6) | dec) & 0xFF)
            mode = 0

    if strict:
        rest = text[length:]
        if mode == 1:
            valid = False
        elif mode == 2:
            valid = not left and _valid_padding(rest, 2, _BASE64_VALUES)
        elif mode == 3:
            valid = not left and _valid_padding(rest, 1, _BASE64_VALUES)
        else:
            valid = True
        if not valid:
            raise ValueError("invalid base64 input")
    return bytes(out)


def encode_base32(data: BytesLike) -> str:
    """Encode bytes (or UTF-8 text) as padded lower-case base32."""
    return base64.b32encode(_as_bytes(data)).decode("ascii").lower()


def decode_base32(text: Union[str, bytes, bytearray], strict: bool = False) -> bytes:
    """Decode base32 (either case) up to the first character outside the alphabet.

    With strict set, raise ValueError when the input length or padding is
    not a valid base32 encoding.
    """
    text = _as_text(text)
    length = 0
    while length < len(text) and text[length] in _BASE32_VALUES:
        length += 1

    out = bytearray()
    mode = left = 0
    for ch in text[:length]:
        dec = _BASE32_VALUES[ch]
        if mode == 0:
            left = dec
            mode = 1
        elif mode == 1:
            out.append(((left << 3) | (dec >> 2)) & 0xFF)
            left = dec & 3
            mode = 2
        elif mode == 2:
            left = (left << 5) | dec
            mode = 3
        elif mode == 3:
            out.append(((left << 1) | (dec >> 4)) & 0xFF)
            left = dec & 15
            mode = 4
        elif mode == 4:
            out.append(((left << 4) | (dec >> 1)) & 0xFF)
            left = dec & 1
            mode = 5
        elif mode == 5:
            left = (left << 5) | dec
            mode = 6
        elif mode == 6:
            out.append(((left << 2) | (dec >> 3)) & 0xFF)
            left = dec & 7
            mode = 7
        else:
            out.append(((left << 5) | dec) & 0xFF)
            mode = 0

    if strict:
        if mode == 0:
            valid = True
        elif mode in _BASE32_PADDING:
            valid = not left and _valid_padding(
                text[length:], _BASE32_PADDING[mode], _BASE32_VALUES
            )
        else:
            valid = False
        if not valid:
            raise ValueError("invalid base32 input")
    return bytes(out)


def _codes(seq: Union[str, Sequence[int], bytes]) -> Sequence[int]:
    if isinstance(seq, str):
        return [ord(c) for c in seq]
    return seq


def timing_resistant_equal(a, b) -> bool:
    """Compare two sequences in time proportional to the length of the first."""
    a_codes = _codes(a)
    b_codes = _codes(b)
    if len(b_codes) == 0:
        return len(a_codes) == 0
    accumulator = len(a_codes) ^ len(b_codes)
    width = len(b_codes)
    for i, value in enumerate(a_codes):
        accumulator |= value ^ b_codes[i % width]
    return accumulator == 0