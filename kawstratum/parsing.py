"""Strict integer and fixed-point parsing, string sanitising and host:port splitting."""

from __future__ import annotations

import re
import string
from enum import IntEnum

_C_SPACE = " \t\n\v\f\r"
_ALPHA_NUM = string.ascii_lowercase + string.ascii_uppercase + string.digits

_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1
_UINT32_MAX = 2**32 - 1
_UINT64_MAX = 2**64 - 1

# 10^18 - 1: the largest arbitrary decimal that fits in a signed 64-bit integer.
_UPPER_BOUND = 10**18 - 1

_STRICT_INTEGER = re.compile(r"[+-]?[0-9]+")
_LEADING_INTEGER = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_FIXED_POINT = re.compile(
    r"(?P<sign>-?)(?P<int>0|[1-9][0-9]*)"
    r"(?:\.(?P<frac>[0-9]+))?"
    r"(?:[eE](?P<esign>[+-]?)(?P<exp>[0-9]+))?"
)


class SafeChars(IntEnum):
    """Character sets accepted by :func:`sanitize_string`."""

    DEFAULT = 0
    UA_COMMENT = 1
    FILENAME = 2


_SAFE_CHARS = {
    SafeChars.DEFAULT: frozenset(_ALPHA_NUM + " .,;-_/:?@()"),
    SafeChars.UA_COMMENT: frozenset(_ALPHA_NUM + " .,;-_?@"),
    SafeChars.FILENAME: frozenset(_ALPHA_NUM + ".-_"),
}


def sanitize_string(text: str, rule: SafeChars | int = SafeChars.DEFAULT) -> str:
    """Drop every character of text that the chosen rule does not allow."""
    allowed = _SAFE_CHARS[SafeChars(rule)]
    return "".join(ch for ch in text if ch in allowed)


def _strict_integer(text: str, low: int, high: int, *, signed: bool) -> int:
    if not text:
        raise ValueError("empty string")
    if text[0] in _C_SPACE or text[-1] in _C_SPACE:
        raise ValueError(f"padded integer {text!r}")
    if "\0" in text:
        raise ValueError("embedded NUL character")
    if not signed and text.startswith("-"):
        raise ValueError(f"negative value {text!r} for unsigned integer")
    if not _STRICT_INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    value = int(text)
    if not low <= value <= high:
        raise ValueError(f"integer {text!r} out of range")
    return value


def parse_int32(text: str) -> int:
    """Parse a decimal signed 32-bit integer, raising ValueError on any defect."""
    return _strict_integer(text, _INT32_MIN, _INT32_MAX, signed=True)


def parse_int64(text: str) -> int:
    """Parse a decimal signed 64-bit integer, raising ValueError on any defect."""
    return _strict_integer(text, _INT64_MIN, _INT64_MAX, signed=True)


def parse_uint32(text: str) -> int:
    """Parse a decimal unsigned 32-bit integer, raising ValueError on any defect."""
    return _strict_integer(text, 0, _UINT32_MAX, signed=False)


def parse_uint64(text: str) -> int:
    """Parse a decimal unsigned 64-bit integer, raising ValueError on any defect."""
    return _strict_integer(text, 0, _UINT64_MAX, signed=False)


def atoi64(text: str) -> int:
    """Leniently read a leading decimal integer, clamped to the signed 64-bit range.

    Returns 0 when text does not start with a number.
    """
    match = _LEADING_INTEGER.match(text)
    if match is None:
        return 0
    return max(_INT64_MIN, min(_INT64_MAX, int(match.group(1))))


def split_host_port(text: str, default_port: int | None = None) -> tuple[str, int | None]:
    """Split "host:port", "[v6]:port" or a bare host into (host, port).

    The port is default_port when none is present or it is not a valid
    port number.
    """
    port = default_port
    colon = text.rfind(":")
    if colon != -1:
        bracketed = text[0] == "[" and text[colon - 1] == "]"
        multi_colon = text.rfind(":", 0, colon) != -1
        if colon == 0 or bracketed or not multi_colon:
            try:
                candidate = parse_int32(text[colon + 1:])
            except ValueError:
                candidate = 0
            if 0 < candidate < 0x10000:
                text = text[:colon]
                port = candidate
    if text.startswith("[") and text.endswith("]") and len(text) >= 2:
        text = text[1:-1]
    return text, port


def parse_fixed_point(text: str, decimals: int) -> int:
    """Parse a JSON-style number as an integer scaled by 10**decimals.

    Raises ValueError on malformed input, on values finer than
    10**-decimals and on results outside (-10**18, 10**18).
    """
    match = _FIXED_POINT.fullmatch(text)
    if match is None:
        raise ValueError(f"malformed number {text!r}")

    integer_digits = match["int"]
    fraction_digits = match["frac"] or ""
    mantissa_digits = ("" if integer_digits == "0" else integer_digits) + fraction_digits

    mantissa = 0
    trailing_zeros = 0
    for ch in mantissa_digits:
        if ch == "0":
            trailing_zeros += 1
            continue
        for _ in range(trailing_zeros + 1):
            if mantissa > _UPPER_BOUND // 10:
                raise ValueError(f"mantissa overflow in {text!r}")
            mantissa *= 10
        mantissa += int(ch)
        trailing_zeros = 0

    exponent = 0
    for ch in match["exp"] or "":
        if exponent > _UPPER_BOUND // 10:
            raise ValueError(f"exponent overflow in {text!r}")
        exponent = exponent * 10 + int(ch)

    if match["esign"] == "-":
        exponent = -exponent
    exponent = exponent - len(fraction_digits) + trailing_zeros
    if match["sign"]:
        mantissa = -mantissa

    exponent += decimals
    if exponent < 0:
        raise ValueError(f"{text!r} is finer than 10**-{decimals}")
    if exponent >= 18:
        raise ValueError(f"{text!r} is too large")

    for _ in range(exponent):
        if mantissa > 420000000000000000 or mantissa < -(_UPPER_BOUND // 10):
            raise ValueError(f"overflow in {text!r}")
        mantissa *= 10
    if mantissa > 4200000000000000000 or mantissa < -_UPPER_BOUND:
        raise ValueError(f"overflow in {text!r}")
    return mantissa