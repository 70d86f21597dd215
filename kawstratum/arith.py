"""256-bit unsigned integer arithmetic and the compact difficulty encoding."""

from __future__ import annotations

from typing import NamedTuple, Union

from kawstratum.uint256 import Uint256

BITS = 256
_MASK = (1 << BITS) - 1
_UINT32_MASK = 0xFFFFFFFF
_UINT64_MASK = (1 << 64) - 1


class UintError(ArithmeticError):
    """Raised on an impossible 256-bit integer operation."""


class CompactTarget(NamedTuple):
    """Result of decoding a compact value: the number and its flag bits."""

    value: "ArithUint256"
    negative: bool
    overflow: bool


Operand = Union["ArithUint256", int]


def _coerce(other: object) -> int | None:
    if isinstance(other, ArithUint256):
        return other._value
    if isinstance(other, int) and not isinstance(other, bool):
        return other & _MASK
    return None


class ArithUint256:
    """An unsigned 256-bit integer whose arithmetic wraps modulo 2**256."""

    __slots__ = ("_value",)

    def __init__(self, value: Union[int, str, ArithUint256] = 0) -> None:
        if isinstance(value, ArithUint256):
            self._value = value._value
        elif isinstance(value, str):
            self._value = ArithUint256.from_hex(value)._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value & _MASK
        else:
            raise TypeError(f"cannot build ArithUint256 from {type(value).__name__}")

    @classmethod
    def from_hex(cls, text: str) -> ArithUint256:
        """Read a big-endian hex string with the lenient rules of Uint256.from_hex."""
        return uint256_to_arith(Uint256.from_hex(text))

    @classmethod
    def from_compact(cls, compact: int) -> ArithUint256:
        """Decode a compact (nBits) value, ignoring its sign and overflow flags."""
        return decode_compact(compact).value

    def get_compact(self, negative: bool = False) -> int:
        """Encode as a 32-bit compact value, optionally with the sign bit set."""
        size = (self.bits() + 7) // 8
        if size <= 3:
            compact = (self.get_low64() << 8 * (3 - size)) & _UINT32_MASK
        else:
            compact = (self >> 8 * (size - 3)).get_low64() & _UINT32_MASK
        # 0x00800000 is the sign bit: move the mantissa down a byte if it is set.
        if compact & 0x00800000:
            compact >>= 8
            size += 1
        if compact & ~0x007FFFFF or size >= 256:
            raise UintError("value cannot be expressed in compact form")
        compact |= size << 24
        if negative and compact & 0x007FFFFF:
            compact |= 0x00800000
        return compact

    def hex(self) -> str:
        """Big-endian lower-case hex, always 64 characters."""
        return arith_to_uint256(self).hex()

    def bits(self) -> int:
        """Position of the highest set bit plus one, or zero for zero."""
        return self._value.bit_length()

    def get_low64(self) -> int:
        return self._value & _UINT64_MASK

    def get_double(self) -> float:
        """Approximate value as a float, summed 32 bits at a time."""
        result = 0.0
        factor = 1.0
        value = self._value
        for _ in range(BITS // 32):
            result += factor * (value & _UINT32_MASK)
            value >>= 32
            factor *= 4294967296.0
        return result

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __invert__(self) -> ArithUint256:
        return ArithUint256(~self._value)

    def __neg__(self) -> ArithUint256:
        return ArithUint256(-self._value)

    def __add__(self, other: Operand) -> ArithUint256:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return ArithUint256(self._value + value)

    def __radd__(self, other: int) -> ArithUint256:
        return self.__add__(other)

    def __sub__(self, other: Operand) -> ArithUint256:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return ArithUint256(self._value - value)

    def __rsub__(self, other: int) -> ArithUint256:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return ArithUint256(value - self._value)

    def __mul__(self, other: Operand) -> ArithUint256:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return ArithUint256(self._value * value)

    def __rmul__(self, other: int) -> ArithUint256:
        return self.__mul__(other)

    def __truediv__(self, other: Operand) -> ArithUint256:
        """Integer quotient; raises UintError on division by zero."""
        value = _coerce(other)
        if value is None:
            return NotImplemented
        if value == 0:
            raise UintError("Division by zero")
        return ArithUint256(self._value // value)

    __floordiv__ = __truediv__

    def __and__(self, other: Operand) -> ArithUint256:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return ArithUint256(self._value & value)

    def __or__(self, other: Operand) -> ArithUint256:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return ArithUint256(self._value | value)

    def __xor__(self, other: Operand) -> ArithUint256:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return ArithUint256(self._value ^ value)

    __rand__ = __and__
    __ror__ = __or__
    __rxor__ = __xor__

    def __lshift__(self, shift: int) -> ArithUint256:
        if shift < 0:
            raise ValueError("negative shift count")
        if shift >= BITS:
            return ArithUint256(0)
        return ArithUint256(self._value << shift)

    def __rshift__(self, shift: int) -> ArithUint256:
        if shift < 0:
            raise ValueError("negative shift count")
        return ArithUint256(self._value >> shift)

    def __eq__(self, other: object) -> bool:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return self._value == value

    def __lt__(self, other: Operand) -> bool:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return self._value < value

    def __le__(self, other: Operand) -> bool:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return self._value <= value

    def __gt__(self, other: Operand) -> bool:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return self._value > value

    def __ge__(self, other: Operand) -> bool:
        value = _coerce(other)
        if value is None:
            return NotImplemented
        return self._value >= value

    def __hash__(self) -> int:
        return hash(("ArithUint256", self._value))

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"ArithUint256(0x{self._value:x})"


def decode_compact(compact: int) -> CompactTarget:
    """Decode a 32-bit compact value into its number, sign flag and overflow flag.

    N = (-1 ** sign) * mantissa * 256 ** (exponent - 3), with an 8-bit
    exponent, the sign at bit 0x00800000 and a 23-bit mantissa.
    """
    if not 0 <= compact <= _UINT32_MASK:
        raise ValueError(f"compact value {compact!r} is not a 32-bit unsigned integer")
    size = compact >> 24
    word = compact & 0x007FFFFF
    if size <= 3:
        word >>= 8 * (3 - size)
        value = ArithUint256(word)
    else:
        value = ArithUint256(word) << 8 * (size - 3)
    negative = word != 0 and (compact & 0x00800000) != 0
    overflow = word != 0 and (
        size > 34 or (word > 0xFF and size > 33) or (word > 0xFFFF and size > 32)
    )
    return CompactTarget(value, negative, overflow)


def arith_to_uint256(value: ArithUint256) -> Uint256:
    """Convert a number to its little-endian 32-byte blob."""
    return Uint256(int(value).to_bytes(32, "little"))


def uint256_to_arith(blob: Uint256) -> ArithUint256:
    """Read a little-endian 32-byte blob as a number."""
    return ArithUint256(int.from_bytes(bytes(blob), "little"))