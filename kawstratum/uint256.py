"""Fixed-size opaque little-endian byte blobs with hex conversion."""

from __future__ import annotations

from itertools import takewhile
from typing import ClassVar, Iterable, Union

from kawstratum.encodings import hex_digit

_C_SPACE = " \t\n\v\f\r"


class Blob:
    """A fixed-width byte blob, stored least significant byte first."""

    WIDTH: ClassVar[int] = 0
    __slots__ = ("_data",)

    def __init__(self, data: Union[bytes, bytearray, Iterable[int], None] = None) -> None:
        if not self.WIDTH:
            raise TypeError("Blob must be subclassed with a WIDTH")
        if data is None:
            self._data = bytearray(self.WIDTH)
            return
        raw = bytearray(data)
        if len(raw) != self.WIDTH:
            raise ValueError(f"{type(self).__name__} needs {self.WIDTH} bytes, got {len(raw)}")
        self._data = raw

    @classmethod
    def from_hex(cls, text: str):
        """Read a big-endian hex string, leniently.

        Leading whitespace and a "0x" prefix are skipped, reading stops at the
        first non-hex character, and digits beyond the blob width are dropped
        from the high end.
        """
        text = text.lstrip(_C_SPACE)
        if text[:1] == "0" and text[1:2].lower() == "x":
            text = text[2:]
        digits = "".join(takewhile(lambda ch: hex_digit(ch) is not None, text))
        digits = digits[-2 * cls.WIDTH:]
        value = int(digits, 16) if digits else 0
        return cls(value.to_bytes(cls.WIDTH, "little"))

    def hex(self) -> str:
        """Big-endian lower-case hex, always 2 * WIDTH characters."""
        return bytes(reversed(self._data)).hex()

    def is_null(self) -> bool:
        return not any(self._data)

    def set_null(self) -> None:
        self._data[:] = bytes(self.WIDTH)

    def get_uint64(self, pos: int) -> int:
        """Return the little-endian 64-bit word at word index pos."""
        if not 0 <= pos < self.WIDTH // 8:
            raise IndexError(f"word index {pos} out of range")
        return int.from_bytes(self._data[pos * 8:pos * 8 + 8], "little")

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __len__(self) -> int:
        return self.WIDTH

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._data == other._data

    def __lt__(self, other: Blob) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bytes(self._data) < bytes(other._data)

    def __hash__(self) -> int:
        return hash((type(self).__name__, bytes(self._data)))

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}.from_hex({self.hex()!r})"


class Uint160(Blob):
    """160-bit opaque blob."""

    WIDTH = 20
    __slots__ = ()


class Uint256(Blob):
    """256-bit opaque blob."""

    WIDTH = 32
    __slots__ = ()

    def nibble(self, index: int) -> int:
        """Return the index-th hex digit, counting from the most significant."""
        if not 0 <= index < 64:
            raise IndexError(f"nibble index {index} out of range")
        index = 63 - index
        byte = self._data[index // 2]
        return byte >> 4 if index % 2 == 1 else byte & 0x0F


class Uint512(Blob):
    """512-bit opaque blob."""

    WIDTH = 64
    __slots__ = ()

    def trim256(self) -> Uint256:
        """Return the low 32 bytes as a Uint256."""
        return Uint256(self._data[:32])


def uint256_from_hex(text: str) -> Uint256:
    """Build a Uint256 from a hex string (see Blob.from_hex)."""
    return Uint256.from_hex(text)