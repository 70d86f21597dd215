import pytest
from hypothesis import given
from hypothesis import strategies as st

from kawstratum.arith import (
    ArithUint256,
    UintError,
    arith_to_uint256,
    decode_compact,
    uint256_to_arith,
)
from kawstratum.uint256 import Uint256

MAX = 2**256 - 1
u256 = st.integers(min_value=0, max_value=MAX)


def test_documented_compact_examples():
    assert ArithUint256(0x1234560000).get_compact() == 0x05123456
    assert ArithUint256(0xC0DE000000).get_compact() == 0x0600C0DE
    assert ArithUint256.from_compact(0x05123456) == 0x1234560000
    assert ArithUint256.from_compact(0x0600C0DE) == 0xC0DE000000


def test_compact_sign_flag():
    decoded = decode_compact(0x05923456)
    assert decoded.negative is True
    assert decoded.overflow is False
    assert decoded.value == 0x1234560000
    assert ArithUint256(0x1234560000).get_compact(negative=True) == 0x05923456


def test_compact_overflow_flag():
    assert decode_compact(0xFF123456).overflow is True
    assert decode_compact(0x05123456).overflow is False


def test_compact_zero_mantissa_is_not_negative():
    decoded = decode_compact(0x05800000)
    assert decoded.negative is False
    assert decoded.value == 0


def test_compact_rejects_out_of_range():
    with pytest.raises(ValueError):
        decode_compact(-1)
    with pytest.raises(ValueError):
        decode_compact(2**32)


@given(u256)
def test_compact_round_trip_truncates_down(value):
    number = ArithUint256(value)
    back = ArithUint256.from_compact(number.get_compact())
    assert back <= number
    assert back.get_compact() == number.get_compact()


def test_division_by_zero():
    with pytest.raises(UintError):
        ArithUint256(5) / 0
    with pytest.raises(UintError):
        ArithUint256(5) / ArithUint256(0)


@given(u256, st.integers(min_value=1, max_value=MAX))
def test_division_invariant(a, b):
    x, y = ArithUint256(a), ArithUint256(b)
    q = x / y
    rest = x - q * y
    assert q * y <= x
    assert rest < y


@given(u256, u256)
def test_add_sub_round_trip(a, b):
    x, y = ArithUint256(a), ArithUint256(b)
    assert (x + y) - y == x
    assert int(x + y) == (a + b) % 2**256


def test_wraparound_and_negation():
    zero = ArithUint256(0)
    assert zero - 1 == ~zero
    assert int(~zero) == MAX
    assert -ArithUint256(1) == ArithUint256(MAX)
    assert ArithUint256(MAX) + 1 == zero


@given(u256)
def test_neg_is_additive_inverse(a):
    x = ArithUint256(a)
    assert x + (-x) == 0
    assert ~x == -x - 1


@given(u256, u256)
def test_bitwise_ops_match_int(a, b):
    x, y = ArithUint256(a), ArithUint256(b)
    assert int(x & y) == a & b
    assert int(x | y) == a | b
    assert int(x ^ y) == a ^ b


@given(u256, st.integers(min_value=0, max_value=300))
def test_shift_round_trip(a, n):
    x = ArithUint256(a)
    assert (x >> n) << n == x & ~((ArithUint256(1) << n) - 1) if n < 256 else (x >> n) == 0
    assert int(x << n) == (a << n) % 2**256


def test_shift_beyond_width_is_zero():
    assert ArithUint256(MAX) << 256 == 0
    assert ArithUint256(MAX) >> 256 == 0
    with pytest.raises(ValueError):
        ArithUint256(1) << -1


@pytest.mark.parametrize("k", [0, 1, 31, 32, 63, 64, 255])
def test_bits_of_powers_of_two(k):
    assert ArithUint256(1 << k).bits() == k + 1


def test_bits_of_zero():
    assert ArithUint256(0).bits() == 0
    assert not ArithUint256(0)
    assert ArithUint256(1)


def test_hex_is_big_endian_fixed_width():
    assert ArithUint256(1).hex() == "0" * 63 + "1"
    assert len(ArithUint256(MAX).hex()) == 64
    assert ArithUint256(MAX).hex() == "f" * 64


@given(u256)
def test_hex_round_trip(a):
    x = ArithUint256(a)
    assert ArithUint256.from_hex(x.hex()) == x
    assert ArithUint256(x.hex()) == x


@given(u256)
def test_blob_round_trip(a):
    x = ArithUint256(a)
    blob = arith_to_uint256(x)
    assert bytes(blob) == a.to_bytes(32, "little")
    assert uint256_to_arith(blob) == x


def test_blob_conversion_with_uint256():
    blob = Uint256.from_hex("0x1234560000")
    assert uint256_to_arith(blob) == 0x1234560000


def test_low64_and_double():
    x = ArithUint256((5 << 64) | 7)
    assert x.get_low64() == 7
    assert ArithUint256(2**64).get_double() == 2.0**64
    assert ArithUint256(0).get_double() == 0.0


@given(u256, u256)
def test_ordering_matches_int(a, b):
    x, y = ArithUint256(a), ArithUint256(b)
    assert (x < y) == (a < b)
    assert (x <= y) == (a <= b)
    assert (x > y) == (a > b)
    assert (x >= y) == (a >= b)
    assert (x == y) == (a == b)


def test_hash_consistent_with_equality():
    assert hash(ArithUint256(42)) == hash(ArithUint256(ArithUint256(42)))
    assert len({ArithUint256(1), ArithUint256(1), ArithUint256(2)}) == 2


def test_rejects_unsupported_type():
    with pytest.raises(TypeError):
        ArithUint256(1.5)