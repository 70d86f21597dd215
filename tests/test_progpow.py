import re
from itertools import islice

import pytest
from hypothesis import given
from hypothesis import strategies as st

from kawstratum.progpow import (
    FNV_OFFSET_BASIS,
    FastModData,
    KernelType,
    Kiss99,
    calculate_fast_mod_data,
    fnv1a,
    get_kern,
    math,
    merge,
)

TEMPLATE = "/*head*/\nPROGPOW_REPLACE_HEADER\n/*body*/\nPROGPOW_REPLACE_MATH\n/*end*/\n"


def test_fnv1a_known_vector():
    assert fnv1a(FNV_OFFSET_BASIS, 0xDDD0A47B) == 0xD37EE61A


@given(st.integers(0, 2**32 - 1), st.integers(0, 2**32 - 1))
def test_fnv1a_stays_32_bit(h, d):
    assert 0 <= fnv1a(h, d) < 2**32


def test_kiss99_first_value():
    rng = Kiss99(362436069, 521288629, 123456789, 380116160)
    assert next(rng) == 769445856


def test_kiss99_is_its_own_iterator_and_deterministic():
    a = Kiss99(1, 2, 3, 4)
    b = Kiss99(1, 2, 3, 4)
    assert iter(a) is a
    values = list(islice(a, 50))
    assert values == list(islice(b, 50))
    assert all(0 <= v < 2**32 for v in values)


def test_kiss99_different_states_differ():
    a = list(islice(Kiss99(1, 2, 3, 4), 10))
    b = list(islice(Kiss99(1, 2, 3, 5), 10))
    assert a != b


@pytest.mark.parametrize(
    "r, expected",
    [
        (0, "a = (a * 33) + b;\n"),
        (1, "a = (a ^ b) * 33;\n"),
        (2, "a = ROTL32(a, 1) ^ b;\n"),
        (3, "a = ROTR32(a, 1) ^ b;\n"),
    ],
)
def test_merge_forms(r, expected):
    assert merge("a", "b", r) == expected


def test_merge_rotation_uses_high_bits():
    assert merge("x", "y", (5 << 16) | 2) == "x = ROTL32(x, 6) ^ y;\n"


@given(st.integers(0, 2**32 - 1))
def test_merge_rotation_in_range(r):
    line = merge("x", "y", r)
    match = re.search(r"ROT[LR]32\(x, (\d+)\)", line)
    if r % 4 in (2, 3):
        assert match is not None and 1 <= int(match.group(1)) <= 31
    else:
        assert match is None


@pytest.mark.parametrize(
    "r, expected",
    [
        (0, "d = a + b;\n"),
        (1, "d = a * b;\n"),
        (2, "d = mul_hi(a, b);\n"),
        (3, "d = min(a, b);\n"),
        (4, "d = ROTL32(a, b % 32);\n"),
        (5, "d = ROTR32(a, b % 32);\n"),
        (6, "d = a & b;\n"),
        (7, "d = a | b;\n"),
        (8, "d = a ^ b;\n"),
        (9, "d = clz(a) + clz(b);\n"),
        (10, "d = popcount(a) + popcount(b);\n"),
        (11, "d = a + b;\n"),
    ],
)
def test_math_forms(r, expected):
    assert math("d", "a", "b", r) == expected


def test_get_kern_replaces_placeholders():
    out = get_kern(TEMPLATE, 42, KernelType.CUDA)
    assert "PROGPOW_REPLACE" not in out
    assert out.startswith("/*head*/\n")
    assert out.endswith("/*end*/\n")
    assert "#define PROGPOW_LANES           16\n" in out
    assert "#define PROGPOW_CACHE_WORDS     4096\n" in out


def test_get_kern_cuda_and_cl_headers():
    cuda = get_kern(TEMPLATE, 7, KernelType.CUDA)
    cl = get_kern(TEMPLATE, 7, KernelType.CL)
    assert "__shfl_sync" in cuda and "GROUP_SHARE" not in cuda
    assert "#define GROUP_SHARE (GROUP_SIZE / 16)\n" in cl
    assert "barrier(CLK_LOCAL_MEM_FENCE);" in cl
    assert "__align__(16)" in cuda
    assert "__attribute__ ((aligned (16)))" in cl


def test_get_kern_without_placeholders_is_unchanged():
    code = "kernel void f() {}\n"
    assert get_kern(code, 123, KernelType.CL) == code


def test_get_kern_deterministic_and_seed_dependent():
    a = get_kern(TEMPLATE, 1000, KernelType.CUDA)
    assert a == get_kern(TEMPLATE, 1000, KernelType.CUDA)
    assert a != get_kern(TEMPLATE, 1001, KernelType.CUDA)


def test_get_kern_structure():
    out = get_kern("PROGPOW_REPLACE_MATH", 2**40 + 5, KernelType.CUDA)
    assert "// cache load 10\n" in out
    assert "// cache load 11\n" not in out
    assert "// random math 17\n" in out
    assert "// random math 18\n" not in out
    assert "data_dag.s[3]" in out
    assert "data_dag.s[4]" not in out
    merges = re.findall(r"^(mix\[\d+\]) = ", out, flags=re.M)
    assert len(merges) == 11 + 18 + 4


@pytest.mark.parametrize("seed", [0, 1, 599, 2**63 + 17, 2**64 - 1])
def test_get_kern_modifies_every_register(seed):
    out = get_kern("PROGPOW_REPLACE_MATH", seed, KernelType.CL)
    targets = set(re.findall(r"^mix\[(\d+)\] = ", out, flags=re.M))
    assert targets == {str(i) for i in range(32)}


@pytest.mark.parametrize("seed", [3, 2**33 + 9])
def test_get_kern_cache_loads_distinct(seed):
    out = get_kern("PROGPOW_REPLACE_MATH", seed, KernelType.CUDA)
    sources = re.findall(r"^offset = mix\[(\d+)\] % PROGPOW_CACHE_WORDS;", out, flags=re.M)
    assert len(sources) == 11
    assert len(set(sources)) == 11


@pytest.mark.parametrize("seed", [11, 2**50])
def test_get_kern_math_sources_distinct(seed):
    out = get_kern("PROGPOW_REPLACE_MATH", seed, KernelType.CUDA)
    math_lines = [
        line for line in out.splitlines()
        if line.startswith("data = ") and "c_dag" not in line
    ]
    assert len(math_lines) == 18
    for line in math_lines:
        regs = set(re.findall(r"mix\[(\d+)\]", line))
        assert len(regs) == 2


@pytest.mark.parametrize("seed", [-1, 2**64])
def test_get_kern_rejects_bad_seed(seed):
    with pytest.raises(ValueError):
        get_kern(TEMPLATE, seed, KernelType.CUDA)


def test_fast_mod_power_of_two():
    assert calculate_fast_mod_data(1024) == FastModData(1, 0, 10)
    assert calculate_fast_mod_data(1) == FastModData(1, 0, 0)


def test_fast_mod_rejects_zero():
    with pytest.raises(ValueError):
        calculate_fast_mod_data(0)


@given(st.integers(1, 2**32 - 1), st.integers(0, 2**32 - 1))
def test_fast_mod_divides_exactly(divisor, x):
    data = calculate_fast_mod_data(divisor)
    assert 0 <= data.reciprocal < 2**32
    assert data.increment in (0, 1)
    quotient = ((x + data.increment) * data.reciprocal) >> data.shift
    assert quotient == x // divisor


@given(st.integers(1, 2**32 - 1))
def test_fast_mod_shift_for_non_powers(divisor):
    data = calculate_fast_mod_data(divisor)
    if divisor & (divisor - 1):
        assert data.shift >= 32
    else:
        assert data.reciprocal == 1 and data.increment == 0