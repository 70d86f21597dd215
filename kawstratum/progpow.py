"""Random-program kernel source generation for the ProgPoW family of hashes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import cycle
from typing import Iterator

_UINT32_MASK = 0xFFFFFFFF
_UINT64_MASK = (1 << 64) - 1

# Blocks before changing the random program.
PROGPOW_PERIOD = 10
# Lanes that work together calculating a hash.
PROGPOW_LANES = 16
# uint32 registers per lane.
PROGPOW_REGS = 32
# uint32 loads from the DAG per lane.
PROGPOW_DAG_LOADS = 4
# Size of the cached portion of the DAG.
PROGPOW_CACHE_BYTES = 16 * 1024
# DAG accesses, also the number of loops executed.
PROGPOW_CNT_DAG = 64
# Random cache accesses per loop.
PROGPOW_CNT_CACHE = 11
# Random math instructions per loop.
PROGPOW_CNT_MATH = 18
# 4320 blocks per day * 90 days.
EPOCH_LENGTH = 388800

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x1000193

HEADER_PLACEHOLDER = "PROGPOW_REPLACE_HEADER"
MATH_PLACEHOLDER = "PROGPOW_REPLACE_MATH"


class KernelType(Enum):
    """Target language of the generated kernel."""

    CUDA = "cuda"
    CL = "cl"


def fnv1a(h: int, d: int) -> int:
    """Fold the 32-bit word d into the FNV-1a hash h and return the new hash."""
    return ((h ^ d) * FNV_PRIME) & _UINT32_MASK


class Kiss99:
    """The KISS99 pseudo-random generator, as an endless iterator of uint32 values."""

    __slots__ = ("z", "w", "jsr", "jcong")

    def __init__(self, z: int, w: int, jsr: int, jcong: int) -> None:
        self.z = z & _UINT32_MASK
        self.w = w & _UINT32_MASK
        self.jsr = jsr & _UINT32_MASK
        self.jcong = jcong & _UINT32_MASK

    def __iter__(self) -> Iterator[int]:
        return self

    def __next__(self) -> int:
        self.z = (36969 * (self.z & 65535) + (self.z >> 16)) & _UINT32_MASK
        self.w = (18000 * (self.w & 65535) + (self.w >> 16)) & _UINT32_MASK
        mwc = ((self.z << 16) + self.w) & _UINT32_MASK
        jsr = self.jsr
        jsr ^= (jsr << 17) & _UINT32_MASK
        jsr ^= jsr >> 13
        jsr ^= (jsr << 5) & _UINT32_MASK
        self.jsr = jsr
        self.jcong = (69069 * self.jcong + 1234567) & _UINT32_MASK
        return ((mwc ^ self.jcong) + self.jsr) & _UINT32_MASK

    def __repr__(self) -> str:
        return f"Kiss99(z={self.z}, w={self.w}, jsr={self.jsr}, jcong={self.jcong})"


@dataclass(frozen=True)
class FastModData:
    """Constants for division by multiplication: q = ((x + increment) * reciprocal) >> shift."""

    reciprocal: int
    increment: int
    shift: int


def merge(a: str, b: str, r: int) -> str:
    """Return a statement merging b into a while keeping a's entropy."""
    op = r % 4
    if op == 0:
        return f"{a} = ({a} * 33) + {b};\n"
    if op == 1:
        return f"{a} = ({a} ^ {b}) * 33;\n"
    rotation = ((r >> 16) % 31) + 1
    rotate = "ROTL32" if op == 2 else "ROTR32"
    return f"{a} = {rotate}({a}, {rotation}) ^ {b};\n"


_MATH_TEMPLATES = (
    "{d} = {a} + {b};\n",
    "{d} = {a} * {b};\n",
    "{d} = mul_hi({a}, {b});\n",
    "{d} = min({a}, {b});\n",
    "{d} = ROTL32({a}, {b} % 32);\n",
    "{d} = ROTR32({a}, {b} % 32);\n",
    "{d} = {a} & {b};\n",
    "{d} = {a} | {b};\n",
    "{d} = {a} ^ {b};\n",
    "{d} = clz({a}) + clz({b});\n",
    "{d} = popcount({a}) + popcount({b});\n",
)


def math(d: str, a: str, b: str, r: int) -> str:
    """Return a statement storing a random operation on a and b into d."""
    return _MATH_TEMPLATES[r % len(_MATH_TEMPLATES)].format(d=d, a=a, b=b)


def _mix(index: int) -> str:
    return f"mix[{index}]"


def _program_rng(prog_seed: int) -> Kiss99:
    seed0 = prog_seed & _UINT32_MASK
    seed1 = prog_seed >> 32
    h = fnv1a(FNV_OFFSET_BASIS, seed0)
    z = h
    h = fnv1a(h, seed1)
    w = h
    h = fnv1a(h, seed0)
    jsr = h
    h = fnv1a(h, seed1)
    return Kiss99(z, w, jsr, h)


def _shuffled_sequences(rnd: Kiss99) -> tuple[list[int], list[int]]:
    dst = list(range(PROGPOW_REGS))
    cache = list(range(PROGPOW_REGS))
    for i in range(PROGPOW_REGS - 1, 0, -1):
        j = next(rnd) % (i + 1)
        dst[i], dst[j] = dst[j], dst[i]
        j = next(rnd) % (i + 1)
        cache[i], cache[j] = cache[j], cache[i]
    return dst, cache


def _header(kern: KernelType) -> str:
    lines: list[str] = []
    if kern is KernelType.CUDA:
        lines += [
            "typedef unsigned int       uint32_t;\n",
            "typedef unsigned long long uint64_t;\n",
            "#if __CUDA_ARCH__ < 350\n",
            "#define ROTL32(x,n) (((x) << (n % 32)) | ((x) >> (32 - (n % 32))))\n",
            "#define ROTR32(x,n) (((x) >> (n % 32)) | ((x) << (32 - (n % 32))))\n",
            "#else\n",
            "#define ROTL32(x,n) __funnelshift_l((x), (x), (n))\n",
            "#define ROTR32(x,n) __funnelshift_r((x), (x), (n))\n",
            "#endif\n",
            "#define min(a,b) ((a<b) ? a : b)\n",
            "#define mul_hi(a, b) __umulhi(a, b)\n",
            "#define clz(a) __clz(a)\n",
            "#define popcount(a) __popc(a)\n\n",
            "#define DEV_INLINE __device__ __forceinline__\n",
            "#if (__CUDACC_VER_MAJOR__ > 8)\n",
            "#define SHFL(x, y, z) __shfl_sync(0xFFFFFFFF, (x), (y), (z))\n",
            "#else\n",
            "#define SHFL(x, y, z) __shfl((x), (y), (z))\n",
            "#endif\n\n",
            "\n",
        ]
    else:
        lines += [
            "#ifndef GROUP_SIZE\n",
            "#define GROUP_SIZE 128\n",
            "#endif\n",
            f"#define GROUP_SHARE (GROUP_SIZE / {PROGPOW_LANES})\n",
            "\n",
            "typedef unsigned int       uint32_t;\n",
            "typedef unsigned long      uint64_t;\n",
            "#define ROTL32(x, n) rotate((x), (uint32_t)(n))\n",
            "#define ROTR32(x, n) rotate((x), (uint32_t)(32-n))\n",
            "\n",
        ]
    lines += [
        f"#define PROGPOW_LANES           {PROGPOW_LANES}\n",
        f"#define PROGPOW_REGS            {PROGPOW_REGS}\n",
        f"#define PROGPOW_DAG_LOADS       {PROGPOW_DAG_LOADS}\n",
        f"#define PROGPOW_CACHE_WORDS     {PROGPOW_CACHE_BYTES // 4}\n",
        f"#define PROGPOW_CNT_DAG         {PROGPOW_CNT_DAG}\n",
        f"#define PROGPOW_CNT_MATH        {PROGPOW_CNT_MATH}\n",
        "\n",
    ]
    if kern is KernelType.CUDA:
        lines.append("typedef struct __align__(16) {uint32_t s[PROGPOW_DAG_LOADS];} dag_t;\n")
    else:
        lines.append(
            "typedef struct __attribute__ ((aligned (16))) "
            "{uint32_t s[PROGPOW_DAG_LOADS];} dag_t;\n"
        )
    lines.append("\n")
    return "".join(lines)


def _fence(kern: KernelType) -> str:
    if kern is KernelType.CUDA:
        return "if (hack_false) __threadfence_block();\n"
    return "if (hack_false) barrier(CLK_LOCAL_MEM_FENCE);\n"


def _math_body(rnd: Kiss99, kern: KernelType) -> str:
    dst_seq, cache_seq = _shuffled_sequences(rnd)
    next_dst = cycle(dst_seq).__next__
    next_cache = cycle(cache_seq).__next__

    out: list[str] = ["uint32_t offset, data;\n", "// global load\n"]
    # mix[0] is hard coded so the global load address depends on the previous load.
    if kern is KernelType.CUDA:
        out.append("offset = SHFL(mix[0], loop%PROGPOW_LANES, PROGPOW_LANES);\n")
    else:
        out += [
            "if(lane_id == (loop % PROGPOW_LANES))\n",
            "    share[0].uint32s[group_id] = mix[0];\n",
            "barrier(CLK_LOCAL_MEM_FENCE);\n",
            "offset = share[0].uint32s[group_id];\n",
        ]
    out += [
        "offset %= PROGPOW_DAG_ELEMENTS;\n",
        "offset = offset * PROGPOW_LANES + (lane_id ^ loop) % PROGPOW_LANES;\n",
        "dag_t data_dag = g_dag[offset];\n",
        "// hack to prevent compiler from reordering LD and usage\n",
        _fence(kern),
    ]

    for i in range(max(PROGPOW_CNT_CACHE, PROGPOW_CNT_MATH)):
        if i < PROGPOW_CNT_CACHE:
            src = _mix(next_cache())
            dest = _mix(next_dst())
            r = next(rnd)
            out += [
                f"// cache load {i}\n",
                f"offset = {src} % PROGPOW_CACHE_WORDS;\n",
                "data = c_dag[offset];\n",
                merge(dest, "data", r),
            ]
        if i < PROGPOW_CNT_MATH:
            src_rnd = next(rnd) % ((PROGPOW_REGS - 1) * PROGPOW_REGS)
            src1 = src_rnd % PROGPOW_REGS
            src2 = src_rnd // PROGPOW_REGS
            if src2 >= src1:
                src2 += 1
            r1 = next(rnd)
            dest = _mix(next_dst())
            r2 = next(rnd)
            out += [
                f"// random math {i}\n",
                math("data", _mix(src1), _mix(src2), r1),
                merge(dest, "data", r2),
            ]

    # Consume the global load last to hide its latency.
    out += [
        "// consume global load data\n",
        "// hack to prevent compiler from reordering LD and usage\n",
        _fence(kern),
        merge("mix[0]", "data_dag.s[0]", next(rnd)),
    ]
    for i in range(1, PROGPOW_DAG_LOADS):
        dest = _mix(next_dst())
        r = next(rnd)
        out.append(merge(dest, f"data_dag.s[{i}]", r))
    out.append("\n")
    return "".join(out)


def get_kern(kernel_code: str, prog_seed: int, kern: KernelType) -> str:
    """Fill the header and random-math placeholders of kernel_code for prog_seed."""
    if not 0 <= prog_seed <= _UINT64_MASK:
        raise ValueError(f"program seed {prog_seed!r} is not a 64-bit unsigned integer")
    kern = KernelType(kern)
    rnd = _program_rng(prog_seed)
    kernel = kernel_code.replace(HEADER_PLACEHOLDER, _header(kern))
    return kernel.replace(MATH_PLACEHOLDER, _math_body(rnd, kern))


def calculate_fast_mod_data(divisor: int) -> FastModData:
    """Compute reciprocal, increment and shift for fast division by a 32-bit divisor."""
    if not 0 < divisor <= _UINT32_MASK:
        raise ValueError(f"divisor {divisor!r} must be a non-zero 32-bit unsigned integer")
    bit_length = divisor.bit_length()
    if divisor & (divisor - 1) == 0:
        return FastModData(reciprocal=1, increment=0, shift=bit_length - 1)
    shift = 31 + bit_length
    n = 1 << shift
    q, r = divmod(n, divisor)
    if r * 2 < divisor:
        return FastModData(reciprocal=q & _UINT32_MASK, increment=1, shift=shift)
    return FastModData(reciprocal=(q + 1) & _UINT32_MASK, increment=0, shift=shift)