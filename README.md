# kawstratum

Building blocks for a Stratum mining client, in plain Python with no
runtime dependencies.

## Modules

- `kawstratum.encodings`
  - Hex digits: `hex_digit` returns a digit's value or `None`, `is_hex`
    requires even length, and `is_hex_number` accepts an optional lower-case
    `0x` prefix.
  - `parse_hex` decodes hex pairs, skips whitespace between them and stops at
    the first non-hex character.
  - `hex_str` renders bytes as lower-case hex, optionally separated by spaces.
  - `encode_base64` and `decode_base64` use the standard alphabet.
    `encode_base32` and `decode_base32` use a lower-case alphabet; the decoder
    accepts either case. The decoders read up to the first character outside
    the alphabet. With `strict=True` they raise `ValueError` on a bad length
    or bad padding.
  - `timing_resistant_equal` compares in time proportional to the length of
    its first argument.
- `kawstratum.parsing`
  - `parse_int32`, `parse_int64`, `parse_uint32` and `parse_uint64` are strict
    decimal parsers. They raise `ValueError` on empty input, surrounding
    whitespace, NUL characters, garbage or an out-of-range value.
  - `atoi64` leniently reads a leading integer, clamped to the signed 64-bit
    range, and returns 0 when none is found.
  - `split_host_port(text, default_port)` returns `(host, port)` for `host`,
    `host:port` and `[v6]:port`.
  - `parse_fixed_point(text, decimals)` parses a JSON-style number as an
    integer scaled by `10**decimals`. It raises `ValueError` on malformed
    input, on precision that is too fine and on overflow.
  - `sanitize_string(text, rule)` drops the characters that the chosen
    `SafeChars` rule (`DEFAULT`, `UA_COMMENT`, `FILENAME`) does not allow.
- `kawstratum.uint256`
  - Fixed-size opaque blobs `Blob`, `Uint160`, `Uint256` and `Uint512`. They
    are stored least significant byte first and shown as big-endian hex.
  - `from_hex` is lenient: it skips leading whitespace and `0x`, stops at the
    first non-hex character and drops excess high digits.
  - The blobs also provide `is_null`, `set_null`, `get_uint64`,
    `Uint256.nibble` and `Uint512.trim256`.
  - `uint256_from_hex` builds a `Uint256` from a hex string.
- `kawstratum.arith`
  - `ArithUint256` is a 256-bit unsigned integer whose arithmetic wraps modulo
    2**256. It supports `+ - * / & | ^ << >> ~`, unary `-` and comparisons.
    Dividing by zero raises `UintError`.
  - The compact "nBits" encoding: `ArithUint256.from_compact`, `get_compact`
    (raises `UintError` when the value cannot be encoded), and `decode_compact`,
    which returns a `CompactTarget` holding the value and its negative and
    overflow flags.
  - Conversion to and from blobs: `arith_to_uint256`, `uint256_to_arith`.
- `kawstratum.progpow`
  - The ProgPoW random program generator: the `Kiss99` iterator, `fnv1a`,
    `merge` and `math`.
  - `get_kern(kernel_code, prog_seed, kern)` fills the
    `PROGPOW_REPLACE_HEADER` and `PROGPOW_REPLACE_MATH` placeholders of a
    kernel template for CUDA or OpenCL (`KernelType`).
  - `calculate_fast_mod_data(divisor)` returns `FastModData` (reciprocal,
    increment, shift) for division by multiplication.

## What it does not do

The package holds helpers only. It does not:

- open connections to a pool or speak the Stratum protocol;
- compute hashes or build DAGs;
- compile or run the kernel source that `get_kern` produces.

It has no command-line program.

## Install

```
pip install .
```

## Example

```python
from kawstratum.arith import ArithUint256
from kawstratum.parsing import split_host_port

target = ArithUint256.from_compact(0x1D00FFFF)
print(target.hex())
print(split_host_port("pool.example.com:3333", 0))  # ('pool.example.com', 3333)
```

## Tests

```
pip install .[test]
pytest
```