"""Stratum mining helpers: codecs, strict parsing, 256-bit integers and ProgPoW kernel generation."""

__version__ = "0.1.0"
__all__ = ["arith", "encodings", "parsing", "progpow", "uint256"]