"""Reed-Solomon error correction codes over GF(256) as used by QR Code."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable

_SYMBOLS = 255
_PRIMITIVE = 0x11D  # x^8 + x^4 + x^3 + x^2 + 1

MIN_ECC_LENGTH = 2
MAX_ECC_LENGTH = 30


def _build_tables() -> tuple[tuple[int, ...], tuple[int, ...]]:
    alpha = [0] * (_SYMBOLS + 1)
    index = [0] * (_SYMBOLS + 1)
    index[0] = _SYMBOLS
    value = 1
    for power in range(_SYMBOLS):
        alpha[power] = value
        index[value] = power
        value <<= 1
        if value & 0x100:
            value ^= _PRIMITIVE
        value &= _SYMBOLS
    return tuple(alpha), tuple(index)


_ALPHA, _INDEX = _build_tables()


@lru_cache(maxsize=None)
def _generator(length: int) -> tuple[int, ...]:
    """Generator polynomial coefficients in log form, lowest degree first."""
    g = [1] + [0] * length
    for i in range(length):
        g[i + 1] = 1
        for j in range(i, 0, -1):
            g[j] = g[j - 1] ^ _ALPHA[(_INDEX[g[j]] + i) % _SYMBOLS]
        g[0] = _ALPHA[(_INDEX[g[0]] + i) % _SYMBOLS]
    return tuple(_INDEX[c] for c in g)


def rs_encode(data: Iterable[int], ecc_length: int) -> bytes:
    """Compute ``ecc_length`` error correction codewords for ``data``.

    Raises ValueError when ``ecc_length`` is outside 2..30.
    """
    if not MIN_ECC_LENGTH <= ecc_length <= MAX_ECC_LENGTH:
        raise ValueError(f"unsupported ECC length: {ecc_length}")
    gen = _generator(ecc_length)
    ecc = [0] * ecc_length
    for byte in data:
        if not 0 <= byte <= 0xFF:
            raise ValueError(f"not a byte value: {byte}")
        feedback = _INDEX[byte ^ ecc[0]]
        if feedback != _SYMBOLS:
            for j in range(1, ecc_length):
                ecc[j] ^= _ALPHA[(feedback + gen[ecc_length - j]) % _SYMBOLS]
        del ecc[0]
        if feedback != _SYMBOLS:
            ecc.append(_ALPHA[(feedback + gen[0]) % _SYMBOLS])
        else:
            ecc.append(0)
    return bytes(ecc)