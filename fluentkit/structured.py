"""Structured-append input: a set of QR Code symbols that carry one message."""

from __future__ import annotations

from typing import Iterator, MutableSequence, Optional

from .qrinput import (
    MAX_STRUCTURED_SYMBOLS,
    STRUCTURE_HEADER_SIZE,
    Entry,
    QRInput,
    _encode_entry,
    _estimate_entry_bits,
    length_of_code,
)
from .qrspec import data_length


class StructuredInput:
    """Ordered inputs of a structured-append symbol set."""

    def __init__(self) -> None:
        self._inputs: list[QRInput] = []
        self.parity: Optional[int] = None

    def append(self, qrinput: QRInput) -> int:
        """Add an input to the set; return the new number of symbols."""
        self._inputs.append(qrinput)
        return len(self._inputs)

    def __len__(self) -> int:
        return len(self._inputs)

    def __iter__(self) -> Iterator[QRInput]:
        return iter(self._inputs)

    def calc_parity(self) -> int:
        """XOR of the parities of all inputs; it is stored as ``parity``."""
        result = 0
        for qrinput in self._inputs:
            result ^= qrinput.parity()
        self.parity = result
        return result

    def insert_structured_append_headers(self) -> None:
        """Put a structured-append header in front of every input.

        A set of a single symbol gets no header.
        """
        if len(self._inputs) == 1:
            return
        if self.parity is None:
            self.calc_parity()
        size = len(self._inputs)
        for number, qrinput in enumerate(self._inputs, start=1):
            qrinput.insert_structured_append_header(size, number, self.parity)


def split_entry(entries: MutableSequence[Entry], index: int, nbytes: int) -> None:
    """Split ``entries[index]`` in place after its first ``nbytes`` bytes.

    Raises ValueError if either half would not be valid data for the mode.
    """
    entry = entries[index]
    head = Entry(entry.mode, entry.data[:nbytes])
    tail = Entry(entry.mode, entry.data[nbytes:])
    entries[index:index + 1] = [head, tail]


def split_input(qrinput: QRInput) -> StructuredInput:
    """Spread the data of ``qrinput`` over a structured-append set.

    Every symbol has the version and level of ``qrinput``. Raises
    ValueError when the symbol is too small or more than the allowed
    number of symbols would be needed.
    """
    version = qrinput.version
    level = qrinput.level

    result = StructuredInput()
    result.parity = qrinput.parity()

    maxbits = data_length(version, level) * 8 - STRUCTURE_HEADER_SIZE
    if maxbits <= 0:
        raise ValueError("symbol is too small for a structured-append set")

    pending = list(qrinput.entries)
    chunk: list[Entry] = []
    bits = 0

    def close_chunk() -> None:
        part = QRInput(version, level)
        part.entries = list(chunk)
        result.append(part)

    while pending:
        entry = pending[0]
        nextbits = _estimate_entry_bits(entry, version)
        if bits + nextbits <= maxbits:
            bits += _encode_entry(entry, [], version)
            chunk.append(pending.pop(0))
            continue

        nbytes = length_of_code(entry.mode, version, maxbits - bits)
        if nbytes > 0:
            split_entry(pending, 0, nbytes)
            chunk.append(pending.pop(0))
        elif not chunk:
            raise ValueError("data chunk cannot be fitted into a symbol")
        close_chunk()
        chunk = []
        bits = 0

    close_chunk()

    if len(result) > MAX_STRUCTURED_SYMBOLS:
        raise ValueError("input data needs too many structured symbols")
    result.insert_structured_append_headers()
    return result