"""Input data for a QR Code symbol: chunks, bit-stream encoding and padding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Union

from .qrspec import (
    MODEID_8,
    MODEID_AN,
    MODEID_ECI,
    MODEID_FNC1SECOND,
    MODEID_KANJI,
    MODEID_NUM,
    MODEID_STRUCTURE,
    VERSION_MAX,
    ECLevel,
    Mode,
    data_length,
    length_indicator,
    maximum_words,
    minimum_version,
)

MODE_INDICATOR_SIZE = 4
"""Length of a standard mode indicator in bits."""

STRUCTURE_HEADER_SIZE = 20
"""Length of a structured-append header in bits."""

MAX_STRUCTURED_SYMBOLS = 16
"""Maximum number of symbols in a structured-append set."""

# Alphanumeric conversion table (JIS X0510:2004, pp.19).
_AN_TABLE: tuple[int, ...] = (
    -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1,
    -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1,
    36, -1, -1, -1, 37, 38, -1, -1, -1, -1, 39, 40, -1, 41, 42, 43,
    0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 44, -1, -1, -1, -1, -1,
    -1, 10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 20, 21, 22, 23, 24,
    25, 26, 27, 28, 29, 30, 31, 32, 33, 34, 35, -1, -1, -1, -1, -1,
    -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1,
    -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1, -1,
)

BytesLike = Union[bytes, bytearray, memoryview, str]


def look_an_table(c: Union[int, str]) -> int:
    """Alphanumeric code of a character, or -1 if it has none."""
    if isinstance(c, str):
        c = ord(c)
    if c < 0 or c & 0x80 or c > 0xFF:
        return -1
    return _AN_TABLE[c]


def _check_kanji(data: bytes) -> bool:
    if len(data) % 2:
        return False
    for hi, lo in zip(data[::2], data[1::2]):
        val = (hi << 8) | lo
        if val < 0x8140 or 0x9FFC < val < 0xE040 or val > 0xEBBF:
            return False
    return True


def check(mode: int, data: bytes) -> bool:
    """Whether ``data`` is valid input for ``mode``."""
    if len(data) <= 0:
        return False
    try:
        mode = Mode(mode)
    except ValueError:
        return False
    if mode == Mode.NUM:
        return all(0x30 <= b <= 0x39 for b in data)
    if mode == Mode.AN:
        return all(look_an_table(b) >= 0 for b in data)
    if mode == Mode.KANJI:
        return _check_kanji(data)
    if mode in (Mode.BYTE, Mode.STRUCTURE, Mode.ECI, Mode.FNC1FIRST):
        return True
    if mode == Mode.FNC1SECOND:
        return len(data) == 1
    return False


def estimate_bits_num(size: int) -> int:
    """Bits taken by ``size`` digits in numeric mode, without headers."""
    words, rest = divmod(size, 3)
    return words * 10 + {1: 4, 2: 7}.get(rest, 0)


def estimate_bits_an(size: int) -> int:
    """Bits taken by ``size`` characters in alphanumeric mode, without headers."""
    return (size // 2) * 11 + (6 if size & 1 else 0)


def estimate_bits_8(size: int) -> int:
    """Bits taken by ``size`` bytes in 8-bit mode, without headers."""
    return size * 8


def estimate_bits_kanji(size: int) -> int:
    """Bits taken by ``size`` bytes of Shift-JIS kanji, without headers."""
    return (size // 2) * 13


def length_of_code(mode: int, version: int, bits: int) -> int:
    """Number of input bytes of ``mode`` that fit in ``bits`` bits, headers included."""
    payload = bits - 4 - length_indicator(mode, version)
    if mode == Mode.NUM:
        chunks, remain = divmod(payload, 10)
        size = chunks * 3
        if remain >= 7:
            size += 2
        elif remain >= 4:
            size += 1
    elif mode == Mode.AN:
        chunks, remain = divmod(payload, 11)
        size = chunks * 2 + (1 if remain >= 6 else 0)
    elif mode in (Mode.BYTE, Mode.STRUCTURE):
        size = payload // 8
    elif mode == Mode.KANJI:
        size = (payload // 13) * 2
    else:
        size = 0
    maxsize = maximum_words(mode, version)
    size = max(size, 0)
    if maxsize > 0 and size > maxsize:
        size = maxsize
    return size


def _to_bytes(data: BytesLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


@dataclass(frozen=True)
class Entry:
    """One chunk of input data in a single mode."""

    mode: Mode
    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _to_bytes(self.data))
        if not check(self.mode, self.data):
            raise ValueError(f"invalid data for mode {self.mode!r}")
        object.__setattr__(self, "mode", Mode(self.mode))


# --- bit-stream helpers ------------------------------------------------------


def _append_num(out: list[int], width: int, value: int) -> None:
    out.extend((value >> shift) & 1 for shift in range(width - 1, -1, -1))


def _append_bytes(out: list[int], data: Iterable[int]) -> None:
    for byte in data:
        _append_num(out, 8, byte)


def _pack(bits: list[int]) -> bytes:
    out = bytearray()
    for start in range(0, len(bits), 8):
        chunk = bits[start:start + 8]
        value = 0
        for bit in chunk:
            value = (value << 1) | bit
        out.append(value << (8 - len(chunk)))
    return bytes(out)


def _decode_eci(data: bytes) -> int:
    return int.from_bytes(data[:4], "little")


def _encode_num(entry: Entry, out: list[int], version: int) -> None:
    data = entry.data
    _append_num(out, 4, MODEID_NUM)
    _append_num(out, length_indicator(Mode.NUM, version), len(data))
    words = len(data) // 3
    for start in range(0, words * 3, 3):
        _append_num(out, 10, int(data[start:start + 3]))
    rest = data[words * 3:]
    if len(rest) == 1:
        _append_num(out, 4, int(rest))
    elif len(rest) == 2:
        _append_num(out, 7, int(rest))


def _encode_an(entry: Entry, out: list[int], version: int) -> None:
    data = entry.data
    _append_num(out, 4, MODEID_AN)
    _append_num(out, length_indicator(Mode.AN, version), len(data))
    for first, second in zip(data[::2], data[1::2]):
        _append_num(out, 11, look_an_table(first) * 45 + look_an_table(second))
    if len(data) & 1:
        _append_num(out, 6, look_an_table(data[-1]))


def _encode_8(entry: Entry, out: list[int], version: int) -> None:
    _append_num(out, 4, MODEID_8)
    _append_num(out, length_indicator(Mode.BYTE, version), len(entry.data))
    _append_bytes(out, entry.data)


def _encode_kanji(entry: Entry, out: list[int], version: int) -> None:
    data = entry.data
    _append_num(out, 4, MODEID_KANJI)
    _append_num(out, length_indicator(Mode.KANJI, version), len(data) // 2)
    for hi, lo in zip(data[::2], data[1::2]):
        val = (hi << 8) | lo
        val -= 0x8140 if val <= 0x9FFC else 0xC140
        val = (val & 0xFF) + (val >> 8) * 0xC0
        _append_num(out, 13, val)


def _encode_structure(entry: Entry, out: list[int], version: int) -> None:
    size, number, parity = entry.data[0], entry.data[1], entry.data[2]
    _append_num(out, 4, MODEID_STRUCTURE)
    _append_num(out, 4, (number - 1) & 0xF)
    _append_num(out, 4, (size - 1) & 0xF)
    _append_num(out, 8, parity)


def _encode_eci(entry: Entry, out: list[int], version: int) -> None:
    ecinum = _decode_eci(entry.data)
    if ecinum < 128:
        words, code = 1, ecinum
    elif ecinum < 16384:
        words, code = 2, 0x8000 + ecinum
    else:
        words, code = 3, 0xC0000 + ecinum
    _append_num(out, 4, MODEID_ECI)
    _append_num(out, words * 8, code)


def _encode_fnc1_second(entry: Entry, out: list[int], version: int) -> None:
    _append_num(out, 4, MODEID_FNC1SECOND)
    _append_bytes(out, entry.data[:1])


_ENCODERS: dict[Mode, Callable[[Entry, list[int], int], None]] = {
    Mode.NUM: _encode_num,
    Mode.AN: _encode_an,
    Mode.BYTE: _encode_8,
    Mode.KANJI: _encode_kanji,
    Mode.STRUCTURE: _encode_structure,
    Mode.ECI: _encode_eci,
    Mode.FNC1SECOND: _encode_fnc1_second,
}


def _encode_entry(entry: Entry, out: list[int], version: int) -> int:
    """Append the bits of ``entry`` to ``out``; return how many were added."""
    start = len(out)
    words = maximum_words(entry.mode, version)
    if words and len(entry.data) > words:
        _encode_entry(Entry(entry.mode, entry.data[:words]), out, version)
        _encode_entry(Entry(entry.mode, entry.data[words:]), out, version)
    else:
        encoder = _ENCODERS.get(entry.mode)
        if encoder is not None:
            encoder(entry, out, version)
    return len(out) - start


def _estimate_entry_bits(entry: Entry, version: int) -> int:
    """Estimated length in bits of ``entry`` encoded at ``version``."""
    if version == 0:
        version = 1
    size = len(entry.data)
    mode = entry.mode
    if mode == Mode.NUM:
        bits = estimate_bits_num(size)
    elif mode == Mode.AN:
        bits = estimate_bits_an(size)
    elif mode == Mode.BYTE:
        bits = estimate_bits_8(size)
    elif mode == Mode.KANJI:
        bits = estimate_bits_kanji(size)
    elif mode == Mode.STRUCTURE:
        return STRUCTURE_HEADER_SIZE
    elif mode == Mode.ECI:
        ecinum = _decode_eci(entry.data)
        if ecinum < 128:
            bits = MODE_INDICATOR_SIZE + 8
        elif ecinum < 16384:
            bits = MODE_INDICATOR_SIZE + 16
        else:
            bits = MODE_INDICATOR_SIZE + 24
    elif mode == Mode.FNC1FIRST:
        return MODE_INDICATOR_SIZE
    elif mode == Mode.FNC1SECOND:
        return MODE_INDICATOR_SIZE + 8
    else:
        return 0

    indicator = length_indicator(mode, version)
    per_chunk = 1 << indicator
    units = size // 2 if mode == Mode.KANJI else size
    chunks = (units + per_chunk - 1) // per_chunk
    return bits + chunks * (MODE_INDICATOR_SIZE + indicator)


def _estimate_size(entries: Iterable[Entry], version: int) -> int:
    return sum(_estimate_entry_bits(entry, version) for entry in entries)


def _estimate_version(entries: list[Entry], level: ECLevel) -> int:
    version = 0
    while True:
        prev = version
        bits = _estimate_size(entries, prev)
        version = minimum_version((bits + 7) // 8, level)
        if prev == 0 and version > 1:
            version -= 1
        if version <= prev:
            return version


class QRInput:
    """Ordered chunks of input data for one standard QR Code symbol."""

    def __init__(self, version: int = 0, level: int = ECLevel.L) -> None:
        self.version = version
        self.level = level
        self.entries: list[Entry] = []
        self._fnc1 = 0
        self._appid = 0

    @property
    def version(self) -> int:
        """Symbol version; 0 lets it be chosen from the data."""
        return self._version

    @version.setter
    def version(self, version: int) -> None:
        if not 0 <= version <= VERSION_MAX:
            raise ValueError(f"invalid QR Code version: {version}")
        self._version = version

    @property
    def level(self) -> ECLevel:
        """Error correction level."""
        return self._level

    @level.setter
    def level(self, level: int) -> None:
        self._level = ECLevel(level)

    def append(self, mode: int, data: BytesLike) -> None:
        """Append a chunk of data in ``mode``; raise ValueError if it is invalid."""
        self.entries.append(Entry(Mode(mode), _to_bytes(data)))

    def append_eci_header(self, ecinum: int) -> None:
        """Append an ECI designator (0..999999)."""
        if not 0 <= ecinum <= 999999:
            raise ValueError(f"invalid ECI number: {ecinum}")
        self.append(Mode.ECI, ecinum.to_bytes(4, "little"))

    def insert_structured_append_header(self, size: int, number: int, parity: int) -> None:
        """Put a structured-append header in front of the data."""
        if size > MAX_STRUCTURED_SYMBOLS:
            raise ValueError(f"too many structured symbols: {size}")
        if number <= 0 or number > size:
            raise ValueError(f"invalid symbol number {number} of {size}")
        self.entries.insert(0, Entry(Mode.STRUCTURE, bytes([size, number, parity & 0xFF])))

    def set_fnc1_first(self) -> None:
        """Mark the symbol as FNC1 in first position."""
        self._fnc1 = 1

    def set_fnc1_second(self, appid: int) -> None:
        """Mark the symbol as FNC1 in second position with application id ``appid``."""
        if not 0 <= appid <= 0xFF:
            raise ValueError(f"invalid application identifier: {appid}")
        self._fnc1 = 2
        self._appid = appid

    def copy(self) -> QRInput:
        """Independent copy of this input."""
        other = QRInput(self.version, self.level)
        other.entries = list(self.entries)
        other._fnc1 = self._fnc1
        other._appid = self._appid
        return other

    def parity(self) -> int:
        """XOR of all data bytes, structured-append headers excluded."""
        result = 0
        for entry in self.entries:
            if entry.mode != Mode.STRUCTURE:
                for byte in entry.data:
                    result ^= byte
        return result

    def estimate_bit_stream_size(self, version: int) -> int:
        """Estimated length in bits of all chunks encoded at ``version``."""
        return _estimate_size(self.entries, version)

    def estimate_version(self) -> int:
        """Estimated smallest version that holds the data."""
        return _estimate_version(self.entries, self.level)

    def _merged_entries(self) -> list[Entry]:
        entries = list(self.entries)
        if self._fnc1 == 1:
            header = Entry(Mode.FNC1FIRST, b"")
        elif self._fnc1 == 2:
            header = Entry(Mode.FNC1SECOND, bytes([self._appid]))
        else:
            return entries
        if entries and entries[0].mode in (Mode.STRUCTURE, Mode.ECI):
            entries.insert(1, header)
        else:
            entries.insert(0, header)
        return entries

    def _convert(self, entries: list[Entry]) -> list[int]:
        estimated = _estimate_version(entries, self.level)
        if estimated > self.version:
            self.version = estimated
        while True:
            bits: list[int] = []
            for entry in entries:
                _encode_entry(entry, bits, self.version)
            needed = minimum_version((len(bits) + 7) // 8, self.level)
            if needed > self.version:
                self.version = needed
            else:
                return bits

    def _pad(self, bits: list[int]) -> None:
        maxwords = data_length(self.version, self.level)
        maxbits = maxwords * 8
        if maxbits < len(bits):
            raise ValueError("input data is too large")
        if maxbits == len(bits):
            return
        if maxbits - len(bits) <= 4:
            _append_num(bits, maxbits - len(bits), 0)
            return
        words = (len(bits) + 4 + 7) // 8
        _append_num(bits, words * 8 - len(bits), 0)
        for i in range(maxwords - words):
            _append_num(bits, 8, 0x11 if i & 1 else 0xEC)

    def bit_stream(self) -> list[int]:
        """Encoded and padded data as a list of bits.

        The version grows if the data does not fit; ValueError is raised
        when it does not fit even the largest symbol.
        """
        bits = self._convert(self._merged_entries())
        self._pad(bits)
        return bits

    def byte_stream(self) -> bytes:
        """Encoded and padded data as data codewords."""
        return _pack(self.bit_stream())