"""Split a string into QR Code input chunks of the cheapest modes."""

from __future__ import annotations

from typing import Union

from .qrinput import (
    QRInput,
    estimate_bits_8,
    estimate_bits_an,
    estimate_bits_num,
    look_an_table,
)
from .qrspec import Mode, length_indicator


def _is_digit(data: bytes, pos: int) -> bool:
    return pos < len(data) and 0x30 <= data[pos] <= 0x39


def _is_an(data: bytes, pos: int) -> bool:
    return pos < len(data) and look_an_table(data[pos]) >= 0


def identify_mode(data: bytes, pos: int = 0, hint: int = Mode.BYTE) -> Mode:
    """Mode best suited to the character at ``data[pos]``.

    The end of the data, or a NUL byte, gives ``Mode.NUL``. Kanji is only
    recognised when ``hint`` is ``Mode.KANJI``.
    """
    if pos >= len(data) or data[pos] == 0:
        return Mode.NUL
    c = data[pos]
    if 0x30 <= c <= 0x39:
        return Mode.NUM
    if look_an_table(c) >= 0:
        return Mode.AN
    if hint == Mode.KANJI and pos + 1 < len(data) and data[pos + 1] != 0:
        word = (c << 8) | data[pos + 1]
        if 0x8140 <= word <= 0x9FFC or 0xE040 <= word <= 0xEBBF:
            return Mode.KANJI
    return Mode.BYTE


class _Splitter:
    def __init__(self, data: bytes, qrinput: QRInput, hint: int) -> None:
        self.data = data
        self.qrinput = qrinput
        self.hint = hint
        version = qrinput.version
        self.la = length_indicator(Mode.AN, version)
        self.ln = length_indicator(Mode.NUM, version)
        self.l8 = length_indicator(Mode.BYTE, version)

    def mode_at(self, pos: int) -> Mode:
        return identify_mode(self.data, pos, self.hint)

    def _digits_end(self, pos: int) -> int:
        while _is_digit(self.data, pos):
            pos += 1
        return pos

    def _an_end(self, pos: int) -> int:
        while _is_an(self.data, pos):
            pos += 1
        return pos

    def _emit(self, mode: Mode, start: int, end: int) -> int:
        self.qrinput.append(mode, self.data[start:end])
        return end - start

    def eat_num(self, start: int) -> int:
        end = self._digits_end(start)
        run = end - start
        mode = self.mode_at(end)
        if mode == Mode.BYTE:
            dif = (estimate_bits_num(run) + 4 + self.ln
                   + estimate_bits_8(1) - estimate_bits_8(run + 1))
            if dif > 0:
                return self.eat_8(start)
        if mode == Mode.AN:
            dif = (estimate_bits_num(run) + 4 + self.ln
                   + estimate_bits_an(1) - estimate_bits_an(run + 1))
            if dif > 0:
                return self.eat_an(start)
        return self._emit(Mode.NUM, start, end)

    def eat_an(self, start: int) -> int:
        data = self.data
        p = start
        while _is_an(data, p):
            if _is_digit(data, p):
                q = self._digits_end(p)
                dif = (estimate_bits_an(p - start)
                       + estimate_bits_num(q - p) + 4 + self.ln
                       + (4 + self.ln if _is_an(data, q) else 0)
                       - estimate_bits_an(q - start))
                if dif < 0:
                    break
                p = q
            else:
                p += 1
        run = p - start
        if p < len(data) and not _is_an(data, p):
            dif = (estimate_bits_an(run) + 4 + self.la
                   + estimate_bits_8(1) - estimate_bits_8(run + 1))
            if dif > 0:
                return self.eat_8(start)
        return self._emit(Mode.AN, start, p)

    def eat_kanji(self, start: int) -> int:
        p = start
        while self.mode_at(p) == Mode.KANJI:
            p += 2
        return self._emit(Mode.KANJI, start, p)

    def eat_8(self, start: int) -> int:
        p = start + 1
        while p < len(self.data):
            mode = self.mode_at(p)
            if mode == Mode.KANJI:
                break
            if mode in (Mode.NUM, Mode.AN):
                if mode == Mode.NUM:
                    q = self._digits_end(p)
                    cost = estimate_bits_num(q - p) + 4 + self.ln
                else:
                    q = self._an_end(p)
                    cost = estimate_bits_an(q - p) + 4 + self.la
                swcost = 4 + self.l8 if self.mode_at(q) == Mode.BYTE else 0
                dif = (estimate_bits_8(p - start) + cost + swcost
                       - estimate_bits_8(q - start))
                if dif < 0:
                    break
                p = q
            else:
                p += 1
        return self._emit(Mode.BYTE, start, p)

    def run(self) -> None:
        pos = 0
        while pos < len(self.data):
            mode = self.mode_at(pos)
            if mode == Mode.NUM:
                length = self.eat_num(pos)
            elif mode == Mode.AN:
                length = self.eat_an(pos)
            elif mode == Mode.KANJI and self.hint == Mode.KANJI:
                length = self.eat_kanji(pos)
            else:
                length = self.eat_8(pos)
            if length == 0:
                break
            pos += length


def _to_upper(data: bytes, hint: int) -> bytes:
    out = bytearray(data)
    pos = 0
    while pos < len(out):
        if identify_mode(out, pos, hint) == Mode.KANJI:
            pos += 2
        else:
            if 0x61 <= out[pos] <= 0x7A:
                out[pos] -= 32
            pos += 1
    return bytes(out)


def split_string(
    string: Union[str, bytes],
    qrinput: QRInput,
    hint: int = Mode.BYTE,
    case_sensitive: bool = True,
) -> None:
    """Append ``string`` to ``qrinput`` as chunks of the cheapest modes.

    Give ``Mode.KANJI`` as ``hint`` when the data holds Shift-JIS kanji.
    Without ``case_sensitive`` lower-case letters are turned to upper case.
    Data ends at the first NUL byte. Raises ValueError for empty data.
    """
    data = string.encode("utf-8") if isinstance(string, str) else bytes(string)
    data = data.split(b"\0", 1)[0]
    if not data:
        raise ValueError("empty input string")
    if not case_sensitive:
        data = _to_upper(data, hint)
    _Splitter(data, qrinput, hint).run()