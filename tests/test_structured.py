import pytest

from fluentkit.qrinput import MAX_STRUCTURED_SYMBOLS, Entry, QRInput, length_of_code
from fluentkit.qrspec import ECLevel, Mode, data_length
from fluentkit.structured import StructuredInput, split_entry, split_input


def _input(data, mode=Mode.BYTE, version=1, level=ECLevel.H):
    qr = QRInput(version, level)
    qr.append(mode, data)
    return qr


def test_append_returns_size_and_iterates_in_order():
    s = StructuredInput()
    a = _input(b"A")
    b = _input(b"B")
    assert s.append(a) == 1
    assert s.append(b) == 2
    assert len(s) == 2
    assert list(s) == [a, b]


def test_calc_parity_is_xor_of_input_parities():
    s = StructuredInput()
    a = _input(b"HELLO")
    b = _input(b"WORLD")
    s.append(a)
    s.append(b)
    assert s.calc_parity() == a.parity() ^ b.parity()
    assert s.parity == a.parity() ^ b.parity()


def test_single_input_gets_no_header():
    s = StructuredInput()
    a = _input(b"A")
    s.append(a)
    s.insert_structured_append_headers()
    assert [e.mode for e in a.entries] == [Mode.BYTE]


def test_headers_carry_size_number_and_parity():
    s = StructuredInput()
    a = _input(b"A")
    b = _input(b"B")
    s.append(a)
    s.append(b)
    s.insert_structured_append_headers()
    parity = ord("A") ^ ord("B")
    assert a.entries[0] == Entry(Mode.STRUCTURE, bytes([2, 1, parity]))
    assert b.entries[0] == Entry(Mode.STRUCTURE, bytes([2, 2, parity]))
    assert a.entries[1].data == b"A"


def test_preset_parity_is_used():
    s = StructuredInput()
    a = _input(b"A")
    b = _input(b"B")
    s.append(a)
    s.append(b)
    s.parity = 0x5A
    s.insert_structured_append_headers()
    assert a.entries[0].data[2] == 0x5A
    assert b.entries[0].data[2] == 0x5A


def test_split_entry_in_place():
    entries = [Entry(Mode.NUM, b"0123456789"), Entry(Mode.BYTE, b"x")]
    split_entry(entries, 0, 4)
    assert entries == [
        Entry(Mode.NUM, b"0123"),
        Entry(Mode.NUM, b"456789"),
        Entry(Mode.BYTE, b"x"),
    ]


def test_split_entry_rejects_empty_half():
    entries = [Entry(Mode.BYTE, b"abc")]
    with pytest.raises(ValueError):
        split_entry(entries, 0, 3)


def test_split_input_small_data_stays_single():
    qr = _input(b"AB", version=5, level=ECLevel.L)
    s = split_input(qr)
    assert len(s) == 1
    only = next(iter(s))
    assert only.entries == [Entry(Mode.BYTE, b"AB")]
    assert qr.entries == [Entry(Mode.BYTE, b"AB")]


def test_split_input_spreads_data_over_symbols():
    data = bytes(range(40, 80))
    qr = _input(data)
    s = split_input(qr)
    assert len(s) > 1
    assert s.parity == qr.parity()
    limit = length_of_code(Mode.BYTE, 1, data_length(1, ECLevel.H) * 8 - 20)
    joined = b""
    for number, part in enumerate(s, start=1):
        header = part.entries[0]
        assert header.mode == Mode.STRUCTURE
        assert header.data == bytes([len(s), number, qr.parity()])
        body = part.entries[1:]
        for entry in body:
            assert entry.mode == Mode.BYTE
            assert len(entry.data) <= limit
            joined += entry.data
    assert joined == data


def test_split_parts_fit_their_symbol():
    qr = _input(b"z" * 30)
    s = split_input(qr)
    for part in s:
        assert len(part.byte_stream()) == data_length(1, ECLevel.H)
        assert part.version == 1


def test_split_input_keeps_original_untouched():
    data = b"q" * 25
    qr = _input(data)
    split_input(qr)
    assert qr.entries == [Entry(Mode.BYTE, data)]


def test_split_input_version_zero_rejected():
    qr = QRInput(0, ECLevel.L)
    qr.append(Mode.BYTE, b"abc")
    with pytest.raises(ValueError):
        split_input(qr)


def test_split_input_too_many_symbols():
    qr = _input(b"a" * 200)
    with pytest.raises(ValueError):
        split_input(qr)


def test_split_input_at_symbol_limit_is_allowed():
    limit = length_of_code(Mode.BYTE, 1, data_length(1, ECLevel.H) * 8 - 20)
    qr = _input(b"b" * (limit * MAX_STRUCTURED_SYMBOLS))
    s = split_input(qr)
    assert len(s) == MAX_STRUCTURED_SYMBOLS