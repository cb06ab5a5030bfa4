import pytest

from fluentkit.qrinput import (
    MAX_STRUCTURED_SYMBOLS,
    Entry,
    QRInput,
    check,
    estimate_bits_8,
    estimate_bits_an,
    estimate_bits_kanji,
    estimate_bits_num,
    length_of_code,
    look_an_table,
)
from fluentkit.qrspec import ECLevel, Mode, data_length


def bits_str(bits):
    return "".join(str(b) for b in bits)


# Worked examples from the QR Code specification.
NUM_EXAMPLE_BITS = "0001" "0000001000" "0000001100" "0101011001" "1000011"
AN_EXAMPLE_BITS = "0010" "000000101" "00111001110" "11100111001" "000010"
KANJI_EXAMPLE_BITS = "1000" "00000010" "0110110011111" "1101010101010"


def test_look_an_table_values():
    assert look_an_table("0") == 0
    assert look_an_table("A") == 10
    assert look_an_table(" ") == 36
    assert look_an_table(":") == 44
    assert look_an_table("a") == -1
    assert look_an_table(0x80) == -1


@pytest.mark.parametrize(
    "mode, data, expected",
    [
        (Mode.NUM, b"0123", True),
        (Mode.NUM, b"12a", False),
        (Mode.AN, b"AC-42", True),
        (Mode.AN, b"ac", False),
        (Mode.KANJI, b"\x93\x5f", True),
        (Mode.KANJI, b"\x93", False),
        (Mode.KANJI, b"\xa0\x40", False),
        (Mode.BYTE, b"\xff\x00", True),
        (Mode.BYTE, b"", False),
        (Mode.FNC1SECOND, b"\x01", True),
        (Mode.FNC1SECOND, b"\x01\x02", False),
        (Mode.NUL, b"1", False),
    ],
)
def test_check(mode, data, expected):
    assert check(mode, data) is expected


def test_entry_rejects_invalid_data():
    with pytest.raises(ValueError):
        Entry(Mode.NUM, b"12x")


@pytest.mark.parametrize("n", range(1, 31))
def test_length_of_code_inverts_estimates(n):
    assert length_of_code(Mode.NUM, 1, 4 + 10 + estimate_bits_num(n)) == n
    assert length_of_code(Mode.AN, 1, 4 + 9 + estimate_bits_an(n)) == n
    assert length_of_code(Mode.BYTE, 1, 4 + 8 + estimate_bits_8(n)) == n
    assert length_of_code(Mode.KANJI, 1, 4 + 8 + estimate_bits_kanji(2 * n)) == 2 * n


def test_length_of_code_never_negative():
    assert length_of_code(Mode.NUM, 1, 3) == 0


@pytest.mark.parametrize("version, level", [(-1, 0), (41, 0), (1, 4)])
def test_invalid_construction(version, level):
    with pytest.raises(ValueError):
        QRInput(version, level)


def test_version_setter_validates():
    qr = QRInput()
    qr.version = 10
    assert qr.version == 10
    with pytest.raises(ValueError):
        qr.version = 41


def test_numeric_worked_example():
    qr = QRInput(0, ECLevel.M)
    qr.append(Mode.NUM, b"01234567")
    assert qr.estimate_bit_stream_size(1) == len(NUM_EXAMPLE_BITS)
    stream = qr.byte_stream()
    assert qr.version == 1
    assert stream == bytes(
        [0x10, 0x20, 0x0C, 0x56, 0x61, 0x80]
        + [0xEC, 0x11] * 5
    )[:16]


def test_alphanumeric_worked_example():
    qr = QRInput(1, ECLevel.H)
    qr.append(Mode.AN, "AC-42")
    bits = qr.bit_stream()
    assert bits_str(bits[: len(AN_EXAMPLE_BITS)]) == AN_EXAMPLE_BITS
    assert len(bits) == data_length(1, ECLevel.H) * 8


def test_kanji_worked_example():
    qr = QRInput(1, ECLevel.L)
    qr.append(Mode.KANJI, b"\x93\x5f\xe4\xaa")
    bits = qr.bit_stream()
    assert bits_str(bits[: len(KANJI_EXAMPLE_BITS)]) == KANJI_EXAMPLE_BITS


def test_version_grows_to_fit_data():
    qr = QRInput(1, ECLevel.L)
    qr.append(Mode.BYTE, b"x" * 100)
    stream = qr.byte_stream()
    assert qr.version > 1
    assert qr.version >= qr.estimate_version()
    assert len(stream) == data_length(qr.version, ECLevel.L)


def test_too_large_input_raises():
    qr = QRInput(0, ECLevel.H)
    qr.append(Mode.BYTE, b"x" * 3000)
    with pytest.raises(ValueError):
        qr.byte_stream()


def test_eci_header_bytes_and_bits():
    qr = QRInput(1)
    qr.append_eci_header(3)
    assert qr.entries[-1].data == b"\x03\x00\x00\x00"
    qr.append(Mode.BYTE, b"a")
    bits = qr.bit_stream()
    assert bits_str(bits[:12]) == "0111" + "00000011"


def test_eci_header_out_of_range():
    with pytest.raises(ValueError):
        QRInput().append_eci_header(1000000)


def test_structured_append_header():
    qr = QRInput(1)
    qr.append(Mode.BYTE, b"a")
    qr.insert_structured_append_header(3, 1, 0x55)
    assert qr.entries[0] == Entry(Mode.STRUCTURE, bytes([3, 1, 0x55]))
    bits = qr.bit_stream()
    assert bits_str(bits[:20]) == "0011" "0000" "0010" "01010101"


@pytest.mark.parametrize(
    "size, number",
    [(MAX_STRUCTURED_SYMBOLS + 1, 1), (3, 0), (3, 4)],
)
def test_structured_append_header_invalid(size, number):
    with pytest.raises(ValueError):
        QRInput().insert_structured_append_header(size, number, 0)


def test_parity_ignores_structure_header():
    qr = QRInput()
    qr.append(Mode.BYTE, b"\x01\x02")
    qr.append(Mode.BYTE, b"\x04")
    before = qr.parity()
    qr.insert_structured_append_header(2, 1, 0xFF)
    assert before == 0x01 ^ 0x02 ^ 0x04
    assert qr.parity() == before


def test_copy_is_independent():
    qr = QRInput(5, ECLevel.Q)
    qr.append(Mode.NUM, b"123")
    dup = qr.copy()
    dup.append(Mode.BYTE, b"z")
    assert len(qr.entries) == 1
    assert len(dup.entries) == 2
    assert (dup.version, dup.level) == (5, ECLevel.Q)


def test_fnc1_second_header():
    qr = QRInput(1)
    qr.append(Mode.BYTE, b"a")
    qr.set_fnc1_second(0x41)
    bits = qr.bit_stream()
    assert bits_str(bits[:12]) == "1001" + "01000001"
    assert len(qr.entries) == 1


def test_fnc1_second_invalid_appid():
    with pytest.raises(ValueError):
        QRInput().set_fnc1_second(256)


def test_fnc1_first_cannot_be_encoded():
    qr = QRInput(1)
    qr.append(Mode.BYTE, b"a")
    qr.set_fnc1_first()
    with pytest.raises(ValueError):
        qr.bit_stream()


def test_estimate_version_matches_encoding():
    qr = QRInput(0, ECLevel.M)
    qr.append(Mode.AN, b"HELLO WORLD" * 10)
    estimated = qr.estimate_version()
    qr.byte_stream()
    assert qr.version >= estimated
    assert estimated >= 1