# fluentkit

A small, dependency-free library for the data side of QR Code encoding:

- `fluentkit.qrspec` – the specification tables: symbol widths, data and
  ECC capacities, length indicators, Reed-Solomon block layout
  (`EccSpec`), version and format information patterns, and the initial
  symbol frame with finder, separator, timing, alignment and version
  patterns (`new_frame`).
- `fluentkit.qrinput` – `QRInput`, an ordered list of data chunks
  (`Entry`) in numeric, alphanumeric, 8-bit, Kanji, ECI, FNC1 and
  structured-append modes, encoded to a padded bit stream or to data
  codewords.
- `fluentkit.split` – `split_string`, which cuts a string into chunks of
  the cheapest modes and appends them to a `QRInput`.
- `fluentkit.structured` – `split_input` and `StructuredInput`, which
  spread one input over a structured-append set of up to 16 symbols.
- `fluentkit.rsecc` – `rs_encode`, Reed-Solomon error correction codewords
  over GF(256).

## Installation

```
pip install fluentkit
```

Python 3.10 or later is required. There are no runtime dependencies.

## Usage

```python
from fluentkit.qrspec import ECLevel, Mode, data_length, ecc_spec, width, new_frame
from fluentkit.qrinput import QRInput
from fluentkit.split import split_string
from fluentkit.rsecc import rs_encode

width(1)                      # 21 modules per side
data_length(1, ECLevel.L)     # 19 data codewords
ecc_spec(5, ECLevel.Q)        # EccSpec(blocks1=2, data_codes1=15, ...)

# Build input by hand; version 0 picks the smallest version that fits.
qr = QRInput(0, ECLevel.M)
qr.append(Mode.NUM, b"01234567")
codewords = qr.byte_stream()  # padded data codewords
qr.version                    # the version that was chosen

# Or let the splitter choose the segments (case-insensitive here).
qr = QRInput(0, ECLevel.L)
split_string(b"HELLO world 12345", qr, Mode.BYTE, False)
[(e.mode, e.data) for e in qr.entries]

# Error correction codewords for one block (2..30 codewords).
ecc = rs_encode(codewords, 10)

# Function patterns of an empty version 7 symbol, one bytearray per row.
frame = new_frame(7)
```

`QRInput` also offers `append_eci_header`, `set_fnc1_first`,
`set_fnc1_second`, `insert_structured_append_header`, `parity`, `copy`,
`estimate_bit_stream_size`, `estimate_version` and `bit_stream`.
`split_string` takes `Mode.KANJI` as its hint when the data holds
Shift-JIS Kanji.

Invalid arguments (bad versions or levels, data that is not valid for its
mode, data too large for the largest symbol) raise `ValueError`.

### Structured append

Data too large for one symbol of a fixed version can be spread over up to
16 symbols, each carrying a structured-append header and the parity of
the whole message:

```python
from fluentkit.qrinput import QRInput
from fluentkit.qrspec import ECLevel, Mode
from fluentkit.structured import split_input

qr = QRInput(1, ECLevel.H)
qr.append(Mode.BYTE, b"a payload needing several symbols")
parts = split_input(qr)
len(parts)                    # number of symbols
for part in parts:
    print(part.byte_stream())
```

## What it does not do

The package stops at data codewords, ECC codewords and the empty frame.
It does not interleave blocks, place data modules into the frame, apply
or choose masks, or render an image, and it has no command-line tool.
Micro QR symbols are not supported.

## Running the tests

```
pip install "fluentkit[test]"
pytest
```