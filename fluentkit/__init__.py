"""QR Code data encoding: specification tables, input chunks, splitting, structured append and Reed-Solomon ECC."""

__version__ = "0.1.0"

__all__ = [
    "qrinput",
    "qrspec",
    "rsecc",
    "split",
    "structured",
]