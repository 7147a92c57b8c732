"""CA serial number file, kept in the same hex format openssl uses for ca.srl."""

from pathlib import Path

from .cert_utils import generate_serial_number


def read_serial(path: Path) -> int:
    """Read the last issued serial from a serial file."""
    text = path.read_text().strip()
    if not text:
        raise ValueError(f"serial file is empty: {path}")
    return int(text, 16)


def format_serial(serial: int) -> str:
    serial_hex = f"{serial:X}"
    if len(serial_hex) % 2 != 0:
        serial_hex = "0" + serial_hex
    return serial_hex + "\n"


def next_serial(path: Path) -> int:
    """Allocate the next serial number and persist it.

    The first call creates the file with a random 128-bit serial; later calls
    increment the stored value by one. The file is written before the serial
    is returned so a failed signature never reuses a number.
    """
    if path.exists():
        serial = read_serial(path) + 1
    else:
        serial = generate_serial_number()
    path.write_text(format_serial(serial))
    return serial
