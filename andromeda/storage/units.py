"""Byte size formatting for drive and partition views."""

KI_B = 1024
MI_B = 1024 * KI_B
GI_B = 1024 * MI_B
TI_B = 1024 * GI_B
PI_B = 1024 * TI_B

_UNITS = (
    (PI_B, "PiB"),
    (TI_B, "TiB"),
    (GI_B, "GiB"),
    (MI_B, "MiB"),
    (KI_B, "KiB"),
)


def format_bytes(size_bytes) -> str:
    """Format a byte count with binary units, e.g. ``"465.8 GiB"``."""
    if size_bytes is None:
        return "0 Bytes"
    size_bytes = int(size_bytes)
    for unit_size, unit in _UNITS:
        if size_bytes >= unit_size:
            return f"{size_bytes / unit_size:.1f} {unit}"
    return f"{size_bytes} Bytes"
