# gencert/common/utils.py
import base64
import re
from datetime import timedelta
from typing import List

_DURATION_PART = re.compile(r"(\d+)([hms])")
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def b64e(b: bytes) -> str:
    """Base64 encode bytes -> str."""
    return base64.b64encode(b).decode()


def b64d(s: str) -> bytes:
    """Base64 decode str -> bytes."""
    return base64.b64decode(s)


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration such as "8760h" or "1h30m15s" into a timedelta.
    Only whole hours, minutes and seconds are accepted.
    """
    text = text.strip()
    if not text:
        raise ValueError("empty duration")
    pos = 0
    seconds = 0
    for m in _DURATION_PART.finditer(text):
        if m.start() != pos:
            break
        seconds += int(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()
    if pos != len(text):
        raise ValueError(f"invalid duration {text!r}")
    if seconds <= 0:
        raise ValueError(f"duration must be positive, got {text!r}")
    return timedelta(seconds=seconds)


def format_duration(delta: timedelta) -> str:
    """Render a timedelta the way parse_duration reads it, e.g. 8760h0m0s."""
    total = int(delta.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours}h{minutes}m{seconds}s"


def split_hosts(value: str) -> List[str]:
    """Split a comma-separated host list, dropping blanks."""
    return [h.strip() for h in value.split(",") if h.strip()]


def pem_decode(block: bytes, label: str) -> bytes:
    """Return the DER payload of a single PEM block carrying `label`."""
    lines = block.decode("ascii").strip().splitlines()
    begin, end = f"-----BEGIN {label}-----", f"-----END {label}-----"
    if len(lines) < 2 or lines[0] != begin or lines[-1] != end:
        raise ValueError(f"not a PEM {label} block")
    return b64d("".join(lines[1:-1]))
