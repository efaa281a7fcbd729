"""
Process-wide defaults for the framed stream codec.

Settings are read once from the environment at import time. Explicit
arguments passed to the reader and writer always take precedence.
"""

import os

_SUPPORTED_CHECKSUM_POLICIES: list[str] = ["verify", "skip"]

SNAPPYSTREAM_CHECKSUM = os.environ.get("SNAPPYSTREAM_CHECKSUM", "verify").lower()
"""Default checksum handling for readers ('verify' or 'skip'). Defaults to 'verify'."""

if SNAPPYSTREAM_CHECKSUM not in _SUPPORTED_CHECKSUM_POLICIES:
    raise ValueError(
        f"Invalid SNAPPYSTREAM_CHECKSUM environment variable: '{SNAPPYSTREAM_CHECKSUM}'. "
        f"Supported values: {_SUPPORTED_CHECKSUM_POLICIES}"
    )
