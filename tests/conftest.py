"""Pytest configuration and shared fixtures."""

import os

from hypothesis import settings

# Tests assume the library default; pin it regardless of the caller's shell.
os.environ["SNAPPYSTREAM_CHECKSUM"] = "verify"

# Create a profile named "no_deadline" with deadline disabled.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")
