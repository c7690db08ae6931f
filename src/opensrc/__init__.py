"""Fetch the source code of packages and repositories into ./opensrc."""

__version__ = "0.1.0"
