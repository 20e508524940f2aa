"""Fetch IPFS content referenced on the clipboard with a global hotkey."""

__version__ = "0.3.0"
