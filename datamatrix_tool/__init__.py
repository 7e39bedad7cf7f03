"""Encode text into DataMatrix images and decode them back."""

__version__ = "1.0.0"
