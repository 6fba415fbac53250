"""Fold selected working tree changes into an earlier git commit."""

__version__ = "0.1.0"
