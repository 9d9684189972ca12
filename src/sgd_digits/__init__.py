"""Pixel-similarity baseline, naive matmul and a generic SGD trainer."""

__version__ = "0.0.1"
