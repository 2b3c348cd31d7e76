"""Line-ending helpers shared by the reference block code."""

from .text import detect_eol, iter_lines, normalize_eol

__all__ = [
    "detect_eol",
    "iter_lines",
    "normalize_eol",
]
