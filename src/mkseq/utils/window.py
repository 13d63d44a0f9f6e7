"""
Smoothing window selection over a sequence.
"""

from typing import Tuple


def select_window(length: int, index: int, size: int) -> Tuple[int, int]:
    """
    Compute the index range averaged to smooth the element at index.

    The window is centered on index with size // 2 neighbours on each side.
    Near either end of the sequence it shrinks to the largest window that is
    still symmetric around index; it never wraps around.

    Complexity: O(1)

    Args:
        length: Sequence length
        index: Index of the element being smoothed
        size: Requested window size, clamped into [1, length]

    Returns:
        Tuple of (lo, hi) describing the half-open range [lo, hi)

    Raises:
        IndexError: If the sequence is empty or index is out of range
    """
    if length < 1:
        raise IndexError("Cannot select a window in an empty sequence")
    if not 0 <= index < length:
        raise IndexError(f"Index {index} out of range for sequence of length {length}")

    size = max(1, min(size, length))
    half = size >> 1
    lo = index - half

    # Start edge
    if lo < 0:
        return 0, 2 * index + 1

    # End edge
    if index + half >= length:
        return 2 * index - length + 1, length

    return lo, min(lo + size, length)
