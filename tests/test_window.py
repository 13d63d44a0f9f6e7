"""Tests for smoothing window selection."""

from __future__ import annotations

import pytest

from mkseq.utils.window import select_window


@pytest.mark.parametrize(
    "length, index, size, expected",
    [
        (5, 0, 3, (0, 1)),
        (5, 1, 3, (0, 3)),
        (5, 2, 3, (1, 4)),
        (5, 4, 3, (4, 5)),
        (5, 1, 5, (0, 3)),
        (5, 2, 5, (0, 5)),
        (10, 5, 4, (3, 7)),
        (1, 0, 7, (0, 1)),
        (4, 2, 0, (2, 3)),
    ],
)
def test_known_windows(length, index, size, expected):
    assert select_window(length, index, size) == expected


@pytest.mark.parametrize("length", range(1, 10))
def test_window_properties(length):
    for size in range(0, length + 3):
        clamped = max(1, min(size, length))
        for index in range(length):
            lo, hi = select_window(length, index, size)
            assert 0 <= lo <= index < hi <= length
            assert hi - lo <= clamped
            # Odd windows and windows shrunk at an edge are centered
            if clamped % 2 or hi - lo < clamped:
                assert index - lo == hi - 1 - index


@pytest.mark.parametrize("length, index", [(0, 0), (5, 5), (5, -1)])
def test_invalid_index_raises(length, index):
    with pytest.raises(IndexError):
        select_window(length, index, 3)
