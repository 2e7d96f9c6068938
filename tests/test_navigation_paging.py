"""Tests for paging arithmetic."""

import pytest

from quire.navigation import (
    LEFT_TO_RIGHT,
    NO_CANVAS,
    RIGHT_TO_LEFT,
    get_first_page_index,
    get_last_page_index,
    get_next_page_index,
    get_paged_indices,
    get_prev_page_index,
    is_paged,
)


class TestPagedIndices:
    """Tests for get_paged_indices()."""

    @pytest.mark.parametrize(
        "index, expected",
        [(0, [0]), (1, [1, 2]), (2, [1, 2]), (3, [3, 4]), (4, [4])],
    )
    def test_left_to_right(self, index, expected):
        """Test left to right."""
        assert get_paged_indices(index, 5, LEFT_TO_RIGHT) == expected

    @pytest.mark.parametrize(
        "index, expected",
        [(0, [0]), (1, [2, 1]), (2, [2, 1]), (3, [4, 3]), (4, [4])],
    )
    def test_right_to_left(self, index, expected):
        """Test right to left."""
        assert get_paged_indices(index, 5, RIGHT_TO_LEFT) == expected

    def test_spread_always_contains_index(self):
        """Test that every spread of a six-canvas book holds its own index."""
        for direction in (LEFT_TO_RIGHT, RIGHT_TO_LEFT):
            for index in range(6):
                indices = get_paged_indices(index, 6, direction)
                assert index in indices
                assert 1 <= len(indices) <= 2

    def test_out_of_range_is_empty(self):
        """Test out of range is empty."""
        assert get_paged_indices(5, 5) == []
        assert get_paged_indices(-1, 5) == []
        assert get_paged_indices(0, 0) == []

    def test_single_canvas(self):
        """Test single canvas."""
        assert get_paged_indices(0, 1) == [0]


class TestPrevNext:
    """Tests for prev/next page arithmetic."""

    def test_unpaged_steps_by_one(self):
        """Test unpaged steps by one."""
        assert get_prev_page_index(3, 5) == 2
        assert get_next_page_index(3, 5) == 4

    def test_paged_left_to_right(self):
        """Test paged left to right."""
        assert get_next_page_index(0, 5, LEFT_TO_RIGHT, paged=True) == 1
        assert get_next_page_index(1, 5, LEFT_TO_RIGHT, paged=True) == 3
        assert get_next_page_index(2, 5, LEFT_TO_RIGHT, paged=True) == 3
        assert get_prev_page_index(2, 5, LEFT_TO_RIGHT, paged=True) == 0
        assert get_prev_page_index(4, 5, LEFT_TO_RIGHT, paged=True) == 3

    def test_paged_right_to_left(self):
        """Test that a reversed spread still advances through the book."""
        assert get_next_page_index(1, 5, RIGHT_TO_LEFT, paged=True) == 3
        assert get_prev_page_index(2, 5, RIGHT_TO_LEFT, paged=True) == 0

    def test_next_past_end(self):
        """Test next past end."""
        assert get_next_page_index(4, 5) == NO_CANVAS
        assert get_next_page_index(3, 5, LEFT_TO_RIGHT, paged=True) == NO_CANVAS

    def test_prev_below_zero_is_not_special_cased(self):
        """Test prev below zero is not special cased."""
        assert get_prev_page_index(0, 5) == -1

    def test_out_of_range_index_falls_back_to_unpaged(self):
        """Test out of range index falls back to unpaged."""
        assert get_next_page_index(7, 5, LEFT_TO_RIGHT, paged=True) == NO_CANVAS
        assert get_prev_page_index(7, 5, LEFT_TO_RIGHT, paged=True) == 6

    def test_first_and_last(self):
        """Test first and last."""
        assert get_first_page_index(5) == 0
        assert get_last_page_index(5) == 4


class TestIsPaged:
    """Tests for is_paged()."""

    def test_requires_hint_and_setting(self):
        """Test requires hint and setting."""
        assert is_paged("paged", True)
        assert not is_paged("paged", False)
        assert not is_paged("individuals", True)
        assert not is_paged(None, True)
