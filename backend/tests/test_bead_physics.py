"""
Tests for single-rod bead physics.

Exhaustive over every rod value and magnitude: the legality predicates are
the single source of truth for the rest of the generator.
"""
import pytest

from soroban.services.bead_physics import (
    can_move,
    can_move_down,
    can_move_up,
    legal_deltas,
    lower,
    upper,
)


class TestDecomposition:
    def test_upper_bead(self):
        assert [upper(v) for v in range(10)] == [0, 0, 0, 0, 0, 1, 1, 1, 1, 1]

    def test_lower_beads(self):
        assert [lower(v) for v in range(10)] == [0, 1, 2, 3, 4, 0, 1, 2, 3, 4]

    def test_recomposes(self):
        for v in range(10):
            assert 5 * upper(v) + lower(v) == v


class TestCanMoveUp:
    @pytest.mark.parametrize("v,n", [(0, 1), (0, 5), (0, 9), (3, 1), (4, 5), (5, 4), (2, 6)])
    def test_legal(self, v, n):
        assert can_move_up(v, n)

    @pytest.mark.parametrize("v,n", [
        (4, 1),   # 4 -> 5 removes the lower beads
        (2, 3),   # 2 -> 5
        (9, 1),   # overflow
        (6, 4),   # overflow
        (3, 3),   # 3 -> 6 removes two lower beads
    ])
    def test_illegal(self, v, n):
        assert not can_move_up(v, n)

    def test_out_of_range_arguments(self):
        assert not can_move_up(-1, 1)
        assert not can_move_up(0, 0)
        assert not can_move_up(0, 10)


class TestCanMoveDown:
    @pytest.mark.parametrize("v,n", [(9, 4), (9, 5), (9, 9), (7, 7), (5, 5), (4, 4)])
    def test_legal(self, v, n):
        assert can_move_down(v, n)

    @pytest.mark.parametrize("v,n", [
        (5, 1),   # 5 -> 4 adds lower beads
        (6, 2),   # 6 -> 4
        (0, 1),   # underflow
        (3, 4),
    ])
    def test_illegal(self, v, n):
        assert not can_move_down(v, n)

    def test_mirror_of_up(self):
        for v in range(10):
            for n in range(1, 10):
                if v + n <= 9:
                    assert can_move_up(v, n) == can_move_down(v + n, n), (v, n)


class TestSignedHelpers:
    def test_zero_delta_is_never_a_move(self):
        assert all(not can_move(v, 0) for v in range(10))

    def test_signed_dispatch(self):
        assert can_move(3, 1) == can_move_up(3, 1)
        assert can_move(9, -4) == can_move_down(9, 4)

    def test_everything_is_reachable_from_zero(self):
        assert sorted(legal_deltas(0)) == list(range(1, 10))

    def test_sign_filter(self):
        assert all(d < 0 for d in legal_deltas(9, sign=-1))
        assert legal_deltas(9, sign=1) == []

    def test_without_upper_bead(self):
        assert sorted(legal_deltas(2, include_five=False)) == [-2, -1, 1, 2]
        assert all(0 <= 2 + d <= 4 for d in legal_deltas(2, include_five=False))
