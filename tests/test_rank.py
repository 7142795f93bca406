"""Tests for the rank adapter."""

import numpy as np
import pytest

from localnorm.errors import UnsupportedRankError
from localnorm.rank import check_rank, demote, promote


class TestPromote:
    """promote() views rank 3 as a single batch."""

    def test_rank3_gets_unit_batch(self):
        """(h, w, c) becomes (1, h, w, c)."""
        x = np.arange(24, dtype=np.float32).reshape(2, 3, 4)
        x4d, rank = promote(x)

        assert rank == 3
        assert x4d.shape == (1, 2, 3, 4)

    def test_rank3_is_a_view(self):
        """Promotion does not copy data."""
        x = np.zeros((2, 3, 4))
        x4d, _ = promote(x)

        assert np.shares_memory(x, x4d)

    def test_rank4_passthrough(self):
        """Rank-4 arrays are returned as-is."""
        x = np.zeros((2, 3, 4, 5))
        x4d, rank = promote(x)

        assert rank == 4
        assert x4d is x

    @pytest.mark.parametrize("shape", [(3,), (3, 4), (1, 2, 3, 4, 5)])
    def test_unsupported(self, shape):
        """Ranks other than 3 and 4 raise."""
        with pytest.raises(UnsupportedRankError) as excinfo:
            promote(np.zeros(shape))
        assert excinfo.value.rank == len(shape)


class TestDemote:
    """demote() undoes promote()."""

    def test_round_trip_rank3(self):
        """Demoting a promoted rank-3 array restores the shape."""
        x = np.random.default_rng(0).normal(size=(2, 3, 4))
        x4d, rank = promote(x)
        back = demote(x4d, rank)

        assert back.shape == x.shape
        np.testing.assert_array_equal(back, x)

    def test_rank4_unchanged(self):
        """Rank-4 results are not reshaped."""
        y = np.zeros((2, 3, 4, 5))
        assert demote(y, 4) is y

    def test_demote_rejects_wide_batch(self):
        """A batch larger than one cannot become rank 3."""
        with pytest.raises(ValueError):
            demote(np.zeros((2, 3, 4, 5)), 3)


def test_check_rank_custom_expected():
    """check_rank honours a restricted set of ranks."""
    with pytest.raises(UnsupportedRankError) as excinfo:
        check_rank(np.zeros((1, 2, 3, 4)), expected=(3,))
    assert excinfo.value.expected == (3,)
