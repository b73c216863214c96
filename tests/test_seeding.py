"""
Unit tests for random seeding.
"""
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracket.seeding import make_rng, shuffle
from bracket_helpers import make_participants


class TestShuffle:
    """Tests for the participant shuffle."""

    def test_shuffle_is_permutation(self):
        """Test no participant is dropped or duplicated."""
        players = make_participants(13)
        shuffled = shuffle(players, make_rng(1))
        assert len(shuffled) == len(players)
        assert sorted(p.id for p in shuffled) == sorted(p.id for p in players)

    def test_shuffle_does_not_mutate_input(self):
        """Test the input list keeps its order."""
        players = make_participants(10)
        original = list(players)
        shuffle(players, make_rng(1))
        assert players == original

    def test_shuffle_reproducible(self):
        """Test the same seed gives the same order."""
        players = make_participants(10)
        assert shuffle(players, make_rng(123)) == shuffle(players, make_rng(123))

    def test_shuffle_uses_given_rng(self):
        """Test the order comes from the rng that was passed in."""
        players = make_participants(10)
        expected = list(players)
        random.Random(5).shuffle(expected)
        assert shuffle(players, random.Random(5)) == expected

    def test_shuffle_without_rng(self):
        """Test a default random source is used when none is given."""
        players = make_participants(4)
        assert sorted(p.id for p in shuffle(players)) == sorted(p.id for p in players)

    def test_shuffle_empty(self):
        """Test shuffling nothing gives nothing."""
        assert shuffle([], make_rng(1)) == []
