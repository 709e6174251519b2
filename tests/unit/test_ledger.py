"""
Unit tests for the bid ledger.

Tests cover:
1. Ranking and tie-breaking
2. Raise-replaces semantics
3. Bid floor enforcement
4. Winner truncation
"""

import pytest

from slotbid.core.auction import Bid, BidLedger, BidError, rank_bids


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def ledger():
    return BidLedger(starting_price=0, max_winners=1)


def place_all(ledger, bids, min_increment=1):
    for bidder, amount in bids:
        ledger, err = ledger.place(bidder, amount, min_increment)
        assert err is None, f"{bidder}:{amount} rejected with {err}"
    return ledger


# =============================================================================
# Ranking Tests
# =============================================================================


class TestRanking:
    """Tests for bid ordering."""

    def test_raise_replaces_previous_bid(self, ledger):
        """A(100), B(150), A(200) ranks A:200 then B:150."""
        ledger = place_all(ledger, [("A", 100), ("B", 150), ("A", 200)])

        assert [(b.bidder, b.amount) for b in ledger.ranked] == [("A", 200), ("B", 150)]

    def test_raise_keeps_original_slot(self, ledger):
        """Raising does not change the bidder's tie-break position."""
        ledger = place_all(ledger, [("A", 100), ("B", 150), ("A", 200)])

        seqs = {b.bidder: b.seq for b in ledger.ranked}
        assert seqs == {"A": 0, "B": 1}
        assert ledger.next_seq == 2

    def test_ties_broken_by_submission_order(self):
        """Earlier bidder outranks a later one at the same amount."""
        bids = [
            Bid("late", 100, seq=3),
            Bid("top", 500, seq=2),
            Bid("early", 100, seq=1),
        ]

        ranked = rank_bids(bids)

        assert [b.bidder for b in ranked] == ["top", "early", "late"]

    def test_rank_bids_does_not_mutate_input(self):
        bids = [Bid("a", 1, 0), Bid("b", 2, 1)]
        rank_bids(bids)
        assert [b.bidder for b in bids] == ["a", "b"]


# =============================================================================
# Floor Tests
# =============================================================================


class TestBidFloor:
    """Tests for minimum bid enforcement."""

    def test_equal_to_current_price_rejected(self):
        """Bid equal to the current price is below the floor."""
        ledger = BidLedger(starting_price=2500, max_winners=1)

        new_ledger, err = ledger.place("A", 2500)

        assert new_ledger is None
        assert err == BidError.BELOW_FLOOR

    def test_one_above_current_price_accepted(self):
        ledger = BidLedger(starting_price=2500, max_winners=1)

        new_ledger, err = ledger.place("A", 2501)

        assert err is None
        assert new_ledger.current_price == 2501

    def test_floor_follows_leading_bid(self, ledger):
        ledger = place_all(ledger, [("A", 300)])

        _, err = ledger.place("B", 250)

        assert err == BidError.BELOW_FLOOR

    def test_leader_must_also_beat_own_price(self, ledger):
        ledger = place_all(ledger, [("A", 300)])

        _, err = ledger.place("A", 300)

        assert err == BidError.BELOW_FLOOR

    def test_custom_increment(self):
        ledger = BidLedger(starting_price=2500, max_winners=1)

        _, err = ledger.place("A", 2599, min_increment=100)
        assert err == BidError.BELOW_FLOOR

        new_ledger, err = ledger.place("A", 2600, min_increment=100)
        assert err is None
        assert new_ledger.minimum_next_bid(100) == 2700

    def test_rejection_leaves_ledger_unchanged(self, ledger):
        ledger = place_all(ledger, [("A", 300)])

        ledger.place("B", 100)

        assert [(b.bidder, b.amount) for b in ledger.ranked] == [("A", 300)]


# =============================================================================
# Winner Tests
# =============================================================================


class TestWinners:
    """Tests for winner selection."""

    def test_no_bids(self, ledger):
        assert ledger.winners == ()
        assert ledger.highest_bidder is None
        assert ledger.current_price == 0

    def test_winner_truncation(self):
        """maxWinners=2 with three bidders keeps the top two."""
        ledger = BidLedger(starting_price=0, max_winners=2)
        ledger = place_all(ledger, [("C", 200), ("B", 250), ("A", 300)])

        assert ledger.winners == ("A", "B")
        assert [b.bidder for b in ledger.winning_bids] == ["A", "B"]

    def test_fewer_bidders_than_slots(self):
        ledger = BidLedger(starting_price=0, max_winners=5)
        ledger = place_all(ledger, [("A", 10), ("B", 20)])

        assert ledger.winners == ("B", "A")

    def test_place_returns_new_ledger(self, ledger):
        """Ledgers are immutable; place() builds a new one."""
        new_ledger = place_all(ledger, [("A", 10)])

        assert ledger.bids == ()
        assert new_ledger.has_bid("A")
        assert new_ledger.amount_of("A") == 10
        assert new_ledger.amount_of("B") is None

    def test_invalid_max_winners(self):
        with pytest.raises(ValueError):
            BidLedger(starting_price=0, max_winners=0)

    def test_negative_starting_price(self):
        with pytest.raises(ValueError):
            BidLedger(starting_price=-1, max_winners=1)
