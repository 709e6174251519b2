"""
Bid Ledger - the ranked bid book of a single auction.

A ledger is immutable: placing a bid returns a new ledger, so a reader holding
the previous one keeps a consistent view while a writer builds the next.

Ranking rules:
- Highest amount first
- Equal amounts keep submission order (a bidder's first bid fixes its slot)
- A bidder has at most one active bid; raising replaces the old amount
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from slotbid.core.auction.errors import BidError
from slotbid.utils.logger import get_logger

logger = get_logger("ledger")


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class Bid:
    """A bidder's active bid."""
    bidder: str
    amount: int
    seq: int = 0  # Submission order of the bidder's first bid


def rank_bids(bids: Sequence[Bid]) -> List[Bid]:
    """
    Sort bids highest first.

    Ties are broken by submission order; sorted() is stable, so bids with an
    equal seq keep their input order as well.
    """
    return sorted(bids, key=lambda b: (-b.amount, b.seq))


# =============================================================================
# Bid Ledger
# =============================================================================


@dataclass(frozen=True)
class BidLedger:
    """
    Ordered bid set for one auction.

    `bids` is always kept ranked, so winners are a prefix of it.
    """
    starting_price: int
    max_winners: int
    bids: Tuple[Bid, ...] = field(default_factory=tuple)
    next_seq: int = 0

    def __post_init__(self):
        if self.max_winners < 1:
            raise ValueError(f"max_winners must be >= 1, got {self.max_winners}")
        if self.starting_price < 0:
            raise ValueError(f"starting_price must be >= 0, got {self.starting_price}")

    @property
    def current_price(self) -> int:
        """Leading amount, or the starting price before any bid."""
        if not self.bids:
            return self.starting_price
        return self.bids[0].amount

    @property
    def highest_bidder(self) -> Optional[str]:
        return self.bids[0].bidder if self.bids else None

    @property
    def ranked(self) -> Tuple[Bid, ...]:
        return self.bids

    @property
    def winning_bids(self) -> Tuple[Bid, ...]:
        return self.bids[: self.max_winners]

    @property
    def winners(self) -> Tuple[str, ...]:
        return tuple(b.bidder for b in self.winning_bids)

    def has_bid(self, bidder: str) -> bool:
        return any(b.bidder == bidder for b in self.bids)

    def amount_of(self, bidder: str) -> Optional[int]:
        for bid in self.bids:
            if bid.bidder == bidder:
                return bid.amount
        return None

    def minimum_next_bid(self, min_increment: int = 1) -> int:
        return self.current_price + min_increment

    def place(
        self,
        bidder: str,
        amount: int,
        min_increment: int = 1,
    ) -> Tuple[Optional["BidLedger"], Optional[BidError]]:
        """
        Place or raise a bid.

        Args:
            bidder: Bidder identity
            amount: Offered amount
            min_increment: Required step above the current price

        Returns:
            (new_ledger, None) on acceptance, (None, error) on rejection
        """
        floor = self.minimum_next_bid(min_increment)
        if amount < floor:
            logger.debug(f"Bid rejected: {bidder} offered {amount}, floor is {floor}")
            return None, BidError.BELOW_FLOOR

        updated = []
        seq = self.next_seq
        found = False
        for bid in self.bids:
            if bid.bidder == bidder:
                # Raise keeps the bidder's original slot for tie-breaking
                updated.append(replace(bid, amount=amount))
                found = True
            else:
                updated.append(bid)
        if not found:
            updated.append(Bid(bidder=bidder, amount=amount, seq=seq))
            seq += 1

        return replace(self, bids=tuple(rank_bids(updated)), next_seq=seq), None
