"""
Auction Snapshot - immutable view of one auction.

The engine replaces an auction's snapshot on every accepted mutation and
never edits one in place, so readers can hold a snapshot without locking.
Ownership and listing flags are derived here from the canonical state.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from slotbid.core.auction.allocator import Segment
from slotbid.core.auction.ledger import Bid, BidLedger
from slotbid.core.auction.lifecycle import AuctionPhase, owns, can_view

_EMPTY_SEGMENTS: Mapping[str, Segment] = MappingProxyType({})


def freeze_segments(segments: Optional[Mapping[str, Segment]]) -> Mapping[str, Segment]:
    if not segments:
        return _EMPTY_SEGMENTS
    return MappingProxyType(dict(segments))


@dataclass(frozen=True)
class AuctionSnapshot:
    """Read-only projection of an auction."""
    auction_id: str
    creator: str
    title: str
    ledger: BidLedger
    phase: AuctionPhase = AuctionPhase.OPEN
    description: str = ""
    total_duration: Optional[int] = None  # Known once the artifact is attached
    segments: Mapping[str, Segment] = field(default_factory=lambda: _EMPTY_SEGMENTS, compare=False)

    # Schedule (unix seconds)
    created_at: float = 0.0
    ends_at: Optional[float] = None
    work_starts_at: Optional[float] = None
    work_ends_at: Optional[float] = None

    # Lifecycle timestamps
    ended_at: Optional[float] = None
    started_at: Optional[float] = None
    completed_at: Optional[float] = None
    unlocked_at: Optional[float] = None

    version: int = 0  # Bumped on every accepted mutation

    # =========================================================================
    # Ledger projections
    # =========================================================================

    @property
    def max_winners(self) -> int:
        return self.ledger.max_winners

    @property
    def starting_price(self) -> int:
        return self.ledger.starting_price

    @property
    def current_price(self) -> int:
        return self.ledger.current_price

    @property
    def highest_bidder(self) -> Optional[str]:
        return self.ledger.highest_bidder

    @property
    def ranked_bids(self) -> Tuple[Bid, ...]:
        return self.ledger.ranked

    @property
    def winners(self) -> Tuple[str, ...]:
        return self.ledger.winners

    @property
    def is_multi_winner(self) -> bool:
        return self.max_winners > 1

    @property
    def segments_final(self) -> bool:
        """Segments hold the completion allocation rather than a bidding preview."""
        return self.phase >= AuctionPhase.COMPLETED

    # =========================================================================
    # Derived flags
    # =========================================================================

    def owns(self, identity: str) -> bool:
        return owns(identity, self.winners, self.phase)

    def can_view(self, identity: str) -> bool:
        return can_view(identity, self.winners, self.phase)

    def is_listing_of(self, identity: str) -> bool:
        return self.creator == identity

    def segment_for(self, bidder: str) -> Optional[Segment]:
        return self.segments.get(bidder)

    def to_dict(self) -> dict:
        """Plain-data form for collaborators that serialize snapshots."""
        return {
            "auction_id": self.auction_id,
            "creator": self.creator,
            "title": self.title,
            "phase": self.phase.name,
            "max_winners": self.max_winners,
            "current_price": self.current_price,
            "highest_bidder": self.highest_bidder,
            "ranked_bids": [{"bidder": b.bidder, "amount": b.amount} for b in self.ranked_bids],
            "winners": list(self.winners),
            "total_duration": self.total_duration,
            "segments": {
                bidder: {"start": s.start, "end": s.end, "duration": s.duration}
                for bidder, s in sorted(self.segments.items(), key=lambda kv: kv[1].start)
            },
            "segments_final": self.segments_final,
            "version": self.version,
        }
