"""
slotbid Auction Module.

- Bid ledger: ranked bids and winners
- Lifecycle: phase state machine and derived access rules
- Allocator: proportional viewing windows for multi-winner auctions
"""

from slotbid.core.auction.errors import (
    BidError,
    LifecycleError,
    QueryError,
    ListingError,
    AllocationInvariantViolation,
)

from slotbid.core.auction.ledger import (
    Bid,
    BidLedger,
    rank_bids,
)

from slotbid.core.auction.lifecycle import (
    AuctionPhase,
    PHASE_GRAPH,
    can_transition,
    check_transition,
    next_phases,
    reachable_phases,
    is_terminal,
    owns,
    can_view,
)

from slotbid.core.auction.allocator import (
    Segment,
    compute_segment_lengths,
    allocate_segments,
    verify_segments,
    random_permutation,
    identity_permutation,
    bid_share,
)

from slotbid.core.auction.snapshot import AuctionSnapshot

__all__ = [
    # Errors
    "BidError",
    "LifecycleError",
    "QueryError",
    "ListingError",
    "AllocationInvariantViolation",
    # Ledger
    "Bid",
    "BidLedger",
    "rank_bids",
    # Lifecycle
    "AuctionPhase",
    "PHASE_GRAPH",
    "can_transition",
    "check_transition",
    "next_phases",
    "reachable_phases",
    "is_terminal",
    "owns",
    "can_view",
    # Allocator
    "Segment",
    "compute_segment_lengths",
    "allocate_segments",
    "verify_segments",
    "random_permutation",
    "identity_permutation",
    "bid_share",
    # Snapshot
    "AuctionSnapshot",
]
