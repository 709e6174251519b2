"""
Segment Allocator - splits a recorded artifact among an auction's winners.

Each winner gets one contiguous window whose length is proportional to
their bid. The windows tile the timeline from 0 in a random bidder order,
so paying the most buys the most time, not the earliest time.

Algorithm:
----------
1. len_i = max(1, floor(total * amount_i / sum(amounts)))
2. If the minimum-1 floor pushed sum(len) past total, rescale every length
   by total / sum(len), flooring again with the same minimum of 1; repeat
   while the re-floored minimums still overflow
3. Shuffle the bidders with a fresh uniform random permutation
4. Lay the windows back-to-back starting at 0

All arithmetic is integer, so lengths are exact functions of the inputs.
Any remainder from flooring is left unassigned at the end of the timeline.
"""

import secrets
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from slotbid.core.auction.errors import AllocationInvariantViolation
from slotbid.core.auction.ledger import Bid
from slotbid.utils.logger import get_logger

logger = get_logger("allocator")

# Returns a new list holding the same items in some order
Permutation = Callable[[List[str]], List[str]]

_system_random = secrets.SystemRandom()


def random_permutation(items: List[str]) -> List[str]:
    """Uniform random permutation drawn from the OS entropy source."""
    return _system_random.sample(items, len(items))


def identity_permutation(items: List[str]) -> List[str]:
    """Keep input order (deterministic placement for tests and previews)."""
    return list(items)


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class Segment:
    """A winner's viewing window [start, end) in seconds."""
    bidder: str
    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    def contains(self, position: float) -> bool:
        return self.start <= position < self.end


# =============================================================================
# Allocation
# =============================================================================


def compute_segment_lengths(
    bids: Sequence[Bid],
    total_duration: int,
) -> List[Tuple[str, int]]:
    """
    Compute each bidder's window length.

    Args:
        bids: Winning bids, one per distinct bidder
        total_duration: Artifact length in seconds

    Returns:
        [(bidder, length)] in input order
    """
    if total_duration < 1:
        raise ValueError(f"total_duration must be >= 1, got {total_duration}")

    if not bids:
        return []

    seen = set()
    for bid in bids:
        if bid.amount < 1:
            raise ValueError(f"Bid amount must be positive, got {bid.amount} from {bid.bidder}")
        if bid.bidder in seen:
            raise ValueError(f"Duplicate bidder {bid.bidder} in winning bids")
        seen.add(bid.bidder)

    total_amount = sum(b.amount for b in bids)
    lengths = [max(1, total_duration * b.amount // total_amount) for b in bids]

    allocated = sum(lengths)
    while allocated > total_duration:
        if allocated == len(lengths):
            raise AllocationInvariantViolation(
                f"{len(bids)} segments of at least 1s cannot fit in {total_duration}s"
            )
        # Every length >= 2 strictly shrinks, so this terminates
        lengths = [max(1, length * total_duration // allocated) for length in lengths]
        logger.debug(f"Scaled {len(lengths)} segments from {allocated}s down to {sum(lengths)}s")
        allocated = sum(lengths)

    return [(b.bidder, length) for b, length in zip(bids, lengths)]


def allocate_segments(
    bids: Sequence[Bid],
    total_duration: int,
    permute: Optional[Permutation] = None,
) -> Dict[str, Segment]:
    """
    Partition [0, total_duration) among the winning bids.

    Args:
        bids: Winning bids (already truncated to max winners)
        total_duration: Artifact length in seconds
        permute: Placement order source; a fresh random permutation by default

    Returns:
        Mapping bidder -> Segment
    """
    lengths = compute_segment_lengths(bids, total_duration)
    if not lengths:
        return {}

    length_of = dict(lengths)
    order = (permute or random_permutation)([bidder for bidder, _ in lengths])
    if sorted(order) != sorted(length_of):
        raise AllocationInvariantViolation("Permutation changed the set of bidders")

    segments: Dict[str, Segment] = {}
    cursor = 0
    for bidder in order:
        start = cursor
        end = min(cursor + length_of[bidder], total_duration)
        segments[bidder] = Segment(bidder=bidder, start=start, end=end)
        cursor = end
        if cursor >= total_duration:
            break

    verify_segments(segments, length_of, total_duration)
    logger.debug(f"Allocated {len(segments)} segments covering {cursor}/{total_duration}s")
    return segments


def verify_segments(
    segments: Dict[str, Segment],
    expected_lengths: Dict[str, int],
    total_duration: int,
) -> None:
    """
    Check that segments tile [0, cursor) with the expected lengths.

    Raises:
        AllocationInvariantViolation: on any gap, overlap, empty or missing window
    """
    missing = set(expected_lengths) - set(segments)
    if missing:
        raise AllocationInvariantViolation(f"No segment for bidders {sorted(missing)}")

    cursor = 0
    for seg in sorted(segments.values(), key=lambda s: s.start):
        if seg.start != cursor:
            raise AllocationInvariantViolation(f"Segment of {seg.bidder} starts at {seg.start}, expected {cursor}")
        if seg.duration < 1:
            raise AllocationInvariantViolation(f"Empty segment for {seg.bidder}")
        if seg.duration != expected_lengths[seg.bidder]:
            raise AllocationInvariantViolation(
                f"Segment of {seg.bidder} is {seg.duration}s, expected {expected_lengths[seg.bidder]}s"
            )
        cursor = seg.end

    if cursor > total_duration:
        raise AllocationInvariantViolation(f"Segments end at {cursor}s past {total_duration}s")


def bid_share(bid: Bid, winning_bids: Sequence[Bid]) -> float:
    """Percentage of the winning pool contributed by bid."""
    pool = sum(b.amount for b in winning_bids)
    if pool == 0:
        return 0.0
    return 100.0 * bid.amount / pool
