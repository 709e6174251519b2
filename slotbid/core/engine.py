"""
Auction Engine - the store and public surface of slotbid.

Owns every auction (auction id -> snapshot) and is the only way to change
one. Collaborators (API layer, scheduler, UI) call the operations below with
already-authenticated identities and receive (result, error) pairs.

Concurrency:
-----------
- Writes to one auction are serialized by that auction's lock, so
  "re-rank, recompute winners, re-allocate" is atomic per bid.
- Reads return the current immutable snapshot without locking.
- Different auctions share nothing but the store index, which is locked
  only while inserting.
"""

import threading
import time
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

from slotbid.core.auction.allocator import Permutation, Segment, allocate_segments
from slotbid.core.auction.errors import BidError, LifecycleError, ListingError, QueryError
from slotbid.core.auction.ledger import Bid, BidLedger
from slotbid.core.auction.lifecycle import (
    AuctionPhase,
    CREATOR_ONLY_TARGETS,
    check_transition,
)
from slotbid.core.auction.snapshot import AuctionSnapshot, freeze_segments
from slotbid.core.config import EngineConfig
from slotbid.utils.logger import get_logger
from slotbid.utils.validation import validate_bid_data, validate_identity, validate_listing_data

logger = get_logger("engine")

SnapshotResult = Tuple[Optional[AuctionSnapshot], Optional[LifecycleError]]


@dataclass
class _AuctionEntry:
    """Mutable slot holding an auction's latest snapshot."""
    snapshot: AuctionSnapshot
    lock: threading.Lock


class AuctionEngine:
    """
    Bid ledger, lifecycle and segment allocation for many auctions.

    Args:
        config: Engine policy; defaults to EngineConfig()
        permute: Placement order source for segment allocation
        clock: Returns the current unix time
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        permute: Optional[Permutation] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.config = config or EngineConfig()
        self._permute = permute
        self._clock = clock or time.time

        self._auctions: Dict[str, _AuctionEntry] = {}
        self._store_lock = threading.Lock()

    # =========================================================================
    # Listing
    # =========================================================================

    def create_auction(
        self,
        creator: str,
        title: str,
        starting_price: int,
        max_winners: int = 1,
        description: str = "",
        total_duration: Optional[int] = None,
        ends_at: Optional[float] = None,
        work_starts_at: Optional[float] = None,
        work_ends_at: Optional[float] = None,
        auction_id: Optional[str] = None,
    ) -> Tuple[Optional[AuctionSnapshot], Optional[ListingError]]:
        """
        List a new work session, open for bidding.

        Returns:
            (snapshot, None) or (None, ListingError)
        """
        valid, err = validate_listing_data({
            "creator": creator,
            "title": title,
            "description": description,
            "starting_price": starting_price,
            "max_winners": max_winners,
            "total_duration": total_duration,
            "ends_at": ends_at,
            "work_starts_at": work_starts_at,
            "work_ends_at": work_ends_at,
        })
        if valid and auction_id is not None:
            valid, err = validate_identity(auction_id, "auction_id")
        if valid and max_winners > self.config.max_winners_limit:
            valid, err = False, f"max_winners exceeds limit {self.config.max_winners_limit}"
        if valid and max_winners > (total_duration or self.config.default_total_duration):
            valid, err = False, "max_winners exceeds the number of seconds to share"
        if not valid:
            logger.warning(f"Listing rejected: {err}")
            return None, ListingError.INVALID_LISTING

        auction_id = auction_id or uuid.uuid4().hex
        snapshot = AuctionSnapshot(
            auction_id=auction_id,
            creator=creator,
            title=title,
            description=description,
            ledger=BidLedger(starting_price=starting_price, max_winners=max_winners),
            total_duration=total_duration,
            created_at=self._clock(),
            ends_at=ends_at,
            work_starts_at=work_starts_at,
            work_ends_at=work_ends_at,
        )

        with self._store_lock:
            if auction_id in self._auctions:
                return None, ListingError.DUPLICATE_AUCTION
            self._auctions[auction_id] = _AuctionEntry(snapshot=snapshot, lock=threading.Lock())

        logger.info(f"Auction listed: {auction_id[:8]} by {creator}, "
                    f"start={starting_price}, max_winners={max_winners}")
        return snapshot, None

    def get_auction(self, auction_id: str) -> Optional[AuctionSnapshot]:
        entry = self._auctions.get(auction_id)
        return entry.snapshot if entry else None

    def auctions(self) -> List[AuctionSnapshot]:
        return [entry.snapshot for entry in list(self._auctions.values())]

    # =========================================================================
    # Bidding
    # =========================================================================

    def place_bid(
        self,
        auction_id: str,
        bidder: str,
        amount: int,
    ) -> Tuple[Optional[AuctionSnapshot], Optional[BidError]]:
        """
        Place or raise a bid.

        On acceptance the ranking, winners and (for multi-winner auctions)
        the segment preview are recomputed together.

        Returns:
            (snapshot, None) or (None, BidError)
        """
        entry = self._auctions.get(auction_id)
        if not entry:
            return None, BidError.UNKNOWN_AUCTION

        valid, err = validate_bid_data(bidder, amount)
        if not valid:
            logger.debug(f"Bid rejected on {auction_id[:8]}: {err}")
            return None, BidError.INVALID_BID

        with entry.lock:
            current = entry.snapshot
            if current.phase != AuctionPhase.OPEN:
                logger.debug(f"Bid rejected on {auction_id[:8]}: phase {current.phase.name}")
                return None, BidError.AUCTION_NOT_OPEN

            ledger, bid_err = current.ledger.place(bidder, amount, self.config.min_bid_increment)
            if bid_err is not None:
                return None, bid_err

            segments = current.segments
            if ledger.max_winners > 1:
                segments = freeze_segments(allocate_segments(
                    ledger.winning_bids,
                    current.total_duration or self.config.default_total_duration,
                    self._permute,
                ))

            updated = replace(
                current,
                ledger=ledger,
                segments=segments,
                version=current.version + 1,
            )
            entry.snapshot = updated

        logger.info(f"Bid accepted on {auction_id[:8]}: {bidder}={amount}, "
                    f"winners={list(ledger.winners)}")
        return updated, None

    def ranked_bids(self, auction_id: str) -> Tuple[Tuple[Bid, ...], Optional[QueryError]]:
        entry = self._auctions.get(auction_id)
        if not entry:
            return (), QueryError.UNKNOWN_AUCTION
        return entry.snapshot.ranked_bids, None

    def winners(self, auction_id: str) -> Tuple[Tuple[str, ...], Optional[QueryError]]:
        entry = self._auctions.get(auction_id)
        if not entry:
            return (), QueryError.UNKNOWN_AUCTION
        return entry.snapshot.winners, None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _transition(
        self,
        auction_id: str,
        target: AuctionPhase,
        actor: Optional[str],
        apply: Callable[[AuctionSnapshot, float], SnapshotResult],
    ) -> SnapshotResult:
        """Check and apply one phase step under the auction's lock."""
        entry = self._auctions.get(auction_id)
        if not entry:
            return None, LifecycleError.UNKNOWN_AUCTION

        with entry.lock:
            current = entry.snapshot

            err = check_transition(current.phase, target)
            if err is not None:
                logger.warning(f"Refused {current.phase.name} -> {target.name} on {auction_id[:8]}")
                return None, err

            if target in CREATOR_ONLY_TARGETS and actor != current.creator:
                logger.warning(f"{actor} is not the creator of {auction_id[:8]}")
                return None, LifecycleError.NOT_CREATOR

            updated, err = apply(current, self._clock())
            if err is not None:
                return None, err

            updated = replace(updated, phase=target, version=current.version + 1)
            entry.snapshot = updated

        logger.info(f"Auction {auction_id[:8]}: {current.phase.name} -> {target.name}")
        return updated, None

    def end_auction(self, auction_id: str) -> SnapshotResult:
        """Close bidding; winners are frozen from here on."""
        def apply(current: AuctionSnapshot, now: float) -> SnapshotResult:
            return replace(current, ended_at=now), None

        return self._transition(auction_id, AuctionPhase.ENDED, None, apply)

    def end_expired_auctions(self, now: Optional[float] = None) -> List[AuctionSnapshot]:
        """
        End every open auction whose scheduled end has passed.

        Returns:
            Snapshots of the auctions that were ended
        """
        now = self._clock() if now is None else now
        ended = []
        for snapshot in self.auctions():
            if snapshot.phase != AuctionPhase.OPEN or snapshot.ends_at is None:
                continue
            if snapshot.ends_at > now:
                continue
            result, err = self.end_auction(snapshot.auction_id)
            # A concurrent end_auction may have won the race
            if err is None:
                ended.append(result)
        return ended

    def start_work(self, auction_id: str, actor: str) -> SnapshotResult:
        """Creator starts recording the session."""
        def apply(current: AuctionSnapshot, now: float) -> SnapshotResult:
            if not current.winners:
                return None, LifecycleError.NO_WINNERS
            return replace(current, started_at=now), None

        return self._transition(auction_id, AuctionPhase.IN_PROGRESS, actor, apply)

    def complete_work(
        self,
        auction_id: str,
        actor: str,
        artifact_duration: Optional[int],
    ) -> SnapshotResult:
        """
        Creator attaches the finished artifact.

        For multi-winner auctions this runs the canonical allocation against
        the final winners; the result is what winners will watch.
        """
        def apply(current: AuctionSnapshot, now: float) -> SnapshotResult:
            if (
                artifact_duration is None
                or isinstance(artifact_duration, bool)
                or not isinstance(artifact_duration, int)
                or artifact_duration < 1
            ):
                return None, LifecycleError.MISSING_ARTIFACT

            segments = freeze_segments(None)
            if current.is_multi_winner:
                if artifact_duration < len(current.winners):
                    return None, LifecycleError.ARTIFACT_TOO_SHORT
                segments = freeze_segments(allocate_segments(
                    current.ledger.winning_bids, artifact_duration, self._permute,
                ))

            return replace(
                current,
                total_duration=artifact_duration,
                segments=segments,
                completed_at=now,
            ), None

        return self._transition(auction_id, AuctionPhase.COMPLETED, actor, apply)

    def unlock_artifact(self, auction_id: str, actor: str) -> SnapshotResult:
        """Creator makes the artifact visible to winners."""
        def apply(current: AuctionSnapshot, now: float) -> SnapshotResult:
            return replace(current, unlocked_at=now), None

        return self._transition(auction_id, AuctionPhase.UNLOCKED, actor, apply)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_segment(
        self,
        auction_id: str,
        bidder: str,
        include_preview: bool = False,
    ) -> Tuple[Optional[Segment], Optional[QueryError]]:
        """
        Look up a bidder's viewing window.

        Only the allocation made at completion is returned by default. Before
        that, segments are a bidding-time preview that completion replaces;
        pass include_preview=True to read them anyway.
        """
        entry = self._auctions.get(auction_id)
        if not entry:
            return None, QueryError.UNKNOWN_AUCTION
        snapshot = entry.snapshot
        if not (include_preview or snapshot.segments_final):
            return None, QueryError.NO_SEGMENT
        segment = snapshot.segment_for(bidder)
        if segment is None:
            return None, QueryError.NO_SEGMENT
        return segment, None

    def listings_by_creator(self, creator: str) -> List[AuctionSnapshot]:
        valid, _ = validate_identity(creator)
        if not valid:
            return []
        return [s for s in self.auctions() if s.is_listing_of(creator)]

    def purchased_by(self, identity: str) -> List[AuctionSnapshot]:
        """Auctions the identity owns, excluding its own listings."""
        valid, _ = validate_identity(identity)
        if not valid:
            return []
        return [s for s in self.auctions() if s.owns(identity) and not s.is_listing_of(identity)]

    def creator_summary(self, creator: str) -> dict:
        listings = self.listings_by_creator(creator)
        return {
            "listed": len(listings),
            "active": sum(1 for s in listings if s.phase == AuctionPhase.OPEN),
            "awaiting_work": sum(
                1 for s in listings if s.phase in (AuctionPhase.ENDED, AuctionPhase.IN_PROGRESS)
            ),
            "completed": sum(1 for s in listings if s.phase >= AuctionPhase.COMPLETED),
        }

    def stats(self) -> dict:
        """Get engine statistics."""
        snapshots = self.auctions()
        by_phase = {phase.name: 0 for phase in AuctionPhase}
        for snapshot in snapshots:
            by_phase[snapshot.phase.name] += 1
        return {
            "auctions": len(snapshots),
            "by_phase": by_phase,
            "total_bids": sum(len(s.ranked_bids) for s in snapshots),
        }
