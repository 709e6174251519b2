"""
Error codes returned by the auction engine.

Caller-facing failures are values: every public operation returns a
(result, error) pair where error is one of the enums below or None.
Only broken internal invariants are raised.
"""

from enum import IntEnum


class BidError(IntEnum):
    """Why a bid was rejected."""
    BELOW_FLOOR = 0        # Amount does not beat current price + increment
    AUCTION_NOT_OPEN = 1   # Bidding phase is over
    UNKNOWN_AUCTION = 2    # No such auction id
    INVALID_BID = 3        # Malformed bidder or amount


class LifecycleError(IntEnum):
    """Why a phase transition was refused."""
    INVALID_TRANSITION = 0  # Not the next phase (includes repeats)
    NO_WINNERS = 1          # Work cannot start without winners
    MISSING_ARTIFACT = 2    # Completion needs an artifact duration
    UNKNOWN_AUCTION = 3
    NOT_CREATOR = 4         # Only the listing's creator may drive the work
    ARTIFACT_TOO_SHORT = 5  # Fewer seconds than winners to share them


class QueryError(IntEnum):
    """Why a lookup returned nothing."""
    UNKNOWN_AUCTION = 0
    NO_SEGMENT = 1


class ListingError(IntEnum):
    """Why an auction could not be created."""
    INVALID_LISTING = 0
    DUPLICATE_AUCTION = 1


class AllocationInvariantViolation(AssertionError):
    """
    The allocator produced (or would produce) an invalid partition.

    Never caused by valid input; indicates a logic bug.
    """
