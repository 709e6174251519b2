"""
Auction Lifecycle - phase state machine of a listed work session.

Phases advance strictly forward, one step at a time:

    OPEN -> ENDED -> IN_PROGRESS -> COMPLETED -> UNLOCKED

The legal steps are kept as a directed graph. A transition is legal iff it
is an edge of that graph, which also rejects repeating a transition that
already happened (there are no self-loops).
"""

from enum import IntEnum
from typing import Optional, Sequence, Set

import networkx as nx

from slotbid.core.auction.errors import LifecycleError


class AuctionPhase(IntEnum):
    """Lifecycle stage of an auction."""
    OPEN = 0          # Accepting bids
    ENDED = 1         # Bidding closed, winners frozen
    IN_PROGRESS = 2   # Creator is recording the session
    COMPLETED = 3     # Artifact attached, segments allocated
    UNLOCKED = 4      # Winners may watch (terminal)


def _build_phase_graph() -> nx.DiGraph:
    graph = nx.DiGraph()
    graph.add_nodes_from(AuctionPhase)
    graph.add_edges_from([
        (AuctionPhase.OPEN, AuctionPhase.ENDED),
        (AuctionPhase.ENDED, AuctionPhase.IN_PROGRESS),
        (AuctionPhase.IN_PROGRESS, AuctionPhase.COMPLETED),
        (AuctionPhase.COMPLETED, AuctionPhase.UNLOCKED),
    ])
    if not nx.is_directed_acyclic_graph(graph):
        raise RuntimeError("Phase graph must not contain cycles")
    return graph


PHASE_GRAPH = _build_phase_graph()

# Phases whose transitions only the listing's creator may trigger
CREATOR_ONLY_TARGETS = frozenset({
    AuctionPhase.IN_PROGRESS,
    AuctionPhase.COMPLETED,
    AuctionPhase.UNLOCKED,
})


def can_transition(current: AuctionPhase, target: AuctionPhase) -> bool:
    """Whether target is the next phase after current."""
    return PHASE_GRAPH.has_edge(current, target)


def check_transition(current: AuctionPhase, target: AuctionPhase) -> Optional[LifecycleError]:
    """Return INVALID_TRANSITION unless current -> target is a legal step."""
    if can_transition(current, target):
        return None
    return LifecycleError.INVALID_TRANSITION


def next_phases(current: AuctionPhase) -> Set[AuctionPhase]:
    return set(PHASE_GRAPH.successors(current))


def reachable_phases(current: AuctionPhase) -> Set[AuctionPhase]:
    """Every phase that can still be reached from current."""
    return set(nx.descendants(PHASE_GRAPH, current))


def is_terminal(phase: AuctionPhase) -> bool:
    return PHASE_GRAPH.out_degree(phase) == 0


# =============================================================================
# Derived access rules
# =============================================================================


def owns(identity: str, winners: Sequence[str], phase: AuctionPhase) -> bool:
    """A winner owns the artifact once bidding has ended."""
    return phase >= AuctionPhase.ENDED and identity in winners


def can_view(identity: str, winners: Sequence[str], phase: AuctionPhase) -> bool:
    """Owners may watch only after the creator unlocks the artifact."""
    return phase == AuctionPhase.UNLOCKED and identity in winners
