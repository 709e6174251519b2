"""
slotbid

Auction settlement for bid-for-access work sessions:
- Ranked bid ledger with monotonic raises
- Lifecycle state machine from bidding to unlocked artifact
- Proportional, randomly placed viewing windows for multiple winners
"""

__version__ = "0.1.0"
