"""Auction engine core"""
from slotbid.core.config import EngineConfig, load_config
from slotbid.core.engine import AuctionEngine

__all__ = [
    "EngineConfig",
    "load_config",
    "AuctionEngine",
]
