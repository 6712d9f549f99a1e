"""
sealbid - Private Auction Engine

A client-side library for timed sealed-bid auctions:
- Persistent key-value storage with a durable SQLite sink
- Auction repository and sealed-bid resolution
- Session identity state machine (demo and external wallets)
- Service facade routing to demo or remote backends
"""

__version__ = "0.1.0"
