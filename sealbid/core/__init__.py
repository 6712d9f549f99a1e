"""Core engine: storage, auctions, session identity, backends and the service facade."""
