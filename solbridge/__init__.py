"""Solana -> Base bridging engine with an optional FastAPI wrapper."""

__version__ = "0.1.0"
