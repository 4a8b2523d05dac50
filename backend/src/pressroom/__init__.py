"""Pressroom: entity query composition and tiered serialization for
editorial workflows."""

__version__ = "0.1.0"
