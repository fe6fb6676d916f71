"""Caching Service Implementation.

Provides the concrete implementation of the CacheService interface:
an in-memory level with an optional file-backed level, both time-boxed.
Bounded Context: Cache Management
"""
