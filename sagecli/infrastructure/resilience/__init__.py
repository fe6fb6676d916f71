"""API Resilience Implementations.

Contains the bounded request queue shared by every outbound AI call and
the retry executor applying exponential backoff on transient failures.
Bounded Context: API Resilience
"""
