"""Aggregator client boundary.

Usage:
    from finsync.infrastructure.aggregator import ResilientAggregatorClient
"""

from finsync.infrastructure.aggregator.resilient_client import ResilientAggregatorClient

__all__ = ["ResilientAggregatorClient"]
