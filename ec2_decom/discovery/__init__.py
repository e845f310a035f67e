"""Resource discovery for an EC2 instance.

Classes:
    DiscoveryEngine: Runs every per-kind query and assembles the inventory
    BaseDiscoveryQuery: Base class for per-kind queries
"""

from __future__ import annotations

from .engine import DiscoveryEngine
from .queries import BaseDiscoveryQuery, default_queries

__all__ = [
    "DiscoveryEngine",
    "BaseDiscoveryQuery",
    "default_queries",
]
