# waypoint - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from waypoint.core.ports.index import (
    FieldEquals,
    HasTemplate,
    InCollection,
    IndexFilter,
    IndexPort,
)
from waypoint.core.ports.store import StorePort
from waypoint.core.ports.time import ClockPort

__all__ = [
    # Store
    "StorePort",
    # Index
    "FieldEquals",
    "HasTemplate",
    "InCollection",
    "IndexFilter",
    "IndexPort",
    # Time
    "ClockPort",
]
