"""
Taxi statistics refresh.

Live telemetry is an external feed. ``TelemetrySource`` is the hook it plugs
into; ``SimulatedTelemetry`` stands in for it with small random movements
so the dashboard has something to show.
"""

import logging
import random
from typing import Dict, Optional, Protocol

from app.storage.base import BaseStorage
from app.storage.records import TaxiStats

logger = logging.getLogger(__name__)

MAX_ROUTE_EFFICIENCY = 100.0

class TelemetrySource(Protocol):
    """Produces per-field deltas for a taxi's statistics snapshot."""

    def deltas(self, stats: TaxiStats) -> Dict[str, float]:
        ...

class SimulatedTelemetry:
    """Pseudo-random deltas for demo and tests."""

    def __init__(self, seed: Optional[int] = None):
        self.rng = random.Random(seed)

    def deltas(self, stats: TaxiStats) -> Dict[str, float]:
        return {
            "passengers_today": self.rng.randint(0, 9),
            "distance_traveled": self.rng.uniform(0, 5),
            "route_efficiency": self.rng.uniform(-1, 1),
            "fuel_consumption": self.rng.uniform(-1, 1),
            "total_earnings": self.rng.uniform(0, 1000),
        }

def apply_deltas(stats: TaxiStats, deltas: Dict[str, float]) -> Dict[str, float]:
    """New field values with every metric clamped to be non-negative and
    route efficiency capped at 100."""
    updated = {}
    for field, delta in deltas.items():
        value = max(getattr(stats, field) + delta, 0)
        if field == "route_efficiency":
            value = min(value, MAX_ROUTE_EFFICIENCY)
        if field == "passengers_today":
            value = int(value)
        else:
            value = round(value, 2)
        updated[field] = value
    return updated

async def refresh_taxi_stats(
    storage: BaseStorage, taxi_id: str, source: TelemetrySource
) -> Optional[TaxiStats]:
    """Apply one telemetry reading to a taxi's snapshot; None if it has none."""
    stats = await storage.get_stats_by_taxi_id(taxi_id)
    if stats is None:
        return None

    updated = await storage.update_taxi_stats(stats.id, apply_deltas(stats, source.deltas(stats)))
    logger.info(f"Statistics refreshed for taxi {taxi_id}")
    return updated
