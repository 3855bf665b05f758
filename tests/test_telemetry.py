import unittest
from datetime import datetime, timezone

from app.services.telemetry import SimulatedTelemetry, apply_deltas, refresh_taxi_stats
from app.storage.memory import MemoryStorage
from app.storage.records import TaxiStats

def snapshot(**overrides):
    values = dict(
        id="s1",
        taxi_id="t1",
        date=datetime(2025, 1, 1, tzinfo=timezone.utc),
        passengers_today=10,
        distance_traveled=1.0,
        route_efficiency=99.5,
        fuel_consumption=0.4,
        total_earnings=100.0,
    )
    values.update(overrides)
    return TaxiStats(**values)

class FixedTelemetry:
    def __init__(self, deltas):
        self._deltas = deltas

    def deltas(self, stats):
        return dict(self._deltas)

class ApplyDeltasTests(unittest.TestCase):
    def test_values_are_clamped(self):
        updated = apply_deltas(
            snapshot(),
            {"route_efficiency": 2.0, "fuel_consumption": -1.0, "passengers_today": -50},
        )
        self.assertEqual(updated["route_efficiency"], 100.0)
        self.assertEqual(updated["fuel_consumption"], 0)
        self.assertEqual(updated["passengers_today"], 0)

    def test_passengers_stay_integral(self):
        updated = apply_deltas(snapshot(), {"passengers_today": 3})
        self.assertEqual(updated["passengers_today"], 13)
        self.assertIsInstance(updated["passengers_today"], int)

    def test_simulated_deltas_are_reproducible(self):
        stats = snapshot()
        self.assertEqual(SimulatedTelemetry(seed=1).deltas(stats), SimulatedTelemetry(seed=1).deltas(stats))

    def test_simulated_deltas_ranges(self):
        source = SimulatedTelemetry(seed=3)
        for _ in range(50):
            deltas = source.deltas(snapshot())
            self.assertTrue(0 <= deltas["passengers_today"] <= 9)
            self.assertTrue(0 <= deltas["distance_traveled"] <= 5)
            self.assertTrue(-1 <= deltas["route_efficiency"] <= 1)
            self.assertTrue(0 <= deltas["total_earnings"] <= 1000)

class RefreshTaxiStatsTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.storage = MemoryStorage()
        self.taxi = (await self.storage.list_taxis())[0]

    async def test_refresh_persists_new_snapshot(self):
        before = await self.storage.get_stats_by_taxi_id(self.taxi.id)
        updated = await refresh_taxi_stats(
            self.storage, self.taxi.id, FixedTelemetry({"passengers_today": 5, "total_earnings": 250.0})
        )
        self.assertEqual(updated.passengers_today, before.passengers_today + 5)
        self.assertEqual(updated.total_earnings, before.total_earnings + 250.0)
        self.assertEqual(updated.distance_traveled, before.distance_traveled)

        stored = await self.storage.get_stats_by_taxi_id(self.taxi.id)
        self.assertEqual(stored.model_dump(), updated.model_dump())

    async def test_refresh_unknown_taxi(self):
        self.assertIsNone(await refresh_taxi_stats(self.storage, "missing", SimulatedTelemetry(seed=1)))

if __name__ == "__main__":
    unittest.main()
