import asyncio
import shutil
import tempfile
import unittest
from datetime import timedelta

from app.core.errors import ValidationError
from app.core.security import verify_password
from app.storage.memory import MemoryStorage
from app.storage.seed import DEMO_ADMIN_EMAIL, DEMO_ADMIN_PASSWORD
from app.storage.sql import SqlStorage

def recording_data(taxi_id, **overrides):
    data = {
        "taxiId": taxi_id,
        "filename": "broadcast-001.webm",
        "fileUrl": "/uploads/broadcast-001.webm",
        "duration": 42.5,
        "fileSize": 1048576,
    }
    data.update(overrides)
    return data

class StorageContractTests:
    """Behaviour every backend must share. Mixed into a TestCase per backend."""

    def make_storage(self, seed_demo_data=True):
        raise NotImplementedError

    async def asyncSetUp(self):
        self.storage = self.make_storage()
        await self.storage.initialize()
        self.taxi = (await self.storage.list_taxis())[0]

    async def asyncTearDown(self):
        await self.storage.close()

    async def test_demo_data_is_seeded(self):
        admin = await self.storage.get_user_by_email(DEMO_ADMIN_EMAIL)
        self.assertIsNotNone(admin)
        self.assertNotEqual(admin.password, DEMO_ADMIN_PASSWORD)
        self.assertTrue(verify_password(DEMO_ADMIN_PASSWORD, admin.password))

        driver = await self.storage.get_driver_by_taxi_id(self.taxi.id)
        self.assertEqual(driver.name, "Tshepo Trust")
        self.assertEqual(self.taxi.driver_id, driver.id)

        stats = await self.storage.get_stats_by_taxi_id(self.taxi.id)
        self.assertEqual(stats.passengers_today, 140)

    async def test_concurrent_first_calls_seed_once(self):
        storage = self.make_storage()
        try:
            await asyncio.gather(
                storage.list_users(),
                storage.get_user_by_email(DEMO_ADMIN_EMAIL),
                storage.initialize(),
                storage.list_taxis(),
            )
            await storage.initialize()
            users = await storage.list_users()
            admins = [u for u in users if u.email == DEMO_ADMIN_EMAIL]
            self.assertEqual(len(admins), 1)
            self.assertEqual(len(await storage.list_taxis()), 1)
        finally:
            await storage.close()

    async def test_seeding_can_be_disabled(self):
        storage = self.make_storage(seed_demo_data=False)
        try:
            self.assertEqual(await storage.list_users(), [])
            self.assertEqual(await storage.list_taxis(), [])
        finally:
            await storage.close()

    async def test_create_user_with_duplicate_email_fails(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.storage.create_user(
                {"email": DEMO_ADMIN_EMAIL, "password": "x", "name": "Copy"}
            )
        self.assertEqual(ctx.exception.errors[0]["field"], "email")

    async def test_create_user_assigns_fresh_id(self):
        existing = {u.id for u in await self.storage.list_users()}
        user = await self.storage.create_user(
            {"email": "dispatch@savezar.com", "password": "hash", "name": "Dispatch"}
        )
        self.assertTrue(user.id)
        self.assertNotIn(user.id, existing)
        self.assertIsNotNone(user.created_at)
        self.assertEqual((await self.storage.get_user(user.id)).email, "dispatch@savezar.com")

    async def test_create_user_rejects_malformed_email(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.storage.create_user({"email": "not-an-email", "password": "x", "name": "N"})
        self.assertIn("email", [e["field"] for e in ctx.exception.errors])

    async def test_create_rejects_missing_required_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.storage.create_driver({"name": "No Age", "phone": "123"})
        fields = {e["field"] for e in ctx.exception.errors}
        self.assertIn("age", fields)
        self.assertIn("taxiId", fields)

    async def test_create_applies_defaults(self):
        taxi = await self.storage.create_taxi({"name": "Taxi 2", "licensePlate": "LAG-002-XX"})
        self.assertFalse(taxi.is_online)
        self.assertIsNone(taxi.driver_id)
        self.assertIsNone(taxi.current_latitude)

        driver = await self.storage.create_driver(
            {"name": "Ada Obi", "age": 29, "phone": "+234-802-000-0000", "taxiId": taxi.id}
        )
        self.assertEqual(driver.rating, 0)
        self.assertEqual(driver.avg_passengers_per_day, 0)
        self.assertTrue(driver.is_active)
        self.assertIsNone(driver.photo_url)

    async def test_empty_patch_returns_record_unchanged(self):
        before = await self.storage.get_driver_by_taxi_id(self.taxi.id)
        after = await self.storage.update_driver(before.id, {})
        self.assertEqual(after.model_dump(), before.model_dump())

    async def test_patch_changes_only_given_field(self):
        before = await self.storage.get_driver_by_taxi_id(self.taxi.id)
        after = await self.storage.update_driver(before.id, {"rating": 4.8})

        self.assertEqual(after.rating, 4.8)
        expected = before.model_dump()
        expected["rating"] = 4.8
        self.assertEqual(after.model_dump(), expected)
        self.assertEqual((await self.storage.get_driver(before.id)).rating, 4.8)

    async def test_patch_rejects_null_for_required_field(self):
        with self.assertRaises(ValidationError):
            await self.storage.update_taxi(self.taxi.id, {"name": None})

    async def test_patch_validates_types_of_given_fields(self):
        with self.assertRaises(ValidationError):
            await self.storage.update_taxi_stats(
                (await self.storage.get_stats_by_taxi_id(self.taxi.id)).id,
                {"passengersToday": "many"},
            )

    async def test_patch_can_clear_nullable_field(self):
        taxi = await self.storage.update_taxi(self.taxi.id, {"currentLocation": None})
        self.assertIsNone(taxi.current_location)
        self.assertEqual(taxi.current_latitude, self.taxi.current_latitude)

    async def test_unknown_ids_return_none(self):
        self.assertIsNone(await self.storage.get_user("missing"))
        self.assertIsNone(await self.storage.get_driver("missing"))
        self.assertIsNone(await self.storage.get_taxi("missing"))
        self.assertIsNone(await self.storage.get_taxi_with_driver("missing"))
        self.assertIsNone(await self.storage.get_taxi_stats("missing"))
        self.assertIsNone(await self.storage.get_recording("missing"))
        self.assertIsNone(await self.storage.get_available_driver("missing"))
        self.assertIsNone(await self.storage.get_user_by_email("nobody@savezar.com"))
        self.assertIsNone(await self.storage.get_stats_by_taxi_id("missing"))

    async def test_update_unknown_id_returns_none(self):
        self.assertIsNone(await self.storage.update_taxi("missing", {"isOnline": True}))
        self.assertIsNone(await self.storage.update_stats_by_taxi_id("missing", {"passengersToday": 1}))

    async def test_invalid_patch_for_unknown_id_is_a_validation_error(self):
        with self.assertRaises(ValidationError):
            await self.storage.update_taxi_stats("missing", {"passengersToday": "x"})

    async def test_delete_succeeds_exactly_once(self):
        recording = await self.storage.create_recording(recording_data(self.taxi.id))
        self.assertTrue(await self.storage.delete_recording(recording.id))
        self.assertFalse(await self.storage.delete_recording(recording.id))
        self.assertIsNone(await self.storage.get_recording(recording.id))

    async def test_recording_defaults_and_lookup_by_taxi(self):
        recording = await self.storage.create_recording(recording_data(self.taxi.id))
        self.assertEqual(recording.mime_type, "video/webm")
        self.assertFalse(recording.is_processed)
        self.assertIsNotNone(recording.recorded_at)

        await self.storage.create_recording(recording_data("other-taxi", filename="b.webm"))
        by_taxi = await self.storage.list_recordings_by_taxi_id(self.taxi.id)
        self.assertEqual([r.id for r in by_taxi], [recording.id])

    async def test_taxi_with_driver_resolves_driver(self):
        taxi = await self.storage.get_taxi_with_driver(self.taxi.id)
        self.assertIsNotNone(taxi.driver)
        self.assertEqual(taxi.driver.id, self.taxi.driver_id)

    async def test_taxi_with_dangling_driver_has_no_driver(self):
        taxi = await self.storage.create_taxi(
            {"name": "Ghost", "licensePlate": "LAG-404-XX", "driverId": "gone"}
        )
        combined = await self.storage.get_taxi_with_driver(taxi.id)
        self.assertIsNotNone(combined)
        self.assertIsNone(combined.driver)

    async def test_license_plate_is_unique(self):
        with self.assertRaises(ValidationError):
            await self.storage.create_taxi({"name": "Clone", "licensePlate": self.taxi.license_plate})

        other = await self.storage.create_taxi({"name": "Taxi 3", "licensePlate": "LAG-003-XX"})
        with self.assertRaises(ValidationError):
            await self.storage.update_taxi(other.id, {"licensePlate": self.taxi.license_plate})

    async def test_one_driver_per_taxi(self):
        with self.assertRaises(ValidationError):
            await self.storage.create_driver(
                {"name": "Second", "age": 40, "phone": "555", "taxiId": self.taxi.id}
            )

    async def test_driver_is_linked_to_at_most_one_taxi(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.storage.create_taxi(
                {"name": "Taxi 2", "licensePlate": "LAG-002-XX", "driverId": self.taxi.driver_id}
            )
        self.assertEqual(ctx.exception.errors[0]["field"], "driverId")

        other = await self.storage.create_taxi({"name": "Taxi 3", "licensePlate": "LAG-003-XX"})
        with self.assertRaises(ValidationError):
            await self.storage.update_taxi(other.id, {"driverId": self.taxi.driver_id})

        # Unassigned taxis do not collide with each other
        spare = await self.storage.create_taxi({"name": "Taxi 4", "licensePlate": "LAG-004-XX"})
        self.assertIsNone(spare.driver_id)

    async def test_email_uniqueness_ignores_case(self):
        with self.assertRaises(ValidationError):
            await self.storage.create_user(
                {"email": DEMO_ADMIN_EMAIL.upper(), "password": "x", "name": "Shouting"}
            )

        user = await self.storage.create_user(
            {"email": "Dispatch@SaveZar.com", "password": "hash", "name": "Dispatch"}
        )
        self.assertEqual(user.email, "dispatch@savezar.com")
        found = await self.storage.get_user_by_email("DISPATCH@savezar.com")
        self.assertEqual(found.id, user.id)

    async def test_recording_accepts_files_over_two_gibibytes(self):
        size = 5 * 1024 ** 3
        recording = await self.storage.create_recording(recording_data(self.taxi.id, fileSize=size))
        self.assertEqual((await self.storage.get_recording(recording.id)).file_size, size)

    async def test_one_stats_snapshot_per_taxi(self):
        with self.assertRaises(ValidationError):
            await self.storage.create_taxi_stats({"taxiId": self.taxi.id})

    async def test_deleting_taxi_removes_stats_but_keeps_driver(self):
        driver = await self.storage.get_driver_by_taxi_id(self.taxi.id)
        self.assertTrue(await self.storage.delete_taxi(self.taxi.id))

        self.assertIsNone(await self.storage.get_stats_by_taxi_id(self.taxi.id))
        self.assertIsNotNone(await self.storage.get_driver(driver.id))

    async def test_deleting_driver_detaches_taxi(self):
        self.assertTrue(await self.storage.delete_driver(self.taxi.driver_id))
        taxi = await self.storage.get_taxi(self.taxi.id)
        self.assertIsNone(taxi.driver_id)

    async def test_stats_patch_by_taxi_id_keeps_other_fields(self):
        before = await self.storage.get_stats_by_taxi_id(self.taxi.id)
        after = await self.storage.update_stats_by_taxi_id(self.taxi.id, {"passengersToday": 150})

        self.assertEqual(after.passengers_today, 150)
        self.assertEqual(after.id, before.id)
        self.assertEqual(after.date, before.date)
        self.assertEqual(after.total_earnings, before.total_earnings)
        self.assertEqual(after.distance_traveled, before.distance_traveled)

    async def test_available_driver_validation(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.storage.create_available_driver(
                {"fullName": "Too Young", "age": 17, "drivingExperience": 0, "availability": "weekends"}
            )
        self.assertEqual(ctx.exception.errors[0]["field"], "age")

        entry = await self.storage.create_available_driver(
            {"fullName": "Kemi Ade", "age": 25, "drivingExperience": 3,
             "availability": "full-time", "email": "", "phone": "+234-803-111-2222"}
        )
        self.assertTrue(entry.is_available)
        self.assertIsNone(entry.email)
        self.assertIsNotNone(entry.registered_at)
        self.assertIn(entry.id, [e.id for e in await self.storage.list_available_drivers()])

    async def test_sessions_expire_and_can_be_deleted(self):
        admin = await self.storage.get_user_by_email(DEMO_ADMIN_EMAIL)

        live = await self.storage.create_session(admin.id, timedelta(hours=1))
        self.assertEqual((await self.storage.get_session(live.id)).user_id, admin.id)
        self.assertTrue(await self.storage.delete_session(live.id))
        self.assertIsNone(await self.storage.get_session(live.id))

        stale = await self.storage.create_session(admin.id, timedelta(seconds=-1))
        self.assertIsNone(await self.storage.get_session(stale.id))

        await self.storage.create_session(admin.id, timedelta(seconds=-1))
        await self.storage.create_session(admin.id, timedelta(hours=1))
        self.assertEqual(await self.storage.purge_expired_sessions(), 1)

    async def test_deleting_user_ends_their_sessions(self):
        user = await self.storage.create_user(
            {"email": "temp@savezar.com", "password": "hash", "name": "Temp"}
        )
        session = await self.storage.create_session(user.id, timedelta(hours=1))
        self.assertTrue(await self.storage.delete_user(user.id))
        self.assertIsNone(await self.storage.get_session(session.id))

class MemoryStorageTests(StorageContractTests, unittest.IsolatedAsyncioTestCase):
    def make_storage(self, seed_demo_data=True):
        return MemoryStorage(seed_demo_data=seed_demo_data)

    async def test_returned_records_are_copies(self):
        taxi = await self.storage.get_taxi(self.taxi.id)
        taxi.name = "Mutated"
        self.assertEqual((await self.storage.get_taxi(self.taxi.id)).name, "Taxi 1")

    async def test_reset_allows_reseeding(self):
        self.storage.reset()
        self.assertEqual(len(await self.storage.list_users()), 1)

class SqlStorageTests(StorageContractTests, unittest.IsolatedAsyncioTestCase):
    """
    Uses a throwaway SQLite file via aiosqlite so concurrent calls get
    their own connections, as they would against PostgreSQL.
    """

    def make_storage(self, seed_demo_data=True):
        directory = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, directory, True)
        return SqlStorage(f"sqlite+aiosqlite:///{directory}/fleet.db", seed_demo_data=seed_demo_data)

    def test_requires_database_url(self):
        with self.assertRaises(ValueError):
            SqlStorage(None)

if __name__ == "__main__":
    unittest.main()
