"""
Demo data loaded into an empty store on first use.
"""

from typing import List, Tuple

from pydantic import BaseModel

from app.core.security import hash_password
from app.storage import records as r
from app.storage.base import DRIVERS, TAXI_STATS, TAXIS, USERS, Kind, new_id
from app.storage.records import utcnow

DEMO_ADMIN_EMAIL = "admin@savezar.com"
DEMO_ADMIN_PASSWORD = "password"

def demo_records() -> List[Tuple[Kind, BaseModel]]:
    """One admin user and one online taxi with its driver and statistics.

    Ids are assigned up front so the taxi and driver reference each other
    without a follow-up update.
    """
    now = utcnow()
    taxi_id, driver_id = new_id(), new_id()

    user = r.User(
        id=new_id(),
        email=DEMO_ADMIN_EMAIL,
        password=hash_password(DEMO_ADMIN_PASSWORD),
        name="SaveZar Admin",
        created_at=now,
    )
    taxi = r.Taxi(
        id=taxi_id,
        name="Taxi 1",
        license_plate="LAG-001-XX",
        driver_id=driver_id,
        current_latitude=6.5244,
        current_longitude=3.3792,
        current_location="Akina Jola St, Victoria Island",
        is_online=True,
    )
    driver = r.Driver(
        id=driver_id,
        name="Tshepo Trust",
        age=36,
        phone="+234-801-234-5678",
        rating=4.2,
        avg_passengers_per_day=235,
        photo_url="https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=200&h=200&fit=crop&crop=face",
        taxi_id=taxi_id,
        is_active=True,
    )
    stats = r.TaxiStats(
        id=new_id(),
        taxi_id=taxi_id,
        date=now,
        passengers_today=140,
        distance_traveled=146.5,
        route_efficiency=87.2,
        fuel_consumption=34.8,
        total_earnings=28500,
    )
    return [(USERS, user), (TAXIS, taxi), (DRIVERS, driver), (TAXI_STATS, stats)]
