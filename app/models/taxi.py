"""
Taxi model and its per-taxi statistics snapshot.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime
from app.core.database import Base

class TaxiRow(Base):
    """Fleet vehicle with its last reported position."""

    __tablename__ = "taxis"

    id = Column(String(32), primary_key=True)
    name = Column(String, nullable=False)
    license_plate = Column(String, unique=True, index=True, nullable=False)
    # Soft reference, no FK constraint; at most one taxi per driver
    driver_id = Column(String(32), unique=True, nullable=True)

    # Location data
    current_latitude = Column(Float, nullable=True)
    current_longitude = Column(Float, nullable=True)
    current_location = Column(String, nullable=True)

    is_online = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<TaxiRow(id={self.id}, plate={self.license_plate}, online={self.is_online})>"

class TaxiStatsRow(Base):
    """Mutable daily performance snapshot, one row per taxi."""

    __tablename__ = "taxi_stats"

    id = Column(String(32), primary_key=True)
    taxi_id = Column(String(32), unique=True, index=True, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False)

    passengers_today = Column(Integer, nullable=False, default=0)
    distance_traveled = Column(Float, nullable=False, default=0)
    route_efficiency = Column(Float, nullable=False, default=0)
    fuel_consumption = Column(Float, nullable=False, default=0)
    total_earnings = Column(Float, nullable=False, default=0)

    def __repr__(self):
        return f"<TaxiStatsRow(taxi_id={self.taxi_id}, passengers={self.passengers_today})>"
