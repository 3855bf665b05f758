"""
Active fleet drivers and the recruiting pool of available drivers.
"""

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text
from app.core.database import Base

class DriverRow(Base):
    """Driver assigned to a taxi."""

    __tablename__ = "drivers"

    id = Column(String(32), primary_key=True)
    name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    phone = Column(String, nullable=False)
    rating = Column(Float, nullable=False, default=0)
    avg_passengers_per_day = Column(Integer, nullable=False, default=0)
    photo_url = Column(String, nullable=True)
    # One driver per taxi
    taxi_id = Column(String(32), unique=True, index=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<DriverRow(id={self.id}, name={self.name}, taxi_id={self.taxi_id})>"

class AvailableDriverRow(Base):
    """Recruiting pool entry submitted through the public registration form."""

    __tablename__ = "available_drivers"

    id = Column(String(32), primary_key=True)
    full_name = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    driving_experience = Column(Integer, nullable=False)
    availability = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    registered_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<AvailableDriverRow(id={self.id}, name={self.full_name})>"
